"""
ORM models for category entities.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .category import (  # noqa: F401
    CategoryMixin,
    SupplierCategory,
    UserCategory,
)
