"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy statements for each category table and
translate storage outcomes into the domain errors in category_api.core.errors.
"""

from .category import (  # noqa: F401
    CategoryRepository,
    SupplierCategoryRepository,
    UserCategoryRepository,
)
