"""
Database package initializer exposing configuration, the Database capability
and the declarative Base.
"""

from .base import Base
from .config import get_settings, Settings
from .session import Database, get_async_session, get_database

# Import models to ensure they are registered with SQLAlchemy metadata
# when the db package is imported.
from . import models as models  # noqa: F401

__all__ = [
    "Base",
    "Database",
    "Settings",
    "get_settings",
    "get_async_session",
    "get_database",
    "models",
]
