"""
Category management service.

Exposes CRUD endpoints for user and supplier categories backed by an async
SQLAlchemy store with optimistic, version-checked updates.
"""

__version__ = "0.1.0"
