"""
Core application utilities for settings, logging, errors and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- Logging configuration with correlation ids
- The domain error hierarchy shared by repositories, services and routes
- Dependency helpers (database session, category services)
"""
