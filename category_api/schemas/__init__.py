"""
Public Pydantic schemas used by FastAPI routes, services, and tests.

Includes the category payloads and common reusable models such as the
standard error envelope.
"""

from .common import MessageResponse  # noqa: F401
