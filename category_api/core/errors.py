"""Domain error hierarchy raised by the category repositories and services."""

from __future__ import annotations

from typing import Any, Optional


class CategoryError(Exception):
    """Base class for category domain failures."""

    error_type = "category_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> Optional[dict[str, Any]]:
        return None


class NotFoundError(CategoryError):
    """No category row matches the requested id."""

    error_type = "not_found"

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id

    def details(self) -> dict[str, Any]:
        return {"id": self.entity_id}


class VersionConflictError(CategoryError):
    """The row exists but its version moved past the one the caller read."""

    error_type = "version_conflict"

    def __init__(self, entity: str, entity_id: Any, expected_version: int) -> None:
        super().__init__(
            f"{entity} {entity_id} was modified concurrently; re-fetch and retry"
        )
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version

    def details(self) -> dict[str, Any]:
        return {"id": self.entity_id, "expected_version": self.expected_version}


class ValidationError(CategoryError):
    """Input rejected before reaching storage."""

    error_type = "validation_error"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.reason = message

    def details(self) -> dict[str, Any]:
        return {"field": self.field, "message": self.reason}


class StorageError(CategoryError):
    """
    Unexpected storage fault.

    The original driver/SQLAlchemy exception is kept on ``cause`` and is also
    chained as ``__cause__`` by the raising site.
    """

    error_type = "storage_error"
    operation = "access"

    def __init__(self, entity: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"failed to {self.operation} {entity}")
        self.entity = entity
        self.cause = cause


class CreateFailedError(StorageError):
    operation = "create"


class ReadFailedError(StorageError):
    operation = "read"


class UpdateFailedError(StorageError):
    operation = "update"


class DeleteFailedError(StorageError):
    operation = "delete"
