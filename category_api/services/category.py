from __future__ import annotations

import logging
from typing import Generic, List, Type

from sqlalchemy.ext.asyncio import AsyncSession

from category_api.core.errors import NotFoundError, StorageError, VersionConflictError
from category_api.repositories.category import (
    CategoryRepository,
    ModelT,
    SupplierCategoryRepository,
    UserCategoryRepository,
)
from category_api.schemas.category import CategoryCreate, CategoryUpdate
from category_api.services.validation import validate_category, validate_category_id

logger = logging.getLogger(__name__)


class CategoryService(Generic[ModelT]):
    """
    Orchestrates category requests for one category kind.

    Validates input, calls the repository, and logs each outcome. Domain errors
    are re-raised unchanged; mapping them to responses is the API layer's job.
    Conflicts are not retried: only the client knows whether its change still
    applies to the newer version.
    """

    def __init__(self, session: AsyncSession, repository_cls: Type[CategoryRepository[ModelT]]) -> None:
        self.session = session
        self.repo = repository_cls(session)
        self.label = self.repo.entity_name

    # PUBLIC_INTERFACE
    async def create(self, payload: CategoryCreate) -> ModelT:
        """Validate and persist a new category."""
        name, description = validate_category(payload.name, payload.description)
        logger.info("Creating %s name=%r", self.label, name)
        try:
            created = await self.repo.create(self.repo.model(name=name, description=description))
        except StorageError:
            logger.exception("Failed to create %s name=%r", self.label, name)
            raise
        logger.info("Created %s id=%s version=%s", self.label, created.id, created.version)
        return created

    # PUBLIC_INTERFACE
    async def get(self, category_id: int) -> ModelT:
        validate_category_id(category_id)
        try:
            return await self.repo.get_by_id(category_id)
        except NotFoundError:
            logger.warning("%s id=%s not found", self.label, category_id)
            raise
        except StorageError:
            logger.exception("Failed to read %s id=%s", self.label, category_id)
            raise

    # PUBLIC_INTERFACE
    async def list(self) -> List[ModelT]:
        try:
            items = await self.repo.get_all()
        except StorageError:
            logger.exception("Failed to list %s rows", self.label)
            raise
        logger.info("Listed %d %s rows", len(items), self.label)
        return items

    # PUBLIC_INTERFACE
    async def update(self, category_id: int, payload: CategoryUpdate) -> ModelT:
        """
        Replace name/description of a category the caller read at ``payload.version``.

        Raises:
            NotFoundError: the id does not exist.
            VersionConflictError: someone else updated it first; re-fetch and retry.
            UpdateFailedError: unexpected storage fault.
        """
        validate_category_id(category_id)
        name, description = validate_category(payload.name, payload.description)
        logger.info("Updating %s id=%s from version=%s", self.label, category_id, payload.version)
        entity = self.repo.model(
            id=category_id, name=name, description=description, version=payload.version
        )
        try:
            updated = await self.repo.update(entity)
        except NotFoundError:
            logger.warning("%s id=%s not found for update", self.label, category_id)
            raise
        except VersionConflictError:
            logger.warning(
                "Version conflict on %s id=%s (expected version=%s)",
                self.label, category_id, payload.version,
            )
            raise
        except StorageError:
            logger.exception("Failed to update %s id=%s", self.label, category_id)
            raise
        logger.info("Updated %s id=%s to version=%s", self.label, updated.id, updated.version)
        return updated

    # PUBLIC_INTERFACE
    async def delete(self, category_id: int) -> None:
        validate_category_id(category_id)
        try:
            await self.repo.delete(category_id)
        except NotFoundError:
            logger.warning("%s id=%s not found for delete", self.label, category_id)
            raise
        except StorageError:
            logger.exception("Failed to delete %s id=%s", self.label, category_id)
            raise
        logger.info("Deleted %s id=%s", self.label, category_id)


class UserCategoryService(CategoryService):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UserCategoryRepository)


class SupplierCategoryService(CategoryService):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SupplierCategoryRepository)
