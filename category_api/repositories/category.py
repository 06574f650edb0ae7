from __future__ import annotations

import asyncio
import logging
from typing import ClassVar, Generic, List, Type, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from category_api.core.errors import (
    CreateFailedError,
    DeleteFailedError,
    NotFoundError,
    ReadFailedError,
    UpdateFailedError,
    VersionConflictError,
)
from category_api.db.models.category import CategoryMixin, SupplierCategory, UserCategory
from .base import BaseRepository

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=CategoryMixin)

# Driver-level statement timeouts surface as asyncio.TimeoutError rather than a DBAPI error.
STORAGE_FAULTS = (SQLAlchemyError, asyncio.TimeoutError)


class CategoryRepository(BaseRepository, Generic[ModelT]):
    """
    Store for one category table.

    Every public method runs in its own transaction and translates storage
    outcomes into category_api.core.errors kinds. Nothing is retried here.
    """

    model: ClassVar[Type[CategoryMixin]]
    entity_name: ClassVar[str] = "category"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def create(self, category: ModelT) -> ModelT:
        """Insert a new category; storage fills id, version and timestamps."""
        try:
            await self.add(category)
            await self.session.flush()
            await self.session.refresh(category)
            await self.commit()
        except STORAGE_FAULTS as exc:
            await self._rollback_after_failure()
            raise CreateFailedError(self.entity_name, exc) from exc
        return category

    async def get_by_id(self, category_id: int) -> ModelT:
        stmt = (
            select(self.model)
            .where(self.model.id == category_id)
            .execution_options(populate_existing=True)
        )
        try:
            row = await self.scalar_one_or_none(stmt)
            await self.commit()
        except STORAGE_FAULTS as exc:
            await self._rollback_after_failure()
            raise ReadFailedError(self.entity_name, exc) from exc
        if row is None:
            raise NotFoundError(self.entity_name, category_id)
        return row

    async def get_all(self) -> List[ModelT]:
        """Return every category in insertion (id) order."""
        stmt = (
            select(self.model)
            .order_by(self.model.id.asc())
            .execution_options(populate_existing=True)
        )
        try:
            rows = list(await self.scalars(stmt))
            await self.commit()
        except STORAGE_FAULTS as exc:
            await self._rollback_after_failure()
            raise ReadFailedError(self.entity_name, exc) from exc
        return rows

    async def exists(self, category_id: int) -> bool:
        """Return whether a row with this id exists, regardless of its version."""
        try:
            found = await self._exists(category_id)
            await self.commit()
        except STORAGE_FAULTS as exc:
            await self._rollback_after_failure()
            raise ReadFailedError(self.entity_name, exc) from exc
        return found

    async def update(self, category: ModelT) -> ModelT:
        """
        Replace name/description if the stored version still equals ``category.version``.

        The compare-and-swap is one UPDATE ... WHERE id AND version statement, so
        the database evaluates the predicate and applies the write atomically.
        When it matches nothing, an existence probe decides between NotFoundError
        (no row) and VersionConflictError (row moved on), and the transaction is
        rolled back. On success the entity carries the committed version and
        timestamps.

        An instance loaded through this session is detached first: its pending
        attribute changes must only ever reach storage through the conditional
        statement, never through a session flush.
        """
        category_id = category.id
        expected_version = category.version
        name, description = category.name, category.description
        if category in self.session:
            self.session.expunge(category)

        model = self.model
        stmt = (
            update(model)
            .where(model.id == category_id, model.version == expected_version)
            .values(
                name=name,
                description=description,
                updated_at=func.now(),
                version=model.version + 1,
            )
            .returning(model.created_at, model.updated_at, model.version)
            .execution_options(synchronize_session=False)
        )
        try:
            row = (await self.execute(stmt)).one_or_none()
            if row is None:
                found = await self._exists(category_id)
                await self.rollback()
            else:
                await self.commit()
        except STORAGE_FAULTS as exc:
            await self._rollback_after_failure()
            raise UpdateFailedError(self.entity_name, exc) from exc

        if row is None:
            if not found:
                raise NotFoundError(self.entity_name, category_id)
            raise VersionConflictError(self.entity_name, category_id, expected_version)

        category.created_at, category.updated_at, category.version = row
        return category

    async def delete(self, category_id: int) -> None:
        stmt = (
            delete(self.model)
            .where(self.model.id == category_id)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.execute(stmt)
            affected = result.rowcount
            await self.commit()
        except STORAGE_FAULTS as exc:
            await self._rollback_after_failure()
            raise DeleteFailedError(self.entity_name, exc) from exc
        if affected == 0:
            raise NotFoundError(self.entity_name, category_id)

    async def _exists(self, category_id: int) -> bool:
        stmt = select(self.model.id).where(self.model.id == category_id)
        return (await self.scalar_one_or_none(stmt)) is not None

    async def _rollback_after_failure(self) -> None:
        try:
            await self.rollback()
        except SQLAlchemyError:
            # The original fault is what callers need; keep this one in the log.
            logger.exception("Rollback failed after %s storage error", self.entity_name)


class UserCategoryRepository(CategoryRepository[UserCategory]):
    """Repository for user categories."""

    model = UserCategory
    entity_name = "user category"


class SupplierCategoryRepository(CategoryRepository[SupplierCategory]):
    """Repository for supplier categories."""

    model = SupplierCategory
    entity_name = "supplier category"
