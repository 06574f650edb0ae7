from __future__ import annotations

import logging

import pytest

from category_api.core.errors import (
    NotFoundError,
    ReadFailedError,
    ValidationError,
    VersionConflictError,
)
from category_api.db.models.category import SupplierCategory, UserCategory
from category_api.schemas.category import CategoryCreate, CategoryUpdate
from category_api.services.category import SupplierCategoryService, UserCategoryService

pytestmark = pytest.mark.asyncio


@pytest.fixture
def service(session) -> UserCategoryService:
    return UserCategoryService(session)


async def test_create_trims_and_persists(service):
    created = await service.create(CategoryCreate(name="  Eletrônicos ", description=None))

    assert isinstance(created, UserCategory)
    assert created.name == "Eletrônicos"
    assert created.description == ""
    assert created.version == 1


async def test_create_rejects_blank_name_before_storage(service, monkeypatch):
    async def unexpected(*args, **kwargs):
        raise AssertionError("repository must not be called")

    monkeypatch.setattr(service.repo, "create", unexpected)

    with pytest.raises(ValidationError) as exc_info:
        await service.create(CategoryCreate(name="   "))
    assert exc_info.value.field == "name"


async def test_scenario_create_update_then_stale_update(service):
    created = await service.create(CategoryCreate(name="Eletrônicos", description=""))
    category_id, first_version = created.id, created.version
    created_at = created.created_at

    updated = await service.update(
        category_id, CategoryUpdate(name="Eletrônicos PJ", version=first_version)
    )
    assert updated.version == first_version + 1
    assert updated.updated_at >= created_at

    with pytest.raises(VersionConflictError):
        await service.update(category_id, CategoryUpdate(name="X", version=first_version))

    assert (await service.get(category_id)).name == "Eletrônicos PJ"


async def test_update_validates_fields(service):
    created = await service.create(CategoryCreate(name="Eletrônicos"))

    with pytest.raises(ValidationError) as exc_info:
        await service.update(
            created.id, CategoryUpdate(name="ok", description="d" * 300, version=created.version)
        )
    assert exc_info.value.field == "description"


async def test_update_missing_logs_warning(service, caplog):
    caplog.set_level(logging.WARNING, logger="category_api.services.category")

    with pytest.raises(NotFoundError):
        await service.update(77, CategoryUpdate(name="Ghost", version=1))

    assert "not found for update" in caplog.text


@pytest.mark.parametrize("category_id", [0, -3])
async def test_operations_reject_non_positive_ids(service, category_id):
    with pytest.raises(ValidationError):
        await service.get(category_id)
    with pytest.raises(ValidationError):
        await service.delete(category_id)
    with pytest.raises(ValidationError):
        await service.update(category_id, CategoryUpdate(name="x", version=1))


async def test_list_and_delete(service):
    a = await service.create(CategoryCreate(name="A"))
    await service.create(CategoryCreate(name="B"))

    await service.delete(a.id)

    assert [c.name for c in await service.list()] == ["B"]
    with pytest.raises(NotFoundError):
        await service.delete(a.id)


async def test_storage_failure_is_logged_and_reraised(service, monkeypatch, caplog):
    cause = RuntimeError("connection reset")

    async def failing_get_all():
        raise ReadFailedError(service.label, cause) from cause

    monkeypatch.setattr(service.repo, "get_all", failing_get_all)
    caplog.set_level(logging.ERROR, logger="category_api.services.category")

    with pytest.raises(ReadFailedError) as exc_info:
        await service.list()

    assert exc_info.value.cause is cause
    assert "Failed to list user category rows" in caplog.text


async def test_supplier_service_uses_supplier_table(session):
    service = SupplierCategoryService(session)

    created = await service.create(CategoryCreate(name="Atacado"))

    assert isinstance(created, SupplierCategory)
    assert service.label == "supplier category"
    assert await UserCategoryService(session).list() == []
