from __future__ import annotations

import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from category_api.core.errors import (
    CreateFailedError,
    DeleteFailedError,
    NotFoundError,
    ReadFailedError,
    UpdateFailedError,
    VersionConflictError,
)
from category_api.db.base import INITIAL_VERSION
from category_api.db.models.category import SupplierCategory, UserCategory
from category_api.repositories.category import UserCategoryRepository

pytestmark = pytest.mark.asyncio


async def _create(repo, name="Eletrônicos", description=""):
    return await repo.create(repo.model(name=name, description=description))


def _edit(category_id, version, name, description=""):
    return UserCategory(id=category_id, version=version, name=name, description=description)


def _operational_error():
    return OperationalError("SELECT 1", {}, Exception("disk I/O error"))


async def test_create_assigns_id_version_and_timestamps(user_repo):
    created = await _create(user_repo)

    assert created.id is not None and created.id > 0
    assert created.version == INITIAL_VERSION
    assert created.created_at is not None
    assert created.created_at == created.updated_at
    assert created.description == ""


async def test_get_by_id_round_trip(user_repo):
    created = await _create(user_repo, description="Aparelhos")

    loaded = await user_repo.get_by_id(created.id)

    assert (loaded.name, loaded.description, loaded.version) == ("Eletrônicos", "Aparelhos", created.version)
    assert loaded.created_at == created.created_at
    assert loaded.updated_at == created.updated_at


async def test_get_by_id_missing_raises_not_found(user_repo):
    with pytest.raises(NotFoundError) as exc_info:
        await user_repo.get_by_id(999)
    assert exc_info.value.entity_id == 999


async def test_get_all_empty_then_in_insertion_order(user_repo):
    assert await user_repo.get_all() == []

    for name in ("Zeta", "Alpha", "Mid"):
        await _create(user_repo, name=name)

    names = [c.name for c in await user_repo.get_all()]
    assert names == ["Zeta", "Alpha", "Mid"]


async def test_update_bumps_version_and_replaces_fields(user_repo):
    created = await _create(user_repo)

    updated = await user_repo.update(_edit(created.id, created.version, "Eletrônicos PJ", "B2B"))

    assert updated.version == created.version + 1
    assert updated.updated_at >= created.created_at
    assert updated.created_at == created.created_at
    stored = await user_repo.get_by_id(created.id)
    assert (stored.name, stored.description, stored.version) == ("Eletrônicos PJ", "B2B", updated.version)


async def test_stale_update_raises_version_conflict_and_keeps_row(user_repo):
    created = await _create(user_repo)
    category_id, v0 = created.id, created.version
    await user_repo.update(_edit(category_id, v0, "Eletrônicos PJ"))

    with pytest.raises(VersionConflictError) as exc_info:
        await user_repo.update(_edit(category_id, v0, "X"))

    assert exc_info.value.expected_version == v0
    stored = await user_repo.get_by_id(category_id)
    assert stored.name == "Eletrônicos PJ"
    assert stored.version == v0 + 1


async def test_stale_loaded_instance_never_overwrites_newer_row(database, user_repo):
    created = await _create(user_repo, name="original")
    category_id, v0 = created.id, created.version
    mine = await user_repo.get_by_id(category_id)

    async with database.session() as other:
        await UserCategoryRepository(other).update(_edit(category_id, v0, "B wins"))

    mine.name = "A stale"
    with pytest.raises(VersionConflictError):
        await user_repo.update(mine)

    async with database.session() as fresh:
        stored = await UserCategoryRepository(fresh).get_by_id(category_id)
    assert stored.name == "B wins"
    assert stored.version == v0 + 1


async def test_loaded_instance_can_be_edited_and_updated(user_repo):
    created = await _create(user_repo)
    category_id, v0 = created.id, created.version
    mine = await user_repo.get_by_id(category_id)

    mine.name = "Edited"
    updated = await user_repo.update(mine)

    assert updated is mine
    assert updated.version == v0 + 1
    stored = await user_repo.get_by_id(category_id)
    assert (stored.name, stored.version) == ("Edited", v0 + 1)


async def test_update_missing_id_raises_not_found(user_repo):
    with pytest.raises(NotFoundError):
        await user_repo.update(_edit(12345, INITIAL_VERSION, "Ghost"))


async def test_update_with_future_version_is_a_conflict(user_repo):
    created = await _create(user_repo)
    with pytest.raises(VersionConflictError):
        await user_repo.update(_edit(created.id, created.version + 5, "Ahead"))


async def test_version_is_monotonic_over_many_updates(user_repo):
    created = await _create(user_repo)
    v0 = created.version
    version = v0

    for i in range(5):
        result = await user_repo.update(_edit(created.id, version, f"name-{i}"))
        assert result.version == version + 1
        version = result.version

    assert (await user_repo.get_by_id(created.id)).version == v0 + 5


async def test_concurrent_updates_from_same_version_exactly_one_wins(database, user_repo):
    created = await _create(user_repo)
    category_id, v0 = created.id, created.version

    async def attempt(name):
        async with database.session() as s:
            repo = UserCategoryRepository(s)
            try:
                return await repo.update(_edit(category_id, v0, name))
            except VersionConflictError as exc:
                return exc

    results = await asyncio.gather(attempt("first"), attempt("second"))

    wins = [r for r in results if isinstance(r, UserCategory)]
    conflicts = [r for r in results if isinstance(r, VersionConflictError)]
    assert len(wins) == 1
    assert len(conflicts) == 1
    stored = await user_repo.get_by_id(category_id)
    assert stored.version == v0 + 1
    assert stored.name == wins[0].name


async def test_delete_then_delete_again_raises_not_found(user_repo):
    created = await _create(user_repo)

    await user_repo.delete(created.id)

    assert not await user_repo.exists(created.id)
    with pytest.raises(NotFoundError):
        await user_repo.delete(created.id)
    with pytest.raises(NotFoundError):
        await user_repo.get_by_id(created.id)


async def test_delete_missing_raises_not_found(user_repo):
    with pytest.raises(NotFoundError):
        await user_repo.delete(404)


async def test_update_after_delete_is_not_found(user_repo):
    created = await _create(user_repo)
    await user_repo.delete(created.id)

    with pytest.raises(NotFoundError):
        await user_repo.update(_edit(created.id, created.version, "Back"))


async def test_user_and_supplier_tables_are_independent(user_repo, supplier_repo):
    user_cat = await _create(user_repo, name="Clientes VIP")
    supplier_cat = await supplier_repo.create(SupplierCategory(name="Atacado", description=""))

    assert [c.name for c in await supplier_repo.get_all()] == ["Atacado"]
    assert [c.name for c in await user_repo.get_all()] == ["Clientes VIP"]

    await supplier_repo.delete(supplier_cat.id)
    assert await user_repo.exists(user_cat.id)


async def test_update_storage_fault_raises_update_failed(user_repo, monkeypatch):
    created = await _create(user_repo)
    fault = _operational_error()

    async def failing_execute(*args, **kwargs):
        raise fault

    monkeypatch.setattr(user_repo.session, "execute", failing_execute)

    with pytest.raises(UpdateFailedError) as exc_info:
        await user_repo.update(_edit(created.id, created.version, "Boom"))
    assert exc_info.value.cause is fault
    assert exc_info.value.__cause__ is fault


async def test_read_timeout_raises_read_failed(user_repo, monkeypatch):
    async def slow_execute(*args, **kwargs):
        raise asyncio.TimeoutError()

    monkeypatch.setattr(user_repo.session, "execute", slow_execute)

    with pytest.raises(ReadFailedError):
        await user_repo.get_all()
    with pytest.raises(ReadFailedError):
        await user_repo.get_by_id(1)


async def test_create_storage_fault_raises_create_failed(user_repo, monkeypatch):
    async def failing_flush(*args, **kwargs):
        raise _operational_error()

    monkeypatch.setattr(user_repo.session, "flush", failing_flush)

    with pytest.raises(CreateFailedError):
        await _create(user_repo)


async def test_delete_storage_fault_raises_delete_failed(user_repo, monkeypatch):
    async def failing_execute(*args, **kwargs):
        raise _operational_error()

    monkeypatch.setattr(user_repo.session, "execute", failing_execute)

    with pytest.raises(DeleteFailedError):
        await user_repo.delete(1)
