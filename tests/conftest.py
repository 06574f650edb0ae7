"""Shared pytest fixtures: a throwaway SQLite database, sessions, and an HTTP client."""

from __future__ import annotations

from typing import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from category_api.api.main import create_app
from category_api.core.settings import AppSettings
from category_api.db.session import Database
from category_api.repositories.category import (
    SupplierCategoryRepository,
    UserCategoryRepository,
)


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'categories.db'}"


@pytest_asyncio.fixture
async def database(database_url) -> AsyncIterator[Database]:
    """File-backed SQLite so separate sessions get separate connections."""
    db = Database(database_url, command_timeout=10)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def session(database) -> AsyncIterator[AsyncSession]:
    async with database.session() as s:
        yield s


@pytest.fixture
def user_repo(session) -> UserCategoryRepository:
    return UserCategoryRepository(session)


@pytest.fixture
def supplier_repo(session) -> SupplierCategoryRepository:
    return SupplierCategoryRepository(session)


@pytest.fixture
def app(database) -> FastAPI:
    settings = AppSettings(RUN_MIGRATIONS_ON_STARTUP=False, LOG_LEVEL="DEBUG")
    return create_app(settings=settings, database=database)


@pytest_asyncio.fixture
async def client(app) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
