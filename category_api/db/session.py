from __future__ import annotations

import logging
from typing import Any, AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .base import Base
from .config import Settings, get_settings, to_async_url

logger = logging.getLogger(__name__)


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    """
    Make every SQLite transaction start with BEGIN IMMEDIATE.

    pysqlite defers BEGIN and upgrades read locks lazily, which turns two
    concurrent conditional UPDATEs into a lock deadlock. Taking the write lock
    at BEGIN makes the second writer wait, then evaluate its WHERE clause
    against the committed row.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """
    Owns the AsyncEngine and session factory for one application instance.

    Created when the app is built and disposed at shutdown; repositories never
    reach for a module-level engine.
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        command_timeout: Optional[float] = None,
    ) -> None:
        self.url = to_async_url(url)
        connect_args: dict[str, Any] = {}
        if self.is_sqlite:
            if command_timeout is not None:
                connect_args["timeout"] = command_timeout
        elif command_timeout is not None:
            connect_args["command_timeout"] = command_timeout

        self.engine: AsyncEngine = create_async_engine(
            self.url,
            echo=echo,
            pool_pre_ping=not self.is_sqlite,
            connect_args=connect_args,
        )
        if self.is_sqlite:
            _use_immediate_transactions(self.engine)

        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine, expire_on_commit=False, autoflush=False
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Database":
        settings = settings or get_settings()
        return cls(
            settings.database_url,
            echo=settings.SQL_ECHO,
            command_timeout=settings.DB_COMMAND_TIMEOUT,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def session(self) -> AsyncSession:
        """Open a new AsyncSession; use as ``async with db.session() as s``."""
        return self.session_maker()

    async def create_all(self) -> None:
        """Create all mapped tables. Intended for tests and local bootstrapping."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Release pooled connections."""
        logger.info("Disposing database engine")
        await self.engine.dispose()


# PUBLIC_INTERFACE
def get_database(request: Request) -> Database:
    """Return the Database attached to the running application."""
    return request.app.state.database


# PUBLIC_INTERFACE
async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield an AsyncSession suitable for FastAPI dependency injection.

    The session is bound to the application's Database and closed after the request.
    """
    async with get_database(request).session() as session:
        yield session
