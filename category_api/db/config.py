from __future__ import annotations

import re
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SQLITE_URL = "sqlite:///./categories.db"


class Settings(BaseSettings):
    """
    Database configuration.

    Reads from environment variables (or .env via pydantic-settings):
      - DATABASE_URL (full URL, takes precedence)
      - POSTGRES_USER / POSTGRES_PASSWORD / POSTGRES_DB / POSTGRES_HOST / POSTGRES_PORT

    With nothing configured, a local SQLite file is used.
    """

    DATABASE_URL: Optional[str] = Field(
        default=None, description="Full SQLAlchemy URL (postgresql:// or sqlite://)."
    )
    POSTGRES_USER: Optional[str] = Field(default=None, description="DB username")
    POSTGRES_PASSWORD: Optional[str] = Field(default=None, description="DB password")
    POSTGRES_DB: Optional[str] = Field(default=None, description="Database name")
    POSTGRES_PORT: Optional[int] = Field(
        default=5432, description="Database port (default 5432)"
    )
    POSTGRES_HOST: Optional[str] = Field(
        default="localhost", description="Database host (default localhost)"
    )

    # SQLAlchemy engine options
    SQL_ECHO: bool = Field(
        default=False, description="Echo SQL statements for debugging (default False)"
    )
    DB_COMMAND_TIMEOUT: Optional[float] = Field(
        default=30.0,
        description="Seconds a single statement may run (asyncpg) or wait for a lock (SQLite).",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @property
    def database_url(self) -> str:
        """
        Compute the base (driver-neutral) database URL. Prefers DATABASE_URL,
        then the individual POSTGRES_* variables, then a local SQLite file.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        if any([self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_DB]):
            if not all([self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_DB]):
                raise ValueError(
                    "Database configuration incomplete. Set DATABASE_URL or all of "
                    "POSTGRES_USER, POSTGRES_PASSWORD and POSTGRES_DB."
                )
            host = self.POSTGRES_HOST or "localhost"
            port = self.POSTGRES_PORT or 5432
            return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{host}:{port}/{self.POSTGRES_DB}"

        return DEFAULT_SQLITE_URL

    @property
    def async_database_url(self) -> str:
        """Return the URL with the async driver SQLAlchemy's AsyncEngine needs."""
        return to_async_url(self.database_url)

    @property
    def sync_database_url(self) -> str:
        """Driver-neutral URL used for Alembic offline mode."""
        url = self.database_url
        url = re.sub(r"^postgresql\+\w+://", "postgresql://", url)
        return re.sub(r"^sqlite\+\w+://", "sqlite://", url)


# PUBLIC_INTERFACE
def to_async_url(url: str) -> str:
    """Normalize a postgresql:// or sqlite:// URL to its asyncpg / aiosqlite form."""
    if url.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
        return url
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("sqlite"):
        return re.sub(r"^sqlite(\+\w+)?://", "sqlite+aiosqlite://", url)
    return re.sub(r"^postgresql(\+\w+)?://", "postgresql+asyncpg://", url)


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return a settings object populated from the environment."""
    return Settings()
