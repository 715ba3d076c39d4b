"""Database configuration and connection management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ..base.models import BaseModel
from .base import BaseAppSettings

logger = logging.getLogger(__name__)


class DatabaseSettings(BaseAppSettings):
    """Database configuration and connection settings."""

    DATABASE_URL: str = "sqlite+aiosqlite:///./agentgraph.db"
    DATABASE_ECHO: bool = False
    SQLITE_BUSY_TIMEOUT_MS: int = 5000
    pool_size: int = 20
    max_overflow: int = 30
    pool_timeout: int = 30  # Timeout for getting connection from pool
    pool_recycle: int = 3600  # Recycle connections every hour to prevent stale connections

    @property
    def url(self) -> str:
        """Async database URL for SQLAlchemy."""
        return self.DATABASE_URL

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        url = self.DATABASE_URL
        return self.is_sqlite and (":memory:" in url or "mode=memory" in url)


class Database:
    """Database connection manager.

    Owns the async engine and the session factory. SQLite connections get
    foreign keys, a busy timeout and driver-level transaction control so that
    nested SAVEPOINTs behave the same way they do on PostgreSQL.
    """

    def __init__(self, settings: DatabaseSettings | None = None) -> None:
        """Initialize database connections."""
        self.settings = settings or get_db_settings()
        self._setup_engine()
        self._setup_session_factory()

    def _setup_engine(self) -> None:
        engine_kwargs: dict[str, Any] = {"echo": self.settings.DATABASE_ECHO}

        if self.settings.is_sqlite:
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if self.settings.is_memory:
                # A single shared connection keeps the in-memory database alive
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(
                pool_size=self.settings.pool_size,
                max_overflow=self.settings.max_overflow,
                pool_timeout=self.settings.pool_timeout,
                pool_recycle=self.settings.pool_recycle,
            )

        self.engine: AsyncEngine = create_async_engine(self.settings.url, **engine_kwargs)

        if self.settings.is_sqlite:
            self._install_sqlite_hooks()

    def _install_sqlite_hooks(self) -> None:
        busy_timeout = self.settings.SQLITE_BUSY_TIMEOUT_MS

        @event.listens_for(self.engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            # Disable the driver's implicit BEGIN; the "begin" hook emits it instead
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout)}")
            cursor.close()

        @event.listens_for(self.engine.sync_engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN")

    def _setup_session_factory(self) -> None:
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get an async database session with automatic transaction management."""
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def get_db(self) -> AsyncGenerator[AsyncSession, None]:
        """Dependency for FastAPI."""
        async with self.session() as session:
            yield session

    async def create_all(self) -> None:
        """Create every table registered on the shared metadata."""
        async with self.engine.begin() as conn:
            await conn.run_sync(BaseModel.metadata.create_all)
        logger.info("Database schema created", extra={"tables": len(BaseModel.metadata.tables)})

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(BaseModel.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


@lru_cache
def get_db_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


# Global database instance - initialized lazily
_db_instance: Database | None = None


def get_database() -> Database:
    """Get the global database instance, creating it if necessary."""
    global _db_instance
    if _db_instance is None:
        _db_instance = Database()
    return _db_instance


def set_database(database: Database | None) -> None:
    """Replace the global database instance (application startup and tests)."""
    global _db_instance
    _db_instance = database


def get_db():
    """Get an async database session."""
    return get_database().session()
