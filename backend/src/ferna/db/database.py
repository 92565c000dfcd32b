"""Database configuration and session management."""

import threading
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from ferna.db.models import Base

logger = structlog.get_logger(__name__)


def _is_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite")


class DatabaseConfig:
    """Database configuration and session factory."""

    def __init__(
        self,
        database_url: str = "sqlite+aiosqlite:///./ferna.db",
        echo: bool = False,
    ) -> None:
        """Initialize database configuration.

        Args:
            database_url: SQLAlchemy database URL (async driver required)
            echo: Enable SQL query logging
        """
        self.database_url = database_url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        """Get or create async engine."""
        if self._engine is None:
            engine_kwargs: dict = {
                "echo": self.echo,
            }

            if _is_sqlite(self.database_url):
                engine_kwargs["poolclass"] = NullPool
            else:
                engine_kwargs["pool_size"] = 10
                engine_kwargs["max_overflow"] = 20
                engine_kwargs["pool_recycle"] = 3600
                engine_kwargs["pool_pre_ping"] = True

            self._engine = create_async_engine(
                self.database_url,
                **engine_kwargs,
            )

            if _is_sqlite(self.database_url):

                @event.listens_for(self._engine.sync_engine, "connect")
                def set_sqlite_pragma(dbapi_conn, connection_record):
                    """Enable WAL and a busy timeout on each connection."""
                    cursor = dbapi_conn.cursor()
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA foreign_keys=ON")
                    cursor.execute("PRAGMA busy_timeout=5000")
                    cursor.close()

        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create async session factory."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_factory

    async def create_tables(self) -> None:
        """Create all database tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Dispose of the engine and close all connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Async context manager for database sessions.

        Commits on clean exit, rolls back on error.

        Example:
            async with db_config.session() as session:
                user = await UserRepository(session).get_by_email("a@b.c")
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


# Global database instance
_db_config: Optional[DatabaseConfig] = None
_db_lock = threading.Lock()


def get_database() -> DatabaseConfig:
    """Get the global database configuration instance."""
    global _db_config
    if _db_config is None:
        with _db_lock:
            if _db_config is None:
                from ferna.core.config import get_settings

                url = get_settings().database_url
                logger.info("database_url_resolved", sqlite=_is_sqlite(url))
                _db_config = DatabaseConfig(database_url=url, echo=False)
    return _db_config


def set_database(config: Optional[DatabaseConfig]) -> None:
    """Set the global database configuration instance.

    Args:
        config: DatabaseConfig instance to use globally, or None to
            resolve it from settings on next use
    """
    global _db_config
    with _db_lock:
        _db_config = config


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency function for FastAPI to get database sessions.

    Yields:
        AsyncSession instance
    """
    db = get_database()
    async with db.session() as session:
        yield session
