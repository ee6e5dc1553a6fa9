"""Database session management via DatabaseManager class."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Self

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from insights_core.config.database import DatabaseSettings


class DatabaseManager:
    """Manages async database engine and session lifecycle.

    Usage:
        db = DatabaseManager.from_env()

        # ORM / DML work
        async with db.session() as session:
            result = await session.execute(query)

        # DDL (workspace create/drop)
        async with db.connection() as conn:
            await conn.run_sync(table.create)

        # Cleanup
        await db.dispose()
    """

    def __init__(self, settings: DatabaseSettings) -> None:
        self._settings = settings
        self._engine = create_async_engine(
            settings.database_url,
            echo=settings.echo,
            poolclass=NullPool if settings.use_null_pool else None,
            pool_pre_ping=settings.pool_pre_ping,
        )
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_env(cls) -> Self:
        """Create a DatabaseManager from environment variables."""
        return cls(DatabaseSettings())

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def dialect_name(self) -> str:
        """Backend dialect name, e.g. ``postgresql`` or ``sqlite``."""
        return self._engine.dialect.name

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession]:
        """Get a database session with automatic commit/rollback.

        Commits on success, rolls back on exception.
        """
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[AsyncConnection]:
        """Get a connection inside a transaction (``engine.begin()``)."""
        async with self._engine.begin() as conn:
            yield conn

    async def dispose(self) -> None:
        """Dispose of the engine and release all connections."""
        await self._engine.dispose()
