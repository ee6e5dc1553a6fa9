"""Alembic environment: runs migrations over the async engine."""

import asyncio

from sqlalchemy.engine import Connection

from alembic import context
from insights_core.config import DatabaseSettings
from insights_core.db import Base, DatabaseManager

config = context.config
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=DatabaseSettings().database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    db = DatabaseManager.from_env()
    try:
        async with db.connection() as conn:
            await conn.run_sync(_run_sync_migrations)
    finally:
        await db.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
