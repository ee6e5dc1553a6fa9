"""Shared fixtures: a file-backed async SQLite database per test."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from insights_core.config import DatabaseSettings
from insights_core.db import Base, DatabaseManager
from insights_core.workspace import WorkspaceManager


def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'insights.db'}"


@pytest.fixture
async def db(tmp_path: Path) -> AsyncGenerator[DatabaseManager]:
    manager = DatabaseManager(DatabaseSettings(database_url=sqlite_url(tmp_path)))
    async with manager.connection() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield manager
    await manager.dispose()


@pytest.fixture
def workspaces(db: DatabaseManager) -> WorkspaceManager:
    return WorkspaceManager(db, ready_timeout=1.0, poll_interval=0.01)
