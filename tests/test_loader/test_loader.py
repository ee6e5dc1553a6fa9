"""Tests for the chunked loader: batching and bounded retry."""

from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from insights_core.config import DatabaseSettings
from insights_core.db import Base, DatabaseManager
from insights_core.errors import IngestionError
from insights_core.ingest.models import ListeningEvent
from insights_core.loader import ChunkedLoader
from insights_core.workspace import WorkspaceManager, workspace_key, workspace_table


class FlakyDatabaseManager(DatabaseManager):
    """Fails the sessions selected by ``fail_on(call_number)`` with an operational error."""

    def __init__(self, settings: DatabaseSettings, fail_on: Callable[[int], bool]) -> None:
        super().__init__(settings)
        self._fail_on = fail_on
        self.session_calls = 0

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession]:
        self.session_calls += 1
        if self._fail_on(self.session_calls):
            raise OperationalError("INSERT", {}, Exception("connection reset"))
        async with super().session() as session:
            yield session


async def _flaky_db(tmp_path: Path, fail_on: Callable[[int], bool]) -> FlakyDatabaseManager:
    db = FlakyDatabaseManager(
        DatabaseSettings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'flaky.db'}"),
        fail_on=fail_on,
    )
    async with db.connection() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return db


async def _row_count(db: DatabaseManager, key: str) -> int:
    async with db.connection() as conn:
        return (await conn.execute(select(func.count()).select_from(workspace_table(key)))).scalar_one()


def _events(n: int) -> list[ListeningEvent]:
    return [ListeningEvent(track_name=f"T{i}", ms_played=i) for i in range(n)]


async def test_load_inserts_all_rows_in_batches(db: DatabaseManager, workspaces: WorkspaceManager) -> None:
    key = await workspaces.start_session("loader@example.com")
    loader = ChunkedLoader(db, workspaces, batch_size=3, retry_delay=0)

    inserted = await loader.load(key, _events(10))

    assert inserted == 10
    assert await _row_count(db, key) == 10


async def test_load_empty_sequence(db: DatabaseManager, workspaces: WorkspaceManager) -> None:
    key = await workspaces.start_session("loader@example.com")
    loader = ChunkedLoader(db, workspaces, retry_delay=0)
    assert await loader.load(key, []) == 0


async def test_load_into_missing_workspace_raises(db: DatabaseManager, workspaces: WorkspaceManager) -> None:
    loader = ChunkedLoader(db, workspaces, retry_delay=0)
    with pytest.raises(IngestionError) as exc_info:
        await loader.load(workspace_key("nobody@example.com"), _events(1))
    assert exc_info.value.offset == 0


async def test_batch_succeeds_on_third_attempt(tmp_path: Path) -> None:
    db = await _flaky_db(tmp_path, fail_on=lambda n: n <= 2)
    workspaces = WorkspaceManager(db, ready_timeout=1.0, poll_interval=0.01)
    try:
        key = await workspaces.start_session("retry@example.com")
        loader = ChunkedLoader(db, workspaces, batch_size=100, max_attempts=3, retry_delay=0)

        inserted = await loader.load(key, _events(5))

        assert inserted == 5
        assert db.session_calls == 3
        assert await _row_count(db, key) == 5
    finally:
        await db.dispose()


async def test_batch_fails_after_all_attempts(tmp_path: Path) -> None:
    db = await _flaky_db(tmp_path, fail_on=lambda n: True)
    workspaces = WorkspaceManager(db, ready_timeout=1.0, poll_interval=0.01)
    try:
        key = await workspaces.start_session("retry@example.com")
        loader = ChunkedLoader(db, workspaces, batch_size=100, max_attempts=3, retry_delay=0)

        with pytest.raises(IngestionError) as exc_info:
            await loader.load(key, _events(5))

        assert exc_info.value.offset == 0
        assert exc_info.value.workspace_key == key
        assert isinstance(exc_info.value.cause, OperationalError)
        assert db.session_calls == 3
        assert await _row_count(db, key) == 0
    finally:
        await db.dispose()


async def test_failure_keeps_rows_from_committed_batches(tmp_path: Path) -> None:
    """Ingestion is not atomic: batches before the failing one stay."""
    db = await _flaky_db(tmp_path, fail_on=lambda n: n > 1)
    workspaces = WorkspaceManager(db, ready_timeout=1.0, poll_interval=0.01)
    try:
        key = await workspaces.start_session("partial@example.com")
        loader = ChunkedLoader(db, workspaces, batch_size=2, max_attempts=2, retry_delay=0)

        with pytest.raises(IngestionError) as exc_info:
            await loader.load(key, _events(5))

        assert exc_info.value.offset == 2
        assert await _row_count(db, key) == 2
    finally:
        await db.dispose()


def test_invalid_construction() -> None:
    with pytest.raises(ValueError):
        ChunkedLoader(None, None, batch_size=0)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        ChunkedLoader(None, None, max_attempts=0)  # type: ignore[arg-type]
