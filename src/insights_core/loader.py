"""Chunked loader: inserts normalized events into a workspace in bounded batches."""

import asyncio
import logging
from collections.abc import Sequence

from sqlalchemy import Table, insert
from sqlalchemy.exc import SQLAlchemyError

from insights_core.db.session import DatabaseManager
from insights_core.errors import IngestionError, WorkspaceProvisioningError
from insights_core.ingest.models import ListeningEvent
from insights_core.workspace import WorkspaceManager, workspace_table

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 1.0  # seconds


class ChunkedLoader:
    """Streams events into a workspace table, one committed batch at a time.

    Batches run strictly in sequence: a batch is durable before the next one
    starts. A failing batch is retried with a fixed delay; once attempts are
    exhausted the load stops and rows already committed stay in place.
    """

    def __init__(
        self,
        db: DatabaseManager,
        workspaces: WorkspaceManager,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        if max_attempts < 1:
            raise ValueError("max_attempts must be positive")
        self._db = db
        self._workspaces = workspaces
        self._batch_size = batch_size
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay

    async def load(self, key: str, events: Sequence[ListeningEvent]) -> int:
        """Insert ``events`` into workspace ``key``. Returns the number of rows inserted.

        Raises:
            IngestionError: If the workspace does not exist, or a batch still
                fails after ``max_attempts`` attempts.
        """
        try:
            present = await self._workspaces.exists(key)
        except WorkspaceProvisioningError as exc:
            raise IngestionError(key, 0, exc) from exc
        if not present:
            raise IngestionError(key, 0, "workspace does not exist; start a session first")

        table = workspace_table(key)
        inserted = 0
        for offset in range(0, len(events), self._batch_size):
            batch = [e.model_dump() for e in events[offset : offset + self._batch_size]]
            await self._insert_batch(key, table, batch, offset)
            inserted += len(batch)
            logger.info("Inserted rows %d to %d into %s", offset, offset + len(batch), key)
        return inserted

    async def _insert_batch(self, key: str, table: Table, batch: list[dict[str, object]], offset: int) -> None:
        for attempt in range(1, self._max_attempts + 1):
            try:
                async with self._db.session() as session:
                    await session.execute(insert(table), batch)
                return
            except SQLAlchemyError as exc:
                if attempt >= self._max_attempts:
                    logger.error(
                        "Batch at offset %d into %s failed after %d attempts: %s",
                        offset,
                        key,
                        attempt,
                        exc,
                    )
                    raise IngestionError(key, offset, exc) from exc
                logger.warning(
                    "Batch at offset %d into %s failed (attempt %d/%d), retrying in %.1fs: %s",
                    offset,
                    key,
                    attempt,
                    self._max_attempts,
                    self._retry_delay,
                    exc,
                )
                await asyncio.sleep(self._retry_delay)
