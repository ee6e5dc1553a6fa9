"""Per-session workspace tables: naming, schema, and lifecycle.

A workspace is one table holding the normalized events of one in-progress
session. Its name (the workspace key) is a pure function of the
case-normalized user identity, so a new session for the same identity always
finds, deletes, and recreates the same table.

Lifecycle: ABSENT -> CREATING -> READY -> (loading) -> DELETING -> ABSENT.
"""

import asyncio
import hashlib
import logging
import re
import time
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import Boolean, Column, DateTime, Integer, MetaData, String, Table, inspect
from sqlalchemy.exc import SQLAlchemyError

from insights_core.db.session import DatabaseManager
from insights_core.errors import WorkspaceProvisioningError

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "ws_"
_LABEL_MAX_LENGTH = 32
_DIGEST_LENGTH = 12
_UNSAFE_CHARS = re.compile(r"[^a-z0-9]")
WORKSPACE_KEY_PATTERN = re.compile(rf"^{WORKSPACE_PREFIX}[a-z0-9_]{{0,{_LABEL_MAX_LENGTH}}}_[0-9a-f]{{{_DIGEST_LENGTH}}}$")

DEFAULT_READY_TIMEOUT_SECONDS = 30.0
DEFAULT_READY_POLL_INTERVAL = 0.5

# Workspace tables are never part of the persistent schema
_workspace_metadata = MetaData()


def workspace_key(user_identity: str) -> str:
    """Derive the workspace key for a user identity.

    ``ws_<sanitized>_<sha1[:12]>``: the readable label keeps keys
    recognizable, the digest keeps distinct identities from colliding
    after sanitization (``a.b@x`` vs ``a_b@x``).
    """
    normalized = user_identity.strip().lower()
    label = _UNSAFE_CHARS.sub("_", normalized)[:_LABEL_MAX_LENGTH]
    digest = hashlib.sha1(normalized.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]
    return f"{WORKSPACE_PREFIX}{label}_{digest}"


def is_valid_workspace_key(key: str) -> bool:
    """Whether ``key`` has the shape produced by :func:`workspace_key`."""
    return bool(WORKSPACE_KEY_PATTERN.fullmatch(key))


def workspace_table(key: str) -> Table:
    """Return the Table object for a workspace key.

    Only keys matching the workspace grammar are accepted, so a client-held
    key can never name an arbitrary table.
    """
    if not is_valid_workspace_key(key):
        raise ValueError(f"Invalid workspace key: {key!r}")

    existing = _workspace_metadata.tables.get(key)
    if existing is not None:
        return existing

    return Table(
        key,
        _workspace_metadata,
        Column("ts", DateTime(timezone=True), nullable=True),
        Column("username", String, nullable=False, default=""),
        Column("platform", String, nullable=False, default=""),
        Column("ms_played", Integer, nullable=False, default=0),
        Column("conn_country", String, nullable=False, default=""),
        Column("track_name", String, nullable=False, default=""),
        Column("artist_name", String, nullable=False, default=""),
        Column("album_name", String, nullable=False, default=""),
        Column("spotify_track_uri", String, nullable=False, default=""),
        Column("episode_name", String, nullable=False, default=""),
        Column("episode_show_name", String, nullable=False, default=""),
        Column("spotify_episode_uri", String, nullable=False, default=""),
        Column("reason_start", String, nullable=False, default=""),
        Column("reason_end", String, nullable=False, default=""),
        Column("shuffle", Boolean, nullable=False, default=False),
        Column("skipped", Boolean, nullable=False, default=False),
        Column("offline", Boolean, nullable=False, default=False),
        Column("offline_timestamp", DateTime(timezone=True), nullable=True),
        Column("incognito_mode", Boolean, nullable=False, default=False),
    )


class WorkspaceManager:
    """Owns creation, readiness, and deletion of workspace tables.

    Also serializes start-session and finish-session for the same identity
    inside this process with one ``asyncio.Lock`` per workspace key. A key's
    lock is dropped once nothing holds or waits on it.
    """

    def __init__(
        self,
        db: DatabaseManager,
        *,
        ready_timeout: float = DEFAULT_READY_TIMEOUT_SECONDS,
        poll_interval: float = DEFAULT_READY_POLL_INTERVAL,
    ) -> None:
        self._db = db
        self._ready_timeout = ready_timeout
        self._poll_interval = poll_interval
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] <= 0:
                del self._lock_users[key]
                del self._locks[key]

    async def start_session(self, user_identity: str) -> str:
        """Provision a fresh, empty workspace for the identity and return its key.

        A leftover workspace from an abandoned session is deleted first,
        never appended to. Blocks until the new table is visible.

        Raises:
            WorkspaceProvisioningError: On backing-store failure or if the
                table is not ready within the configured timeout.
        """
        key = workspace_key(user_identity)
        async with self.lock(key):
            if await self.exists(key):
                logger.info("Workspace %s exists from a previous session, deleting it", key)
                await self._drop(key)

            logger.info("Creating workspace %s", key)
            table = workspace_table(key)
            try:
                async with self._db.connection() as conn:
                    await conn.run_sync(table.create)
            except SQLAlchemyError as exc:
                raise WorkspaceProvisioningError(f"Failed to create workspace {key}: {exc}") from exc

            await self._wait_until_ready(key)
        return key

    async def teardown(self, key: str) -> None:
        """Delete a workspace. Deleting an absent workspace is a no-op."""
        await self._drop(key)

    async def exists(self, key: str) -> bool:
        try:
            async with self._db.connection() as conn:
                return await conn.run_sync(lambda sync_conn: inspect(sync_conn).has_table(key))
        except SQLAlchemyError as exc:
            raise WorkspaceProvisioningError(f"Failed to inspect workspace {key}: {exc}") from exc

    async def _drop(self, key: str) -> None:
        table = workspace_table(key)
        try:
            async with self._db.connection() as conn:
                await conn.run_sync(lambda sync_conn: table.drop(sync_conn, checkfirst=True))
        except SQLAlchemyError as exc:
            raise WorkspaceProvisioningError(f"Failed to delete workspace {key}: {exc}") from exc
        logger.info("Workspace %s deleted", key)

    async def _wait_until_ready(self, key: str) -> None:
        deadline = time.monotonic() + self._ready_timeout
        while not await self.exists(key):
            if time.monotonic() >= deadline:
                raise WorkspaceProvisioningError(
                    f"Workspace {key} not ready after {self._ready_timeout:.1f}s"
                )
            await asyncio.sleep(self._poll_interval)
        logger.info("Workspace %s is ready", key)
