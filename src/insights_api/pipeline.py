"""Session pipeline: start, upload, finish, and read back insights."""

import logging
from collections.abc import Sequence
from typing import Self

import anyio

from insights_api.settings import AppSettings
from insights_core.aggregation.engine import AggregationEngine
from insights_core.aggregation.schemas import EnrichmentPayload, InsightsDocument
from insights_core.cache import InsightsCache
from insights_core.db.session import DatabaseManager
from insights_core.enrichment import EnrichmentFetcher
from insights_core.errors import EnrichmentError, WorkspaceProvisioningError
from insights_core.ingest.parser import UploadParser
from insights_core.loader import ChunkedLoader
from insights_core.spotify.tokens import SpotifyTokenProvider
from insights_core.workspace import WorkspaceManager

logger = logging.getLogger(__name__)


class InsightsPipeline:
    """Composes the pipeline components behind the four session operations.

    The workspace key returned by :meth:`start_session` is the only session
    state; the workspace table's existence is the "session active" flag.
    """

    def __init__(
        self,
        workspaces: WorkspaceManager,
        parser: UploadParser,
        loader: ChunkedLoader,
        engine: AggregationEngine,
        cache: InsightsCache,
        enricher: EnrichmentFetcher | None = None,
    ) -> None:
        self._workspaces = workspaces
        self._parser = parser
        self._loader = loader
        self._engine = engine
        self._cache = cache
        self._enricher = enricher

    @classmethod
    def from_settings(cls, settings: AppSettings, db: DatabaseManager) -> Self:
        """Wire the pipeline from application settings."""
        workspaces = WorkspaceManager(db, ready_timeout=settings.WORKSPACE_READY_TIMEOUT_SECONDS)
        enricher = None
        if settings.ENRICHMENT_ENABLED:
            tokens = SpotifyTokenProvider(
                settings.SPOTIFY_CLIENT_ID,
                settings.SPOTIFY_CLIENT_SECRET,
                max_age_seconds=settings.SPOTIFY_TOKEN_MAX_AGE_SECONDS,
            )
            enricher = EnrichmentFetcher(tokens)
        return cls(
            workspaces=workspaces,
            parser=UploadParser(max_records=settings.IMPORT_MAX_RECORDS),
            loader=ChunkedLoader(
                db,
                workspaces,
                batch_size=settings.INGEST_BATCH_SIZE,
                max_attempts=settings.INGEST_MAX_ATTEMPTS,
                retry_delay=settings.INGEST_RETRY_DELAY_SECONDS,
            ),
            engine=AggregationEngine(db, workspaces),
            cache=InsightsCache(db),
            enricher=enricher,
        )

    async def start_session(self, user_identity: str) -> str:
        """Provision a fresh workspace for the identity; returns the workspace key."""
        key = await self._workspaces.start_session(user_identity)
        logger.info("Session started", extra={"workspace_key": key})
        return key

    async def upload(self, key: str, files: Sequence[tuple[str, bytes]]) -> int:
        """Parse every file, then load the concatenated events. Returns rows loaded.

        Parsing runs in a worker thread. A malformed file rejects the call
        before any row is written.
        """
        events = await anyio.to_thread.run_sync(self._parser.parse_files, files)
        inserted = await self._loader.load(key, events)
        logger.info("Upload of %d file(s) loaded %d rows", len(files), inserted, extra={"workspace_key": key})
        return inserted

    async def finish_session(self, key: str) -> InsightsDocument:
        """Aggregate, enrich, cache, and tear down the workspace.

        The workspace is deleted whatever the outcome. Nothing is cached
        unless aggregation succeeds; enrichment failure only drops the
        enrichment payload.
        """
        async with self._workspaces.lock(key):
            try:
                document = await self._engine.aggregate(key)
                document.enrichment = await self._enrich(document, key)
                await self._cache.put_for_key(key, document)
                logger.info("Session finished", extra={"workspace_key": key})
                return document
            finally:
                await self._teardown_quietly(key)

    async def get_insights(self, user_identity: str) -> InsightsDocument | None:
        """Return the cached document, or None if the identity has none."""
        return await self._cache.get(user_identity)

    async def _enrich(self, document: InsightsDocument, key: str) -> EnrichmentPayload | None:
        if self._enricher is None:
            return None
        try:
            return await self._enricher.enrich(document)
        except EnrichmentError as exc:
            logger.warning("Enrichment skipped: %s", exc, extra={"workspace_key": key})
            return None

    async def _teardown_quietly(self, key: str) -> None:
        try:
            await self._workspaces.teardown(key)
        except WorkspaceProvisioningError:
            logger.exception("Workspace teardown failed", extra={"workspace_key": key})
