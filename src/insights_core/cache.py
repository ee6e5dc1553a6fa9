"""Insights cache: stores the latest insights document per user identity."""

import logging

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from insights_core.aggregation.schemas import InsightsDocument
from insights_core.db.models import InsightsCacheEntry
from insights_core.db.session import DatabaseManager
from insights_core.errors import CacheReadError, CacheWriteError
from insights_core.workspace import workspace_key

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/json"


def object_name_for_key(key: str) -> str:
    """Cache object name for a workspace key, e.g. ``ws_ab_1f2e..._insights.json``."""
    return f"{key}_insights.json"


def object_name_for_identity(user_identity: str) -> str:
    return object_name_for_key(workspace_key(user_identity))


class InsightsCache:
    """Latest-wins document store keyed by user identity.

    A missing entry is a normal ``None`` result; only backing-store failures
    raise.
    """

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def put(self, user_identity: str, document: InsightsDocument) -> None:
        """Store ``document`` for ``user_identity``, replacing any previous one."""
        await self._put(object_name_for_identity(user_identity), document)

    async def put_for_key(self, key: str, document: InsightsDocument) -> None:
        """Store ``document`` under the identity that owns workspace ``key``."""
        await self._put(object_name_for_key(key), document)

    async def get(self, user_identity: str) -> InsightsDocument | None:
        """Return the cached document for ``user_identity``, or None if there is none.

        Raises:
            CacheReadError: On backing-store failure or an unreadable entry.
        """
        name = object_name_for_identity(user_identity)
        try:
            async with self._db.session() as session:
                result = await session.execute(
                    select(InsightsCacheEntry.data_json).where(InsightsCacheEntry.object_name == name)
                )
                data_json = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise CacheReadError(f"Failed to read {name}: {exc}") from exc

        if data_json is None:
            logger.debug("Cache miss for %s", name)
            return None

        try:
            return InsightsDocument.model_validate_json(data_json)
        except ValidationError as exc:
            raise CacheReadError(f"Cached entry {name} is unreadable: {exc}") from exc

    async def _put(self, name: str, document: InsightsDocument) -> None:
        data_str = document.model_dump_json(by_alias=True)
        try:
            async with self._db.session() as session:
                result = await session.execute(
                    select(InsightsCacheEntry).where(InsightsCacheEntry.object_name == name)
                )
                row = result.scalar_one_or_none()
                if row is not None:
                    row.data_json = data_str
                    row.content_type = CONTENT_TYPE
                else:
                    session.add(InsightsCacheEntry(object_name=name, content_type=CONTENT_TYPE, data_json=data_str))
        except SQLAlchemyError as exc:
            raise CacheWriteError(f"Failed to store {name}: {exc}") from exc
        logger.info("Insights stored in %s", name)
