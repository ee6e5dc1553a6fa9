"""Tests for the insights cache."""

from datetime import UTC, datetime

import pytest
from sqlalchemy import select, update

from insights_core.aggregation.schemas import (
    BasicInsights,
    DayOfWeekMinutes,
    EnrichmentPayload,
    InsightsDocument,
    TrackPlayCount,
)
from insights_core.cache import CONTENT_TYPE, InsightsCache, object_name_for_identity, object_name_for_key
from insights_core.db.models import InsightsCacheEntry
from insights_core.db.session import DatabaseManager
from insights_core.errors import CacheReadError
from insights_core.spotify.models import SpotifyTrack
from insights_core.workspace import workspace_key


def _document(plays: int = 2) -> InsightsDocument:
    return InsightsDocument(
        top_tracks_by_play_count=[TrackPlayCount(track="A", total_plays=plays, track_uris=["spotify:track:a"])],
        listening_time_by_day_of_week=[DayOfWeekMinutes(day_of_week=1, minutes_played=0.05)],
        basic_insights=BasicInsights(
            total_records=plays,
            unique_users=1,
            avg_play_time=1500.0,
            total_ms_played=3000,
            listening_hours=0.0,
            first_play=datetime(2024, 1, 7, 10, 0, tzinfo=UTC),
            last_play=datetime(2024, 1, 7, 11, 0, tzinfo=UTC),
        ),
        enrichment=EnrichmentPayload(tracks={"a": SpotifyTrack(id="a", name="A")}),
    )


def test_object_name_derived_from_identity() -> None:
    assert object_name_for_identity("Alice@Example.com") == f"{workspace_key('alice@example.com')}_insights.json"
    assert object_name_for_key("ws_x_0123456789ab") == "ws_x_0123456789ab_insights.json"


async def test_round_trip(db: DatabaseManager) -> None:
    cache = InsightsCache(db)
    document = _document()
    await cache.put("alice@example.com", document)
    assert await cache.get("alice@example.com") == document


async def test_round_trip_without_enrichment(db: DatabaseManager) -> None:
    cache = InsightsCache(db)
    document = InsightsDocument()
    await cache.put("empty@example.com", document)
    loaded = await cache.get("empty@example.com")
    assert loaded == document
    assert loaded is not None
    assert loaded.enrichment is None


async def test_missing_entry_returns_none(db: DatabaseManager) -> None:
    assert await InsightsCache(db).get("nobody@example.com") is None


async def test_put_overwrites(db: DatabaseManager) -> None:
    cache = InsightsCache(db)
    await cache.put("alice@example.com", _document(plays=2))
    await cache.put("alice@example.com", _document(plays=5))

    loaded = await cache.get("alice@example.com")
    assert loaded is not None
    assert loaded.top_tracks_by_play_count[0].total_plays == 5

    async with db.session() as session:
        rows = (await session.execute(select(InsightsCacheEntry))).scalars().all()
    assert len(rows) == 1
    assert rows[0].content_type == CONTENT_TYPE


async def test_put_for_key_is_read_by_identity(db: DatabaseManager) -> None:
    cache = InsightsCache(db)
    await cache.put_for_key(workspace_key("bob@example.com"), _document())
    assert await cache.get("BOB@example.com") == _document()


async def test_stored_json_uses_camel_case_keys(db: DatabaseManager) -> None:
    await InsightsCache(db).put("alice@example.com", _document())
    async with db.session() as session:
        data_json = (await session.execute(select(InsightsCacheEntry.data_json))).scalar_one()
    assert '"topTracksByPlayCount"' in data_json
    assert '"total_plays"' in data_json


async def test_unreadable_entry_raises(db: DatabaseManager) -> None:
    cache = InsightsCache(db)
    await cache.put("alice@example.com", _document())
    async with db.session() as session:
        await session.execute(update(InsightsCacheEntry).values(data_json="{not json"))

    with pytest.raises(CacheReadError, match="unreadable"):
        await cache.get("alice@example.com")
