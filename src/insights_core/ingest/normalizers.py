"""Normalizers that convert raw export records into ListeningEvent.

Normalization is lenient: a missing or mistyped field takes its default
instead of rejecting the record.
"""

import logging
from datetime import UTC, datetime

from insights_core.ingest.constants import (
    ACCOUNT_DATA_TIME_FORMAT,
    EPOCH_MILLIS_THRESHOLD,
    SENSITIVE_FIELDS,
    TRUTHY_TOKEN,
)
from insights_core.ingest.models import ListeningEvent

logger = logging.getLogger(__name__)


def as_text(value: object) -> str:
    """Strings pass through; None and other falsy values become ''."""
    if isinstance(value, str):
        return value
    if not value:
        return ""
    return str(value)


def as_flag(value: object) -> bool:
    """Only the exact token ``"TRUE"`` is truthy; JSON booleans are not."""
    return isinstance(value, str) and value == TRUTHY_TOKEN


def as_ms(value: object) -> int:
    """Coerce a duration in milliseconds to a non-negative int, default 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO 8601 string into an aware UTC datetime.

    Naive timestamps are taken as UTC. Returns None for absent or
    unparseable values.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable timestamp, defaulting to null: %s", value)
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_offline_timestamp(value: object) -> datetime | None:
    """Parse ``offline_timestamp``, which exports carry as epoch seconds or millis."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        if not value:
            return None
        seconds = value / 1000 if value > EPOCH_MILLIS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=UTC)
        except (OverflowError, OSError, ValueError):
            logger.warning("Out-of-range offline_timestamp, defaulting to null: %s", value)
            return None
    return parse_timestamp(value)


def normalize_extended_record(raw: dict[str, object]) -> ListeningEvent:
    """Normalize a record from Extended Streaming History (endsong_*.json).

    Expected fields:
        ts: str (ISO 8601 datetime, e.g. "2023-01-15T10:30:00Z")
        ms_played: int
        master_metadata_track_name / _album_artist_name / _album_album_name: str | None
        spotify_track_uri: str | None
        shuffle / skipped / offline / incognito_mode: "TRUE" or anything else

    Never fails; every missing field takes its default.
    """
    return ListeningEvent(
        ts=parse_timestamp(raw.get("ts")),
        username=as_text(raw.get("username")),
        platform=as_text(raw.get("platform")),
        ms_played=as_ms(raw.get("ms_played")),
        conn_country=as_text(raw.get("conn_country")),
        track_name=as_text(raw.get("master_metadata_track_name")),
        artist_name=as_text(raw.get("master_metadata_album_artist_name")),
        album_name=as_text(raw.get("master_metadata_album_album_name")),
        spotify_track_uri=as_text(raw.get("spotify_track_uri")),
        episode_name=as_text(raw.get("episode_name")),
        episode_show_name=as_text(raw.get("episode_show_name")),
        spotify_episode_uri=as_text(raw.get("spotify_episode_uri")),
        reason_start=as_text(raw.get("reason_start")),
        reason_end=as_text(raw.get("reason_end")),
        shuffle=as_flag(raw.get("shuffle")),
        skipped=as_flag(raw.get("skipped")),
        offline=as_flag(raw.get("offline")),
        offline_timestamp=parse_offline_timestamp(raw.get("offline_timestamp")),
        incognito_mode=as_flag(raw.get("incognito_mode")),
    )


def normalize_account_data_record(raw: dict[str, object]) -> ListeningEvent:
    """Normalize a record from Account Data format (StreamingHistory*.json).

    Expected fields:
        endTime: str (e.g. "2023-01-15 10:30")
        msPlayed: int
        trackName: str
        artistName: str
    """
    played_at: datetime | None = None
    end_time = raw.get("endTime")
    if isinstance(end_time, str):
        try:
            played_at = datetime.strptime(end_time, ACCOUNT_DATA_TIME_FORMAT).replace(tzinfo=UTC)
        except ValueError:
            logger.warning("Unparseable endTime, defaulting to null: %s", end_time)

    return ListeningEvent(
        ts=played_at,
        ms_played=as_ms(raw.get("msPlayed")),
        track_name=as_text(raw.get("trackName")),
        artist_name=as_text(raw.get("artistName")),
    )


def normalize_record(raw: object) -> ListeningEvent:
    """Normalize one raw record of either export format.

    Non-object entries yield an all-default event.
    """
    if not isinstance(raw, dict):
        return ListeningEvent()

    record = {k: v for k, v in raw.items() if k not in SENSITIVE_FIELDS}
    if "ts" not in record and "endTime" in record:
        return normalize_account_data_record(record)
    return normalize_extended_record(record)
