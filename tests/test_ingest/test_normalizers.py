"""Tests for record normalizers."""

from datetime import UTC, datetime

from insights_core.ingest.models import ListeningEvent
from insights_core.ingest.normalizers import (
    as_flag,
    normalize_account_data_record,
    normalize_extended_record,
    normalize_record,
    parse_offline_timestamp,
)


def test_normalize_extended_record_valid() -> None:
    """Valid extended record normalizes every field."""
    raw = {
        "ts": "2023-06-15T10:30:00Z",
        "username": "listener",
        "platform": "android",
        "ms_played": 180000,
        "conn_country": "DE",
        "master_metadata_track_name": "Bohemian Rhapsody",
        "master_metadata_album_artist_name": "Queen",
        "master_metadata_album_album_name": "A Night at the Opera",
        "spotify_track_uri": "spotify:track:4u7EnebtmKWzUH433cf5Qv",
        "reason_start": "trackdone",
        "reason_end": "endplay",
        "shuffle": "TRUE",
        "skipped": "FALSE",
    }
    event = normalize_extended_record(raw)
    assert event.ts == datetime(2023, 6, 15, 10, 30, 0, tzinfo=UTC)
    assert event.username == "listener"
    assert event.platform == "android"
    assert event.conn_country == "DE"
    assert event.track_name == "Bohemian Rhapsody"
    assert event.artist_name == "Queen"
    assert event.album_name == "A Night at the Opera"
    assert event.ms_played == 180000
    assert event.spotify_track_uri == "spotify:track:4u7EnebtmKWzUH433cf5Qv"
    assert event.reason_start == "trackdone"
    assert event.shuffle is True
    assert event.skipped is False


def test_normalize_extended_record_empty_takes_defaults() -> None:
    """A record with no fields yields an all-default event."""
    assert normalize_extended_record({}) == ListeningEvent()


def test_missing_track_name_is_kept_as_empty_string() -> None:
    """Podcast rows have no track metadata; they are kept, not dropped."""
    raw = {
        "ts": "2023-06-15T10:30:00Z",
        "ms_played": 60000,
        "master_metadata_track_name": None,
        "episode_name": "Episode 1",
        "episode_show_name": "Some Show",
    }
    event = normalize_extended_record(raw)
    assert event.track_name == ""
    assert event.episode_name == "Episode 1"
    assert event.episode_show_name == "Some Show"


def test_lowercase_true_is_false() -> None:
    """Only the exact uppercase token is truthy."""
    event = normalize_extended_record({"shuffle": "true", "offline": "True", "skipped": "TRUE"})
    assert event.shuffle is False
    assert event.offline is False
    assert event.skipped is True


def test_json_booleans_are_false() -> None:
    """Non-string flag values normalize to False, including JSON true."""
    assert as_flag(True) is False
    assert as_flag(1) is False
    assert as_flag(None) is False
    assert as_flag("TRUE") is True


def test_invalid_timestamp_becomes_null() -> None:
    event = normalize_extended_record({"ts": "not-a-date", "ms_played": 1000})
    assert event.ts is None
    assert event.ms_played == 1000


def test_naive_timestamp_taken_as_utc() -> None:
    event = normalize_extended_record({"ts": "2023-06-15T10:30:00"})
    assert event.ts == datetime(2023, 6, 15, 10, 30, 0, tzinfo=UTC)


def test_offset_timestamp_converted_to_utc() -> None:
    event = normalize_extended_record({"ts": "2023-06-15T12:30:00+02:00"})
    assert event.ts == datetime(2023, 6, 15, 10, 30, 0, tzinfo=UTC)


def test_mistyped_ms_played_defaults_to_zero() -> None:
    assert normalize_extended_record({"ms_played": "abc"}).ms_played == 0
    assert normalize_extended_record({"ms_played": -5}).ms_played == 0
    assert normalize_extended_record({"ms_played": True}).ms_played == 0
    assert normalize_extended_record({"ms_played": "1500"}).ms_played == 1500


def test_offline_timestamp_seconds_and_millis() -> None:
    seconds = parse_offline_timestamp(1686825000)
    millis = parse_offline_timestamp(1686825000000)
    assert seconds == datetime(2023, 6, 15, 10, 30, 0, tzinfo=UTC)
    assert millis == seconds
    assert parse_offline_timestamp(0) is None
    assert parse_offline_timestamp(None) is None


def test_normalize_account_data_record() -> None:
    """Account Data record normalizes correctly."""
    raw = {
        "endTime": "2023-06-15 10:30",
        "artistName": "Queen",
        "trackName": "Bohemian Rhapsody",
        "msPlayed": 180000,
    }
    event = normalize_account_data_record(raw)
    assert event.track_name == "Bohemian Rhapsody"
    assert event.artist_name == "Queen"
    assert event.ms_played == 180000
    assert event.ts == datetime(2023, 6, 15, 10, 30, tzinfo=UTC)
    assert event.spotify_track_uri == ""


def test_normalize_record_dispatches_on_format() -> None:
    extended = normalize_record({"ts": "2023-06-15T10:30:00Z", "master_metadata_track_name": "A"})
    account = normalize_record({"endTime": "2023-06-15 10:30", "trackName": "B"})
    assert extended.track_name == "A"
    assert account.track_name == "B"


def test_normalize_record_non_object_yields_default_event() -> None:
    assert normalize_record(42) == ListeningEvent()
    assert normalize_record(None) == ListeningEvent()
    assert normalize_record(["a"]) == ListeningEvent()


def test_sensitive_fields_are_not_carried() -> None:
    event = normalize_record({"ip_addr_decrypted": "1.2.3.4", "user_agent_decrypted": "x", "platform": "ios"})
    dumped = event.model_dump()
    assert "ip_addr_decrypted" not in dumped
    assert "user_agent_decrypted" not in dumped
    assert event.platform == "ios"
