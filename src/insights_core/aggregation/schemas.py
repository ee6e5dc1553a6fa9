"""Pydantic models for the insights document and its result-set rows."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from insights_core.spotify.models import SpotifyAlbumFull, SpotifyArtistFull, SpotifyTrack

# ---------------------------------------------------------------------------
# Rankings by play count
# ---------------------------------------------------------------------------


class ArtistPlayCount(BaseModel):
    artist: str
    total_plays: int


class AlbumPlayCount(BaseModel):
    album: str
    total_plays: int


class TrackPlayCount(BaseModel):
    track: str
    total_plays: int
    track_uris: list[str] = Field(default_factory=list)


class ArtistYearPlayCount(BaseModel):
    artist: str
    year: int | None = None
    total_plays: int


class TrackYearMonthPlayCount(BaseModel):
    track: str
    year: int | None = None
    month: int | None = None
    total_plays: int
    track_uris: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Rankings by minutes played
# ---------------------------------------------------------------------------


class ArtistMinutes(BaseModel):
    artist: str
    minutes_played: float


class AlbumMinutes(BaseModel):
    album: str
    minutes_played: float


class TrackMinutes(BaseModel):
    track: str
    minutes_played: float
    track_uris: list[str] = Field(default_factory=list)


class ArtistYearMinutes(BaseModel):
    artist: str
    year: int | None = None
    minutes_played: float


class TrackYearMonthMinutes(BaseModel):
    track: str
    year: int | None = None
    month: int | None = None
    minutes_played: float
    track_uris: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Distributions
# ---------------------------------------------------------------------------


class DayOfWeekMinutes(BaseModel):
    """Listening time per weekday. 1=Sunday .. 7=Saturday."""

    day_of_week: int | None = None
    minutes_played: float


class HourOfDayMinutes(BaseModel):
    """Listening time per UTC hour, 0..23."""

    hour_of_day: int | None = None
    minutes_played: float


# ---------------------------------------------------------------------------
# Summary and enrichment
# ---------------------------------------------------------------------------


class BasicInsights(BaseModel):
    """Whole-workspace summary."""

    total_records: int = 0
    unique_users: int = 0
    avg_play_time: float | None = None  # mean ms_played
    total_ms_played: int = 0
    listening_hours: float = 0.0
    first_play: datetime | None = None
    last_play: datetime | None = None


class EnrichmentPayload(BaseModel):
    """Catalog metadata keyed by Spotify ID. IDs that failed to fetch are absent."""

    tracks: dict[str, SpotifyTrack] = Field(default_factory=dict)
    albums: dict[str, SpotifyAlbumFull] = Field(default_factory=dict)
    artists: dict[str, SpotifyArtistFull] = Field(default_factory=dict)


class InsightsDocument(BaseModel):
    """Aggregated listening insights for one completed session.

    Serialized with camelCase keys (``topArtistsByPlayCount``...); accepts
    either spelling on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    top_artists_by_play_count: list[ArtistPlayCount] = Field(default_factory=list)
    top_albums_by_play_count: list[AlbumPlayCount] = Field(default_factory=list)
    top_tracks_by_play_count: list[TrackPlayCount] = Field(default_factory=list)
    top_artists_by_minutes_played: list[ArtistMinutes] = Field(default_factory=list)
    top_albums_by_minutes_played: list[AlbumMinutes] = Field(default_factory=list)
    top_tracks_by_minutes_played: list[TrackMinutes] = Field(default_factory=list)
    top_artists_by_year: list[ArtistYearPlayCount] = Field(default_factory=list)
    top_artists_by_year_and_minutes_played: list[ArtistYearMinutes] = Field(default_factory=list)
    top_tracks_by_year_month_play_count: list[TrackYearMonthPlayCount] = Field(default_factory=list)
    top_tracks_by_year_month_minutes_played: list[TrackYearMonthMinutes] = Field(default_factory=list)
    listening_time_by_day_of_week: list[DayOfWeekMinutes] = Field(default_factory=list)
    listening_time_by_hour_of_day: list[HourOfDayMinutes] = Field(default_factory=list)
    basic_insights: BasicInsights = Field(default_factory=BasicInsights)
    enrichment: EnrichmentPayload | None = None
