"""The fixed catalog of aggregate queries run against a workspace.

Every entry is parameterized only by the workspace table; no request data
reaches the SQL. Bump ``CATALOG_VERSION`` when an entry's shape changes, since
cached documents were produced by the previous catalog.
"""

import enum
from dataclasses import dataclass

from pydantic import BaseModel

from insights_core.aggregation.schemas import (
    AlbumMinutes,
    AlbumPlayCount,
    ArtistMinutes,
    ArtistPlayCount,
    ArtistYearMinutes,
    ArtistYearPlayCount,
    DayOfWeekMinutes,
    HourOfDayMinutes,
    TrackMinutes,
    TrackPlayCount,
    TrackYearMonthMinutes,
    TrackYearMonthPlayCount,
)

CATALOG_VERSION = 1

MS_PER_MINUTE = 60_000
MS_PER_HOUR = 3_600_000

# Row caps per granularity
TOP_ENTITY_LIMIT = 100
TOP_ALBUM_LIMIT = 20
TOP_PERIOD_LIMIT = 50


class Metric(enum.StrEnum):
    """Ranking metric; the value is the output key."""

    PLAYS = "total_plays"
    MINUTES = "minutes_played"


class Dimension(enum.StrEnum):
    """Grouping keys; the value is the output key."""

    ARTIST = "artist"
    ALBUM = "album"
    TRACK = "track"
    YEAR = "year"
    MONTH = "month"
    DAY_OF_WEEK = "day_of_week"
    HOUR_OF_DAY = "hour_of_day"


@dataclass(frozen=True, slots=True)
class RankingQuery:
    """One named result set: group by ``dimensions``, rank by ``metric`` descending."""

    name: str  # InsightsDocument field
    dimensions: tuple[Dimension, ...]
    metric: Metric
    limit: int | None
    row_model: type[BaseModel]
    collect_track_uris: bool = False


QUERY_CATALOG: tuple[RankingQuery, ...] = (
    RankingQuery(
        "top_artists_by_play_count",
        (Dimension.ARTIST,),
        Metric.PLAYS,
        TOP_ENTITY_LIMIT,
        ArtistPlayCount,
    ),
    RankingQuery(
        "top_albums_by_play_count",
        (Dimension.ALBUM,),
        Metric.PLAYS,
        TOP_ALBUM_LIMIT,
        AlbumPlayCount,
    ),
    RankingQuery(
        "top_tracks_by_play_count",
        (Dimension.TRACK,),
        Metric.PLAYS,
        TOP_ENTITY_LIMIT,
        TrackPlayCount,
        collect_track_uris=True,
    ),
    RankingQuery(
        "top_artists_by_minutes_played",
        (Dimension.ARTIST,),
        Metric.MINUTES,
        TOP_ENTITY_LIMIT,
        ArtistMinutes,
    ),
    RankingQuery(
        "top_albums_by_minutes_played",
        (Dimension.ALBUM,),
        Metric.MINUTES,
        TOP_ALBUM_LIMIT,
        AlbumMinutes,
    ),
    RankingQuery(
        "top_tracks_by_minutes_played",
        (Dimension.TRACK,),
        Metric.MINUTES,
        TOP_ENTITY_LIMIT,
        TrackMinutes,
        collect_track_uris=True,
    ),
    RankingQuery(
        "top_artists_by_year",
        (Dimension.ARTIST, Dimension.YEAR),
        Metric.PLAYS,
        TOP_PERIOD_LIMIT,
        ArtistYearPlayCount,
    ),
    RankingQuery(
        "top_artists_by_year_and_minutes_played",
        (Dimension.ARTIST, Dimension.YEAR),
        Metric.MINUTES,
        TOP_PERIOD_LIMIT,
        ArtistYearMinutes,
    ),
    RankingQuery(
        "top_tracks_by_year_month_play_count",
        (Dimension.TRACK, Dimension.YEAR, Dimension.MONTH),
        Metric.PLAYS,
        TOP_PERIOD_LIMIT,
        TrackYearMonthPlayCount,
        collect_track_uris=True,
    ),
    RankingQuery(
        "top_tracks_by_year_month_minutes_played",
        (Dimension.TRACK, Dimension.YEAR, Dimension.MONTH),
        Metric.MINUTES,
        TOP_PERIOD_LIMIT,
        TrackYearMonthMinutes,
        collect_track_uris=True,
    ),
    RankingQuery(
        "listening_time_by_day_of_week",
        (Dimension.DAY_OF_WEEK,),
        Metric.MINUTES,
        None,
        DayOfWeekMinutes,
    ),
    RankingQuery(
        "listening_time_by_hour_of_day",
        (Dimension.HOUR_OF_DAY,),
        Metric.MINUTES,
        None,
        HourOfDayMinutes,
    ),
)
