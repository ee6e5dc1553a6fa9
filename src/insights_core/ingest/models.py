"""Normalized listening event model."""

from datetime import datetime

from pydantic import BaseModel, Field


class ListeningEvent(BaseModel):
    """A single listening event in the fixed workspace schema.

    Every field has a default so any raw record, however sparse, yields a
    row. Field names are the workspace column names.
    """

    model_config = {"frozen": True}

    ts: datetime | None = None  # aware UTC
    username: str = ""
    platform: str = ""
    ms_played: int = Field(default=0, ge=0)
    conn_country: str = ""
    track_name: str = ""
    artist_name: str = ""
    album_name: str = ""
    spotify_track_uri: str = ""
    episode_name: str = ""
    episode_show_name: str = ""
    spotify_episode_uri: str = ""
    reason_start: str = ""
    reason_end: str = ""
    shuffle: bool = False
    skipped: bool = False
    offline: bool = False
    offline_timestamp: datetime | None = None
    incognito_mode: bool = False
