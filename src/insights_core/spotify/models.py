"""Pydantic models for Spotify Web API responses.

These are pure data models matching Spotify's JSON structure.
No DB or auth dependencies.
"""

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class SpotifyAccessToken(BaseModel):
    """Response from the client-credentials token endpoint."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 3600


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


class SpotifyImage(BaseModel):
    """Image object returned by Spotify (album art, artist photos, etc.)."""

    url: str
    height: int | None = None
    width: int | None = None


# ---------------------------------------------------------------------------
# Artists
# ---------------------------------------------------------------------------


class SpotifyArtistSimplified(BaseModel):
    """Simplified artist object (embedded in tracks, albums)."""

    id: str | None = None
    name: str
    uri: str | None = None
    href: str | None = None
    external_urls: dict[str, str] = Field(default_factory=dict)


class SpotifyArtistFull(SpotifyArtistSimplified):
    """Full artist object (from /artists endpoint)."""

    genres: list[str] = Field(default_factory=list)
    popularity: int | None = None
    images: list[SpotifyImage] = Field(default_factory=list)
    followers: dict[str, object] | None = None


# ---------------------------------------------------------------------------
# Albums
# ---------------------------------------------------------------------------


class SpotifyAlbumSimplified(BaseModel):
    """Simplified album object (embedded in tracks)."""

    id: str | None = None
    name: str
    uri: str | None = None
    album_type: str | None = None
    release_date: str | None = None
    images: list[SpotifyImage] = Field(default_factory=list)
    external_urls: dict[str, str] = Field(default_factory=dict)


class SpotifyAlbumFull(SpotifyAlbumSimplified):
    """Full album object from GET /albums."""

    genres: list[str] = Field(default_factory=list)
    popularity: int | None = None
    label: str | None = None
    total_tracks: int | None = None
    artists: list[SpotifyArtistSimplified] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Tracks
# ---------------------------------------------------------------------------


class SpotifyTrack(BaseModel):
    """Full track object from Spotify."""

    id: str | None = None
    name: str
    uri: str | None = None
    duration_ms: int | None = None
    explicit: bool | None = None
    popularity: int | None = None
    preview_url: str | None = None
    artists: list[SpotifyArtistSimplified] = Field(default_factory=list)
    album: SpotifyAlbumSimplified | None = None
    external_urls: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Batch endpoints
# ---------------------------------------------------------------------------


class BatchTracksResponse(BaseModel):
    """Response from GET /tracks?ids=..."""

    tracks: list[SpotifyTrack | None] = Field(default_factory=list)


class BatchArtistsResponse(BaseModel):
    """Response from GET /artists?ids=..."""

    artists: list[SpotifyArtistFull | None] = Field(default_factory=list)


class BatchAlbumsResponse(BaseModel):
    """Response from GET /albums?ids=..."""

    albums: list[SpotifyAlbumFull | None] = Field(default_factory=list)
