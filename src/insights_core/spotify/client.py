"""Spotify Web API async client for batch catalog lookups."""

from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from insights_core.spotify.constants import (
    ALBUMS_BATCH_LIMIT,
    ALBUMS_URL,
    ARTISTS_BATCH_LIMIT,
    ARTISTS_URL,
    DEFAULT_REQUEST_TIMEOUT,
    TRACKS_BATCH_LIMIT,
    TRACKS_URL,
)
from insights_core.spotify.exceptions import SpotifyAuthError, SpotifyRequestError, SpotifyResponseError
from insights_core.spotify.models import (
    BatchAlbumsResponse,
    BatchArtistsResponse,
    BatchTracksResponse,
)

M = TypeVar("M", bound=BaseModel)


def _error_detail(response: httpx.Response) -> str:
    """Best-effort error message from a Spotify error body."""
    try:
        message = response.json().get("error", {}).get("message")
    except (ValueError, AttributeError):
        message = response.text[:200] if response.text else None
    return message or f"HTTP {response.status_code}"


class SpotifyClient:
    """Async client for the ``/tracks``, ``/artists`` and ``/albums`` batch endpoints.

    Bound to one bearer token. Every lookup is a single request: a 401
    raises ``SpotifyAuthError``, any other non-2xx reply raises
    ``SpotifyRequestError``, and an unreadable body raises
    ``SpotifyResponseError``.
    """

    def __init__(self, access_token: str, *, request_timeout: float = DEFAULT_REQUEST_TIMEOUT) -> None:
        self._access_token = access_token
        self._request_timeout = request_timeout

    async def get_tracks(self, track_ids: list[str]) -> BatchTracksResponse:
        """GET /tracks?ids=... (max 50 per request)."""
        return await self._get_batch(TRACKS_URL, track_ids, TRACKS_BATCH_LIMIT, BatchTracksResponse)

    async def get_artists(self, artist_ids: list[str]) -> BatchArtistsResponse:
        """GET /artists?ids=... (max 50 per request)."""
        return await self._get_batch(ARTISTS_URL, artist_ids, ARTISTS_BATCH_LIMIT, BatchArtistsResponse)

    async def get_albums(self, album_ids: list[str]) -> BatchAlbumsResponse:
        """GET /albums?ids=... (max 20 per request)."""
        return await self._get_batch(ALBUMS_URL, album_ids, ALBUMS_BATCH_LIMIT, BatchAlbumsResponse)

    async def _get_batch(self, url: str, ids: list[str], limit: int, model: type[M]) -> M:
        """Fetch up to ``limit`` IDs in one call; extra IDs are ignored."""
        if not ids:
            return model()
        response = await self._get(url, {"ids": ",".join(ids[:limit])})
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise SpotifyResponseError(f"Unexpected response body from {url}: {exc}") from exc

    async def _get(self, url: str, params: dict[str, str]) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self._access_token}"}
        async with httpx.AsyncClient(timeout=self._request_timeout) as client:
            response = await client.get(url, params=params, headers=headers)

        if response.status_code == 401:
            raise SpotifyAuthError("Spotify returned 401 Unauthorized")
        if not response.is_success:
            raise SpotifyRequestError(status_code=response.status_code, detail=_error_detail(response))
        return response
