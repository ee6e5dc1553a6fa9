"""Process-wide Spotify bearer token for catalog lookups (client-credentials flow)."""

import asyncio
import logging
import time

import httpx
from pydantic import ValidationError

from insights_core.errors import EnrichmentError
from insights_core.spotify.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TOKEN_MAX_AGE_SECONDS,
    SPOTIFY_TOKEN_URL,
)
from insights_core.spotify.models import SpotifyAccessToken

logger = logging.getLogger(__name__)


class SpotifyTokenProvider:
    """Single-slot token cache with a freshness window and coalesced refresh.

    At most one refresh is in flight: callers that find the token stale
    queue on the lock, and all but the first find a fresh token once they
    acquire it.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        max_age_seconds: float = DEFAULT_TOKEN_MAX_AGE_SECONDS,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._max_age = max_age_seconds
        self._request_timeout = request_timeout
        self._token: str | None = None
        self._expires_at: float = 0.0  # time.monotonic() deadline
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    def is_fresh(self) -> bool:
        return self._token is not None and time.monotonic() < self._expires_at

    async def get_token(self) -> str:
        """Return a fresh token, refreshing it first if it is missing or stale.

        Raises:
            EnrichmentError: If the token endpoint cannot be reached or
                rejects the credentials.
        """
        if self.is_fresh():
            return self._token  # type: ignore[return-value]

        async with self._lock:
            if self.is_fresh():
                return self._token  # type: ignore[return-value]
            return await self._refresh()

    async def _refresh(self) -> str:
        if not self.configured:
            raise EnrichmentError("Spotify client credentials are not configured")

        logger.info("Refreshing Spotify access token")
        try:
            async with httpx.AsyncClient(timeout=self._request_timeout) as client:
                response = await client.post(
                    SPOTIFY_TOKEN_URL,
                    data={
                        "grant_type": "client_credentials",
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                    },
                )
        except httpx.HTTPError as exc:
            raise EnrichmentError(f"Token refresh failed: {exc}") from exc

        if response.status_code != 200:
            raise EnrichmentError(f"Token refresh failed: HTTP {response.status_code}")

        try:
            token = SpotifyAccessToken.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise EnrichmentError(f"Token refresh returned an unexpected body: {exc}") from exc

        self._token = token.access_token
        self._expires_at = time.monotonic() + min(self._max_age, token.expires_in)
        logger.info("Spotify access token refreshed")
        return token.access_token
