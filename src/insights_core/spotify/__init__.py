"""Spotify catalog client, token provider, and models."""

from insights_core.spotify.client import SpotifyClient
from insights_core.spotify.exceptions import (
    SpotifyAuthError,
    SpotifyClientError,
    SpotifyRequestError,
    SpotifyResponseError,
)
from insights_core.spotify.tokens import SpotifyTokenProvider

__all__ = [
    "SpotifyClient",
    "SpotifyTokenProvider",
    "SpotifyAuthError",
    "SpotifyClientError",
    "SpotifyRequestError",
    "SpotifyResponseError",
]
