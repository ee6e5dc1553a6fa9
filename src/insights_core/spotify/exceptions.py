"""Errors raised by the catalog client."""


class SpotifyClientError(Exception):
    """A catalog lookup failed; the batch it belongs to is unusable."""


class SpotifyAuthError(SpotifyClientError):
    """The bearer token was rejected (HTTP 401)."""


class SpotifyRequestError(SpotifyClientError):
    """Any other non-2xx reply."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        suffix = f": {detail}" if detail else ""
        super().__init__(f"Spotify returned HTTP {status_code}{suffix}")


class SpotifyResponseError(SpotifyClientError):
    """A 2xx reply whose body is not the expected JSON shape."""
