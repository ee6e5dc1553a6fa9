"""Spotify API URLs, batch limits, and request defaults."""

# Spotify Auth
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"

# Spotify Web API base
SPOTIFY_API_BASE = "https://api.spotify.com/v1"

# Spotify Web API endpoints
TRACKS_URL = f"{SPOTIFY_API_BASE}/tracks"
ARTISTS_URL = f"{SPOTIFY_API_BASE}/artists"
ALBUMS_URL = f"{SPOTIFY_API_BASE}/albums"

# Maximum IDs per batch request
TRACKS_BATCH_LIMIT = 50
ARTISTS_BATCH_LIMIT = 50
ALBUMS_BATCH_LIMIT = 20

# HTTP
DEFAULT_REQUEST_TIMEOUT = 30.0  # seconds

# Client-credentials tokens live 60 minutes; refresh well before that
DEFAULT_TOKEN_MAX_AGE_SECONDS = 50 * 60
