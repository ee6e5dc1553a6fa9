"""Application settings loaded from environment variables."""

import functools

from pydantic_settings import BaseSettings

from insights_api.constants import (
    DEFAULT_CORS_ALLOWED_ORIGINS,
    DEFAULT_UPLOAD_MAX_FILE_SIZE_MB,
    DEFAULT_UPLOAD_MAX_FILES,
)
from insights_core.ingest.constants import DEFAULT_MAX_RECORDS
from insights_core.loader import DEFAULT_BATCH_SIZE, DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY
from insights_core.spotify.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS
from insights_core.workspace import DEFAULT_READY_TIMEOUT_SECONDS


class AppSettings(BaseSettings):
    """API service configuration."""

    # Spotify catalog enrichment (client-credentials; empty disables enrichment)
    SPOTIFY_CLIENT_ID: str = ""
    SPOTIFY_CLIENT_SECRET: str = ""
    SPOTIFY_TOKEN_MAX_AGE_SECONDS: int = DEFAULT_TOKEN_MAX_AGE_SECONDS
    ENRICHMENT_ENABLED: bool = True

    # Ingestion
    INGEST_BATCH_SIZE: int = DEFAULT_BATCH_SIZE
    INGEST_MAX_ATTEMPTS: int = DEFAULT_MAX_ATTEMPTS
    INGEST_RETRY_DELAY_SECONDS: float = DEFAULT_RETRY_DELAY
    IMPORT_MAX_RECORDS: int = DEFAULT_MAX_RECORDS

    # Workspaces
    WORKSPACE_READY_TIMEOUT_SECONDS: float = DEFAULT_READY_TIMEOUT_SECONDS

    # Uploads
    UPLOAD_MAX_FILES: int = DEFAULT_UPLOAD_MAX_FILES
    UPLOAD_MAX_FILE_SIZE_MB: int = DEFAULT_UPLOAD_MAX_FILE_SIZE_MB

    # CORS
    CORS_ALLOWED_ORIGINS: str = DEFAULT_CORS_ALLOWED_ORIGINS  # comma-separated origins

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = {"env_prefix": ""}


@functools.lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return cached application settings singleton."""
    return AppSettings()
