"""Centralized constants for the API service."""

import enum

# --- Service identity ---


class ServiceName(enum.StrEnum):
    """Service names used for logging and identification."""

    API = "api"


# --- Application metadata ---

APP_TITLE = "Listening Insights API"
APP_DESCRIPTION = "Upload listening-history exports and retrieve aggregated insights"
APP_VERSION = "0.1.0"


# --- Routes ---


class Routes:
    """API paths: single source of truth."""

    START_SESSION = "/start-session"
    UPLOAD = "/upload"
    FINISH_SESSION = "/finish-session"
    GET_INSIGHTS = "/get-insights/{user_identity}"
    HEALTH = "/healthz"
    SESSIONS_TAG = "sessions"


# Multipart form field carrying uploaded files
UPLOAD_FIELD = "files"

# Default configuration values
DEFAULT_UPLOAD_MAX_FILES = 20
DEFAULT_UPLOAD_MAX_FILE_SIZE_MB = 100
DEFAULT_CORS_ALLOWED_ORIGINS = "http://localhost:5173"
