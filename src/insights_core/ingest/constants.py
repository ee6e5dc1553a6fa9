"""Constants for upload parsing and normalization."""

import re

# ZIP entry patterns for Spotify export formats
EXTENDED_HISTORY_PATTERN = re.compile(
    r"(endsong_\d+\.json|Streaming_History_Audio_.*\.json)$",
    re.IGNORECASE,
)
ACCOUNT_DATA_PATTERN = re.compile(r"StreamingHistory\d*\.json$", re.IGNORECASE)

# Fields dropped from raw records before normalization (privacy)
SENSITIVE_FIELDS = frozenset(
    {
        "ip_addr_decrypted",
        "ip_addr",
        "user_agent_decrypted",
        "user_agent",
    }
)

# The only source token that normalizes a boolean flag to True
TRUTHY_TOKEN = "TRUE"

# Epoch values above this are milliseconds, otherwise seconds
EPOCH_MILLIS_THRESHOLD = 100_000_000_000

ACCOUNT_DATA_TIME_FORMAT = "%Y-%m-%d %H:%M"

DEFAULT_MAX_RECORDS = 5_000_000
