"""Shared configuration."""

from insights_core.config.constants import DEFAULT_DATABASE_URL
from insights_core.config.database import DatabaseSettings

__all__ = [
    "DEFAULT_DATABASE_URL",
    "DatabaseSettings",
]
