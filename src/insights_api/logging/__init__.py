"""Structured logging: JSON formatter and setup."""

from insights_api.logging.formatter import JSONLogFormatter
from insights_api.logging.setup import configure_logging

__all__ = ["JSONLogFormatter", "configure_logging"]
