"""Structured logging configuration for the API service."""

import logging
import sys

from insights_api.constants import ServiceName
from insights_api.logging.formatter import JSONLogFormatter
from insights_api.middleware import RequestIDLogFilter


def configure_logging(service: ServiceName = ServiceName.API, level: str = "INFO") -> None:
    """Set up structured JSON logging on the root logger."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONLogFormatter(service=service))
    handler.addFilter(RequestIDLogFilter())
    root.addHandler(handler)
