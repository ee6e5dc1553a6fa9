"""SQLAlchemy declarative base."""

from datetime import UTC, datetime

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for persistent models.

    Workspace tables are not registered here; they live on their own
    ``MetaData`` and are created and dropped per session.
    """


def utc_now() -> datetime:
    """Return current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)
