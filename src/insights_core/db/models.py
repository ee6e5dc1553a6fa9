"""Persistent models: InsightsCacheEntry."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from insights_core.db.base import Base, utc_now

# SQLite only autoincrements INTEGER primary keys
_BigIntPK = BigInteger().with_variant(Integer(), "sqlite")


class InsightsCacheEntry(Base):
    """Latest insights document for one user identity.

    ``object_name`` is derived from the identity the same way the workspace
    key is, so finish-session can write it knowing only the key. One row per
    identity; writes overwrite.
    """

    __tablename__ = "insights_cache"

    id: Mapped[int] = mapped_column(_BigIntPK, primary_key=True, autoincrement=True)
    object_name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False, default="application/json")
    data_json: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )
