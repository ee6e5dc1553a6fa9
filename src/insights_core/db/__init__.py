"""Database package -- convenience re-exports.

Importing this module registers all persistent models with Base.metadata.
"""

from insights_core.db.base import Base
from insights_core.db.models import InsightsCacheEntry
from insights_core.db.session import DatabaseManager

__all__ = [
    "Base",
    "DatabaseManager",
    "InsightsCacheEntry",
]
