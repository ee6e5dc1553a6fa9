"""Upload parsing and record normalization package."""

from insights_core.ingest.models import ListeningEvent
from insights_core.ingest.normalizers import normalize_record
from insights_core.ingest.parser import UploadParser

__all__ = ["ListeningEvent", "UploadParser", "normalize_record"]
