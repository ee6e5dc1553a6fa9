"""Upload parser: turns uploaded JSON documents and export ZIPs into ListeningEvent lists."""

import codecs
import io
import logging
import zipfile
import zlib
from collections.abc import Iterator, Sequence

import ijson  # type: ignore[import-untyped]

from insights_core.errors import MalformedInputError
from insights_core.ingest.constants import (
    ACCOUNT_DATA_PATTERN,
    DEFAULT_MAX_RECORDS,
    EXTENDED_HISTORY_PATTERN,
)
from insights_core.ingest.models import ListeningEvent
from insights_core.ingest.normalizers import normalize_record

logger = logging.getLogger(__name__)

_ZIP_MAGIC = b"PK\x03\x04"


class UploadParser:
    """Parses the files of one upload call.

    Each file is either a JSON document (one event object or an array of
    them) or a Spotify export ZIP. Everything is parsed before anything is
    loaded, so a malformed file rejects the whole upload without side effects.
    """

    def __init__(self, max_records: int = DEFAULT_MAX_RECORDS) -> None:
        self._max_records = max_records

    def parse_files(self, files: Sequence[tuple[str, bytes]]) -> list[ListeningEvent]:
        """Parse ``(filename, content)`` pairs into one concatenated event list.

        Raises:
            MalformedInputError: If any file is not valid structured data, or
                the upload exceeds the record cap.
        """
        events: list[ListeningEvent] = []
        for filename, data in files:
            for event in self.iter_file(filename, data):
                if len(events) >= self._max_records:
                    raise MalformedInputError(f"Upload exceeds the {self._max_records} record limit")
                events.append(event)
            logger.info("Parsed upload file %s (%d records so far)", filename, len(events))
        return events

    def iter_file(self, filename: str, data: bytes) -> Iterator[ListeningEvent]:
        """Yield events from one uploaded file, dispatching on ZIP vs JSON."""
        if filename.lower().endswith(".zip") or data.startswith(_ZIP_MAGIC):
            yield from self._iter_zip(filename, data)
        else:
            yield from self.iter_document(data, source=filename)

    def iter_document(self, data: bytes, source: str = "<upload>") -> Iterator[ListeningEvent]:
        """Yield events from a JSON document holding an object or an array of objects.

        Arrays are streamed item by item with ijson.
        """
        payload = data.removeprefix(codecs.BOM_UTF8)
        head = payload.lstrip()[:1]
        if head == b"[":
            prefix = "item"
        elif head == b"{":
            prefix = ""
        else:
            raise MalformedInputError(f"{source}: expected a JSON object or array")

        try:
            for raw in ijson.items(io.BytesIO(payload), prefix, use_float=True):
                yield normalize_record(raw)
        except (ijson.JSONError, ValueError) as exc:
            raise MalformedInputError(f"{source}: invalid JSON ({exc})") from exc

    def _iter_zip(self, filename: str, data: bytes) -> Iterator[ListeningEvent]:
        try:
            zf = zipfile.ZipFile(io.BytesIO(data), "r")
        except zipfile.BadZipFile as exc:
            raise MalformedInputError(f"{filename}: not a valid ZIP archive") from exc

        with zf:
            entries = sorted(
                n for n in zf.namelist() if EXTENDED_HISTORY_PATTERN.search(n) or ACCOUNT_DATA_PATTERN.search(n)
            )
            if not entries:
                raise MalformedInputError(
                    f"{filename}: no recognizable Spotify export files. "
                    "Expected endsong_*.json, Streaming_History_Audio_*.json, or StreamingHistory*.json"
                )
            for entry in entries:
                logger.info("Parsing ZIP entry: %s", entry)
                try:
                    payload = zf.read(entry)
                except (zipfile.BadZipFile, zlib.error, RuntimeError, NotImplementedError) as exc:
                    raise MalformedInputError(f"{filename}:{entry}: unreadable ZIP entry ({exc})") from exc
                yield from self.iter_document(payload, source=f"{filename}:{entry}")
