"""Pipeline exceptions.

Client-input errors (``MalformedInputError``) map to HTTP 400; backing-store
errors map to HTTP 500. ``EnrichmentError`` is never surfaced to clients.
"""


class InsightsError(Exception):
    """Base exception for the ingestion and aggregation pipeline."""


class MalformedInputError(InsightsError):
    """An uploaded document is not valid structured data."""


class WorkspaceProvisioningError(InsightsError):
    """A workspace table could not be created, confirmed ready, or deleted."""


class IngestionError(InsightsError):
    """A batch insert failed after exhausting its retry attempts."""

    def __init__(self, workspace_key: str, offset: int, cause: BaseException | str) -> None:
        self.workspace_key = workspace_key
        self.offset = offset
        self.cause = cause
        super().__init__(f"Ingestion into {workspace_key} failed at row offset {offset}: {cause}")


class AggregationError(InsightsError):
    """An aggregate query against a workspace could not execute."""


class EnrichmentError(InsightsError):
    """Catalog enrichment was aborted for this session."""


class CacheWriteError(InsightsError):
    """The insights document could not be stored."""


class CacheReadError(InsightsError):
    """The insights store could not be read."""
