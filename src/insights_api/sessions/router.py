"""Session REST endpoints: start, upload, finish, and read back insights."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from insights_api.constants import UPLOAD_FIELD, Routes
from insights_api.dependencies import Pipeline
from insights_api.sessions.schemas import FinishSessionResponse, StartSessionResponse, UploadResponse
from insights_api.settings import AppSettings, get_settings
from insights_core.aggregation.schemas import InsightsDocument
from insights_core.errors import (
    AggregationError,
    CacheReadError,
    CacheWriteError,
    IngestionError,
    MalformedInputError,
    WorkspaceProvisioningError,
)
from insights_core.workspace import is_valid_workspace_key

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 1024 * 1024


def _require_workspace_key(workspace_key: str | None) -> str:
    if not workspace_key:
        raise HTTPException(status_code=400, detail="Missing workspaceKey")
    if not is_valid_workspace_key(workspace_key):
        raise HTTPException(status_code=400, detail=f"Invalid workspaceKey: {workspace_key!r}")
    return workspace_key


async def _read_upload(file: UploadFile, max_bytes: int, max_mb: int) -> tuple[str, bytes]:
    """Read an uploaded file into memory, enforcing the per-file size cap."""
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(_READ_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File {file.filename!r} exceeds maximum size of {max_mb}MB",
            )
        chunks.append(chunk)
    return file.filename or "", b"".join(chunks)


class SessionsRouter:
    """Class-based router for the upload session lifecycle."""

    def __init__(self) -> None:
        self.router = APIRouter()
        self._register_routes()

    def _register_routes(self) -> None:
        r = self.router
        r.add_api_route(
            Routes.START_SESSION,
            self.start_session,
            methods=["POST"],
            response_model=StartSessionResponse,
        )
        r.add_api_route(
            Routes.UPLOAD,
            self.upload,
            methods=["POST"],
            response_model=UploadResponse,
        )
        r.add_api_route(
            Routes.FINISH_SESSION,
            self.finish_session,
            methods=["POST"],
            response_model=FinishSessionResponse,
        )
        r.add_api_route(
            Routes.GET_INSIGHTS,
            self.get_insights,
            methods=["GET"],
            response_model=InsightsDocument,
        )

    async def start_session(
        self,
        pipeline: Pipeline,
        email: str | None = Query(default=None),
    ) -> StartSessionResponse:
        """Open a fresh workspace for a user, discarding any stale one."""
        identity = (email or "").strip()
        if not identity:
            raise HTTPException(status_code=400, detail="Missing email")
        try:
            key = await pipeline.start_session(identity)
        except WorkspaceProvisioningError as exc:
            logger.error("Session start failed: %s", exc)
            raise HTTPException(status_code=500, detail="Failed to provision workspace") from exc
        return StartSessionResponse(message="Session started", workspace_key=key)

    async def upload(
        self,
        pipeline: Pipeline,
        settings: Annotated[AppSettings, Depends(get_settings)],
        workspace_key: str | None = Query(default=None, alias="workspaceKey"),
        files: list[UploadFile] | None = File(default=None, alias=UPLOAD_FIELD),
    ) -> UploadResponse:
        """Parse uploaded export files and load them into the session workspace."""
        key = _require_workspace_key(workspace_key)
        if not files:
            raise HTTPException(status_code=400, detail="No files uploaded")
        if len(files) > settings.UPLOAD_MAX_FILES:
            raise HTTPException(
                status_code=400,
                detail=f"Too many files: {len(files)} (maximum {settings.UPLOAD_MAX_FILES})",
            )

        max_bytes = settings.UPLOAD_MAX_FILE_SIZE_MB * 1024 * 1024
        contents = [await _read_upload(f, max_bytes, settings.UPLOAD_MAX_FILE_SIZE_MB) for f in files]

        try:
            inserted = await pipeline.upload(key, contents)
        except MalformedInputError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except IngestionError as exc:
            logger.error("Ingestion failed: %s", exc, extra={"workspace_key": key})
            raise HTTPException(status_code=500, detail="Failed to ingest uploaded records") from exc
        return UploadResponse(message=f"Ingested {inserted} records", records_ingested=inserted)

    async def finish_session(
        self,
        pipeline: Pipeline,
        workspace_key: str | None = Query(default=None, alias="workspaceKey"),
    ) -> FinishSessionResponse:
        """Aggregate the session, cache the insights, and delete the workspace."""
        key = _require_workspace_key(workspace_key)
        try:
            document = await pipeline.finish_session(key)
        except AggregationError as exc:
            logger.error("Aggregation failed: %s", exc, extra={"workspace_key": key})
            raise HTTPException(status_code=500, detail="Failed to aggregate session") from exc
        except CacheWriteError as exc:
            logger.error("Caching insights failed: %s", exc, extra={"workspace_key": key})
            raise HTTPException(status_code=500, detail="Failed to store insights") from exc
        return FinishSessionResponse(message="Session finished", insights=document)

    async def get_insights(self, user_identity: str, pipeline: Pipeline) -> InsightsDocument:
        """Latest cached insights for a user."""
        try:
            document = await pipeline.get_insights(user_identity)
        except CacheReadError as exc:
            logger.error("Reading cached insights failed: %s", exc)
            raise HTTPException(status_code=500, detail="Failed to read insights") from exc
        if document is None:
            raise HTTPException(status_code=404, detail=f"No insights found for {user_identity}")
        return document


_instance = SessionsRouter()
router = _instance.router
