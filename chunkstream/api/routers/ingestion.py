"""
Ingestion API endpoints.

Streams units from a local directory or an S3 prefix as newline-delimited
JSON, one unit per line, in the order the pipeline delivers them.

Routes: POST /ingest/local, POST /ingest/s3

Dependencies: chunkstream.core.ingestion
System role: Streaming ingestion HTTP API
"""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from chunkstream.api.deps import (
    get_ingestion_pipeline,
    get_local_reader_factory,
    get_s3_reader_factory,
    get_settings_dependency,
)
from chunkstream.configs import Settings
from chunkstream.core.exceptions import SourceListingError
from chunkstream.core.ingestion import DocumentReader, IngestionPipeline, PipelineRun

logger = logging.getLogger(__name__)

NDJSON_MEDIA_TYPE = "application/x-ndjson"


class IngestRequest(BaseModel):
    """Options shared by every ingestion request."""

    kind: Literal["paragraph", "section"] = Field(
        default="paragraph",
        description="paragraph reads .txt items, section reads .md items",
    )
    worker_count: int | None = Field(
        default=None, gt=0, description="Worker threads (configured default if omitted)"
    )
    suffix: str | None = Field(
        default=None, description="Override the item suffix filter"
    )


class LocalIngestRequest(IngestRequest):
    """Ingest files from a local directory."""

    directory: str | None = Field(
        default=None,
        description="Directory under the configured root (the root itself if omitted)",
    )


class S3IngestRequest(IngestRequest):
    """Ingest objects under an S3 prefix."""

    bucket: str | None = Field(default=None, description="Bucket (configured default if omitted)")
    prefix: str | None = Field(default=None, description="Key prefix")
    start_token: str | None = Field(
        default=None, description="Continuation token to resume listing from"
    )


router = APIRouter(prefix="/ingest", tags=["ingestion"])


def _confine_directory(directory: str | None, root: str) -> str:
    """Resolve a requested directory, refusing anything outside the configured root."""
    root_path = Path(root).resolve()
    if directory is None:
        return str(root_path)

    requested = Path(directory)
    if not requested.is_absolute():
        requested = root_path / requested
    resolved = requested.resolve()
    if not resolved.is_relative_to(root_path):
        logger.warning(
            f"{__name__}:_confine_directory - Refused directory outside root: {directory}"
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Directory is outside the configured source root: {directory}",
        )
    return str(resolved)


def _start_run(reader: DocumentReader, request: IngestRequest) -> PipelineRun:
    try:
        return reader.read(
            request.kind, worker_count=request.worker_count, suffix=request.suffix
        )
    except SourceListingError as e:
        logger.warning(f"{__name__}:_start_run - Listing failed: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


def _stream_units(run: PipelineRun) -> Iterator[str]:
    try:
        for unit in run:
            yield unit.model_dump_json() + "\n"
    finally:
        # No-op once exhausted; cancels the run when the client disconnects
        run.close(wait=False)


@router.post("/local", response_class=StreamingResponse)
def ingest_local(
    request: LocalIngestRequest,
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
    reader_factory: Callable[..., DocumentReader] = Depends(get_local_reader_factory),
    settings: Settings = Depends(get_settings_dependency),
) -> StreamingResponse:
    """
    Stream units read from a local directory.

    Args:
        request: Directory and extraction options
        pipeline: Pipeline configured from settings
        reader_factory: Builds the directory reader
        settings: Supplies LOCAL_SOURCE_DIRECTORY, the only readable root

    Returns:
        StreamingResponse: NDJSON, one unit per line

    Raises:
        HTTPException: 400 when the directory is outside the root or cannot be listed
    """
    directory = _confine_directory(request.directory, settings.local_source.directory)
    reader = reader_factory(directory, pipeline=pipeline)
    run = _start_run(reader, request)
    return StreamingResponse(_stream_units(run), media_type=NDJSON_MEDIA_TYPE)


@router.post("/s3", response_class=StreamingResponse)
def ingest_s3(
    request: S3IngestRequest,
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
    reader_factory: Callable[..., DocumentReader] = Depends(get_s3_reader_factory),
) -> StreamingResponse:
    """
    Stream units read from an S3 prefix.

    Args:
        request: Bucket, prefix and extraction options
        pipeline: Pipeline configured from settings
        reader_factory: Builds the S3 reader

    Returns:
        StreamingResponse: NDJSON, one unit per line

    Raises:
        HTTPException: 400 when the prefix cannot be listed
    """
    reader = reader_factory(
        request.bucket,
        prefix=request.prefix,
        start_token=request.start_token,
        pipeline=pipeline,
    )
    run = _start_run(reader, request)
    return StreamingResponse(_stream_units(run), media_type=NDJSON_MEDIA_TYPE)
