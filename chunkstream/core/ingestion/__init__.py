"""
Ingestion pipeline.

Exports:
  - DocumentReader, create_local_reader, create_s3_reader: Source readers
  - IngestionPipeline, PipelineRun: Run orchestration
  - Backlog, FanInBuffer, WorkerPool: Coordination primitives
  - Paragraph, SectionChunk, CodeBlock, Unit: Emitted units
  - PipelineReport, ItemFailure: Run summaries

Dependencies: boto3, markdown_it, pydantic
System role: Turns a source's items into a single lazy stream of units
"""

from chunkstream.core.ingestion.backlog import Backlog
from chunkstream.core.ingestion.entrypoint import IngestionPipeline, PipelineRun
from chunkstream.core.ingestion.fan_in import FanInBuffer
from chunkstream.core.ingestion.models import (
    CodeBlock,
    ItemFailure,
    Paragraph,
    PipelineReport,
    SectionChunk,
    Unit,
)
from chunkstream.core.ingestion.reader import (
    DocumentReader,
    UnitKind,
    create_local_reader,
    create_s3_reader,
)
from chunkstream.core.ingestion.worker_pool import RunStats, Worker, WorkerPool

__all__ = [
    # Readers
    "DocumentReader",
    "UnitKind",
    "create_local_reader",
    "create_s3_reader",
    # Orchestration
    "IngestionPipeline",
    "PipelineRun",
    # Coordination
    "Backlog",
    "FanInBuffer",
    "RunStats",
    "Worker",
    "WorkerPool",
    # Models
    "CodeBlock",
    "Paragraph",
    "SectionChunk",
    "Unit",
    "ItemFailure",
    "PipelineReport",
]
