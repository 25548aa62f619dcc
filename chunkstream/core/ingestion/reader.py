"""
Document readers for local directories and S3 buckets.

A reader pairs one source with the two extraction strategies: paragraphs for
plain-text files and sections for markdown files. Both sources share the same
pipeline; only the fetcher differs.

Dependencies: chunkstream.core.ingestion, chunkstream.configs
System role: Entry points for reading a source as a unit stream
"""

from typing import Literal

from chunkstream.configs import get_settings
from chunkstream.core.ingestion.entrypoint import IngestionPipeline, PipelineRun
from chunkstream.core.ingestion.tasks import (
    LocalDirectorySource,
    MarkdownSectionTask,
    ParagraphTask,
    S3Source,
)
from chunkstream.core.ingestion.tasks.base import ItemSource, UnitExtractor

UnitKind = Literal["paragraph", "section"]


class DocumentReader:
    """Read a source's text files as paragraphs and markdown files as sections."""

    def __init__(
        self,
        source: ItemSource,
        pipeline: IngestionPipeline | None = None,
        txt_suffix: str = ".txt",
        md_suffix: str = ".md",
    ) -> None:
        """
        Initialize document reader.

        Args:
            source: Lists and fetches items
            pipeline: Pipeline used to start runs (configured defaults if None)
            txt_suffix: Suffix selecting plain-text items
            md_suffix: Suffix selecting markdown items
        """
        self._source = source
        self._pipeline = pipeline or IngestionPipeline()
        self._suffixes: dict[str, str] = {"paragraph": txt_suffix, "section": md_suffix}
        self._extractors: dict[str, UnitExtractor] = {
            "paragraph": ParagraphTask(),
            "section": MarkdownSectionTask(),
        }

    @property
    def source(self) -> ItemSource:
        return self._source

    def list_files(self) -> list[str]:
        """List every item identifier in the source, unfiltered."""
        return self._source.list_items()

    def read(
        self,
        kind: UnitKind,
        worker_count: int | None = None,
        suffix: str | None = None,
    ) -> PipelineRun:
        """
        Start a run extracting one kind of unit.

        Args:
            kind: "paragraph" for plain text, "section" for markdown
            worker_count: Pool size (settings default if None)
            suffix: Override the identifier suffix filter

        Returns:
            PipelineRun: Lazy unit sequence

        Raises:
            ValueError: When kind is unknown
            SourceListingError: When the source cannot be listed
        """
        if kind not in self._extractors:
            raise ValueError(f"Unknown unit kind: {kind}. Must be 'paragraph' or 'section'.")
        return self._pipeline.ingest(
            self._source,
            self._extractors[kind],
            suffix=suffix or self._suffixes[kind],
            worker_count=worker_count,
        )

    def read_txt_files(self, worker_count: int | None = None) -> PipelineRun:
        """Stream paragraphs from every plain-text item."""
        return self.read("paragraph", worker_count)

    def read_md_files(self, worker_count: int | None = None) -> PipelineRun:
        """Stream sections from every markdown item."""
        return self.read("section", worker_count)


def create_local_reader(
    directory: str | None = None,
    pipeline: IngestionPipeline | None = None,
) -> DocumentReader:
    """
    Build a reader over a local directory.

    Args:
        directory: Directory to read (LOCAL_SOURCE_DIRECTORY if None)
        pipeline: Pipeline used to start runs

    Returns:
        DocumentReader: Reader backed by LocalDirectorySource
    """
    settings = get_settings()
    local = settings.local_source
    source = LocalDirectorySource(
        directory or local.directory,
        encoding=local.encoding,
        read_chunk_size=settings.pipeline.read_chunk_size,
    )
    return DocumentReader(
        source, pipeline=pipeline, txt_suffix=local.txt_suffix, md_suffix=local.md_suffix
    )


def create_s3_reader(
    bucket: str | None = None,
    prefix: str | None = None,
    start_token: str | None = None,
    pipeline: IngestionPipeline | None = None,
    client=None,
) -> DocumentReader:
    """
    Build a reader over an S3 bucket prefix.

    Args:
        bucket: Bucket to read (S3_SOURCE_BUCKET if None)
        prefix: Key prefix (S3_SOURCE_PREFIX if None)
        start_token: Continuation token to resume listing from
        pipeline: Pipeline used to start runs
        client: Preconfigured boto3 S3 client

    Returns:
        DocumentReader: Reader backed by S3Source
    """
    settings = get_settings()
    s3 = settings.s3_source
    source = S3Source(
        bucket=bucket or s3.bucket,
        prefix=s3.prefix if prefix is None else prefix,
        region=s3.region,
        page_size=s3.page_size,
        start_token=start_token or s3.start_token,
        read_chunk_size=settings.pipeline.read_chunk_size,
        client=client,
    )
    return DocumentReader(
        source, pipeline=pipeline, txt_suffix=s3.txt_suffix, md_suffix=s3.md_suffix
    )
