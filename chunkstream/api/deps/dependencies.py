"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: chunkstream.configs, chunkstream.core.ingestion
System role: DI container for pipeline and reader injection
"""

from collections.abc import Callable

from fastapi import Depends

from chunkstream.configs import Settings, get_settings
from chunkstream.core.ingestion import (
    DocumentReader,
    IngestionPipeline,
    create_local_reader,
    create_s3_reader,
)


def get_settings_dependency() -> Settings:
    """Get application settings."""
    return get_settings()


def get_ingestion_pipeline(
    settings: Settings = Depends(get_settings_dependency),
) -> IngestionPipeline:
    """Get a pipeline configured from settings."""
    return IngestionPipeline(settings.pipeline)


def get_local_reader_factory() -> Callable[..., DocumentReader]:
    """Get the factory building readers over local directories."""
    return create_local_reader


def get_s3_reader_factory() -> Callable[..., DocumentReader]:
    """Get the factory building readers over S3 prefixes."""
    return create_s3_reader
