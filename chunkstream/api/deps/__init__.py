"""API-specific dependencies."""

from .dependencies import (
    get_ingestion_pipeline,
    get_local_reader_factory,
    get_s3_reader_factory,
    get_settings_dependency,
)

__all__ = [
    "get_ingestion_pipeline",
    "get_local_reader_factory",
    "get_s3_reader_factory",
    "get_settings_dependency",
]
