"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from chunkstream.configs.pipeline import PipelineSettings
from chunkstream.configs.settings import Settings, get_settings
from chunkstream.configs.sources import LocalSourceSettings, S3SourceSettings

__all__ = [
    "LocalSourceSettings",
    "PipelineSettings",
    "S3SourceSettings",
    "Settings",
    "get_settings",
]
