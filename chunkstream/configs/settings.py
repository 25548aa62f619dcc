"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from chunkstream.configs.base import BaseSettings
from chunkstream.configs.pipeline import PipelineSettings
from chunkstream.configs.sources import LocalSourceSettings, S3SourceSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    local_source: LocalSourceSettings = Field(default_factory=LocalSourceSettings)
    s3_source: S3SourceSettings = Field(default_factory=S3SourceSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables loaded once at first call.

    Returns:
        Settings: Application settings instance

    Usage:
        from chunkstream.configs import get_settings
        settings = get_settings()
    """
    return Settings()
