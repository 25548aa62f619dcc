"""
Pipeline coordination settings.

Worker pool size, fan-in buffer bound and streaming read sizes.

Dependencies: pydantic_settings
System role: Concurrency configuration for the ingestion pipeline
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """Settings for the worker pool and fan-in buffer."""

    model_config = SettingsConfigDict(
        env_prefix="CHUNKSTREAM_PIPELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    worker_count: int = Field(
        default=4,
        gt=0,
        description="Number of concurrent workers pulling from the backlog",
    )
    buffer_size: int = Field(
        default=0,
        ge=0,
        description="Maximum buffered units before producers wait (0 = unbounded)",
    )
    read_chunk_size: int = Field(
        default=64 * 1024,
        gt=0,
        description="Bytes/characters requested per read when streaming item content",
    )
    put_poll_interval: float = Field(
        default=0.5,
        gt=0,
        description="Seconds a blocked producer waits before re-checking cancellation",
    )
    join_timeout: float | None = Field(
        default=None,
        description="Seconds to wait for workers when a run is closed (None = wait forever)",
    )
