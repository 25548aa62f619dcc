"""
Source configuration.

Settings for the local directory source and the S3 bucket source.

Dependencies: pydantic_settings
System role: Source location configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LocalSourceSettings(BaseSettings):
    """Settings for reading items from a local directory."""

    model_config = SettingsConfigDict(
        env_prefix="LOCAL_SOURCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    directory: str = Field(
        default="./data",
        description="Directory whose files are ingested",
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of local files",
    )
    txt_suffix: str = Field(
        default=".txt",
        description="Suffix selecting plain-text items",
    )
    md_suffix: str = Field(
        default=".md",
        description="Suffix selecting markdown items",
    )


class S3SourceSettings(BaseSettings):
    """Settings for reading items from an S3 bucket."""

    model_config = SettingsConfigDict(
        env_prefix="S3_SOURCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(
        default="chunkstream-dev-documents",
        description="S3 bucket holding source documents",
    )
    prefix: str = Field(
        default="",
        description="Key prefix to list under",
    )
    region: str = Field(
        default="ap-southeast-2",
        description="AWS region for S3 bucket",
    )
    page_size: int = Field(
        default=50,
        gt=0,
        le=1000,
        description="MaxKeys per list_objects_v2 page",
    )
    start_token: str | None = Field(
        default=None,
        description="Continuation token to resume listing from",
    )
    txt_suffix: str = Field(
        default=".txt",
        description="Key suffix selecting plain-text objects",
    )
    md_suffix: str = Field(
        default=".md",
        description="Key suffix selecting markdown objects",
    )
