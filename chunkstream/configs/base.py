"""
Base configuration settings.

Process-wide options shared by the API and the CLI. Values come from the
environment or a ``.env`` file in the working directory.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class BaseSettings(PydanticBaseSettings):
    """Settings shared by every chunkstream process."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment, reported at API startup",
    )
    debug: bool = Field(
        default=False,
        description="Log at DEBUG whatever log_level says",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level name",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level
