"""
Logger configuration.

One stream handler on the root logger. Records carry the thread name because
a single pipeline run logs from many worker threads at once.

Dependencies: logging (stdlib)
System role: Centralized logging configuration
"""

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty at INFO/DEBUG: every S3 request and every markdown rule
QUIET_LOGGERS = ("urllib3", "botocore", "boto3", "s3transfer", "markdown_it")


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    level: str | int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """
    Route all records to one stream, replacing earlier handlers.

    Args:
        level: Root level as a name ("debug", "INFO") or number; unknown names mean INFO
        stream: Destination, stdout when None (the CLI passes stderr)
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(handler)
    root_logger.setLevel(_resolve_level(level))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get configured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        logging.Logger: Configured logger instance
    """
    return logging.getLogger(name)
