"""
Observability module.

Logging configuration, safe structured logging helpers and HTTP request logging.
"""

from chunkstream.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)
from chunkstream.observability.logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "log_exception_with_context",
    "log_with_context",
    "safe_log_value",
]
