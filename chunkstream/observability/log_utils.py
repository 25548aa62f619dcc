"""
Structured logging helpers.

Worker threads attach per-item context (item id, worker id, unit counts) to
log records as ``extra`` fields. Values are reduced to short strings first:
item content can be megabytes long and a failing ``__str__`` must never turn
a log call into a second failure.

Dependencies: logging (stdlib)
System role: Context-carrying log calls for workers and middleware
"""

import logging
from collections.abc import Mapping
from typing import Any

DEFAULT_MAX_LENGTH = 500


def safe_log_value(value: Any, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """
    Render a value as a short, log-safe string.

    Strings and scalars are kept (truncated past max_length). Containers and
    byte strings are summarised by size instead of dumped.

    Args:
        value: Anything a caller wants to attach to a record
        max_length: Longest string kept before truncation

    Returns:
        str: Printable summary of the value
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, (bytes, bytearray)):
            return f"{type(value).__name__}({len(value)} bytes)"
        if isinstance(value, Mapping):
            rendered = f"dict({len(value)} keys)"
        elif isinstance(value, (list, tuple, set, frozenset)):
            rendered = f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, str):
            rendered = value
        else:
            rendered = str(value)
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"

    if len(rendered) > max_length:
        return f"{rendered[:max_length]}... (truncated, {len(rendered)} total)"
    return rendered


def _extra(context: Mapping[str, Any]) -> dict[str, str]:
    return {key: safe_log_value(value) for key, value in context.items()}


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any,
) -> None:
    """
    Emit one record with context fields attached as ``extra``.

    Args:
        logger: Target logger
        level: Numeric log level
        message: Record message
        **context: Fields such as item_id, worker_id, unit_count
    """
    if logger.isEnabledFor(level):
        logger.log(level, message, extra=_extra(context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Emit an ERROR record carrying the exception, its type and message.

    Args:
        logger: Target logger
        message: Record message
        exc: Exception to attach as exc_info
        **context: Fields such as item_id, worker_id
    """
    fields = _extra(context)
    fields["error_type"] = type(exc).__name__
    fields["error_msg"] = safe_log_value(exc)
    logger.error(message, exc_info=exc, extra=fields)
