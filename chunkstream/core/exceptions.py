"""
Exception hierarchy for the chunkstream ingestion pipeline.

Provides layered exception structure for source, extraction and coordination
errors. All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class ChunkstreamException(Exception):
    """Base exception for all chunkstream errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class SourceListingError(ChunkstreamException):
    """Raised when a source cannot enumerate its items. Fatal to a pipeline run."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize source listing error.

        Args:
            message: Error message
            source: Description of the source (directory path, s3://bucket/prefix)
            details: Additional context
        """
        details = details or {}
        if source:
            details["source"] = source
        super().__init__(message, details)


class ItemProcessingError(ChunkstreamException):
    """Base exception for per-item failures. Recoverable: the item is skipped."""

    def __init__(
        self,
        message: str,
        item_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize item processing error.

        Args:
            message: Error message
            item_id: Identifier of the item that failed
            details: Additional context
        """
        self.item_id = item_id
        details = details or {}
        if item_id:
            details["item_id"] = item_id
        super().__init__(message, details)


class ItemFetchError(ItemProcessingError):
    """Raised when an item's content cannot be fetched."""

    pass


class ExtractionError(ItemProcessingError):
    """Raised when units cannot be extracted from fetched content."""

    pass


class BacklogClosedError(ChunkstreamException):
    """Raised when a worker tries to claim from a closed backlog."""

    pass


class PipelineStateError(ChunkstreamException):
    """Raised when a pipeline run is used in a way it does not support."""

    pass


class PipelineCancelledError(ChunkstreamException):
    """Raised inside a worker when the consumer has abandoned the run."""

    pass
