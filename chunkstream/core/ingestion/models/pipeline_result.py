"""
Pipeline report models.

Summarises one pipeline run: how many items were claimed, processed and
failed, how many units reached the consumer, and why failed items failed.

Dependencies: pydantic
System role: Return type for PipelineRun.report()
"""

from pydantic import BaseModel, Field


class ItemFailure(BaseModel):
    """One item whose fetch or extraction raised before it finished."""

    item_id: str = Field(description="Identifier of the failed item")
    error_type: str = Field(description="Exception class name")
    message: str = Field(description="Exception message")
    units_pushed: int = Field(
        default=0, ge=0, description="Units delivered before the error, 0 when the fetch failed"
    )


class PipelineReport(BaseModel):
    """Result of a pipeline run."""

    items_total: int = Field(description="Items placed in the backlog")
    items_claimed: int = Field(description="Items claimed by a worker")
    items_processed: int = Field(description="Items extracted to the end without error")
    items_failed: int = Field(description="Items whose fetch or extraction raised")
    units_emitted: int = Field(description="Units handed to the consumer")
    worker_count: int = Field(description="Size of the worker pool")
    cancelled: bool = Field(default=False, description="Run was closed before it was exhausted")
    failures: list[ItemFailure] = Field(default_factory=list, description="Per-item failure details")
    processing_time_ms: float = Field(description="Wall time from start until workers finished")
