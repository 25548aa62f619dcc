"""
Models for the ingestion pipeline.

Exports: CodeBlock, Paragraph, SectionChunk, Unit, ItemFailure, PipelineReport
"""

from .pipeline_result import ItemFailure, PipelineReport
from .unit import CodeBlock, Paragraph, SectionChunk, Unit

__all__ = [
    "CodeBlock",
    "Paragraph",
    "SectionChunk",
    "Unit",
    "ItemFailure",
    "PipelineReport",
]
