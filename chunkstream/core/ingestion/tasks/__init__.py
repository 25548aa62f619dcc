"""
Task modules for the ingestion pipeline.

Exports: LocalDirectorySource, S3Source, ParagraphTask, MarkdownSectionTask
"""

from .base import ContentFetcher, ItemSource, SourceEnumerator, UnitExtractor
from .local_source_task import LocalDirectorySource
from .markdown_task import MarkdownSectionTask, build_sections, flatten_text
from .paragraph_task import ParagraphSplitter, ParagraphTask, split_paragraphs
from .s3_source_task import S3Object, S3Source

__all__ = [
    "ContentFetcher",
    "ItemSource",
    "SourceEnumerator",
    "UnitExtractor",
    "LocalDirectorySource",
    "S3Object",
    "S3Source",
    "ParagraphSplitter",
    "ParagraphTask",
    "split_paragraphs",
    "MarkdownSectionTask",
    "build_sections",
    "flatten_text",
]
