"""
Interfaces the pipeline coordinates over.

The worker pool only needs something that lists identifiers, something that
opens an identifier's content as a stream of text pieces, and something that
turns those pieces into units. Local directories and S3 buckets differ only in
the first two.

Dependencies: typing
System role: Seams between coordination code and sources/extractors
"""

from collections.abc import Iterable, Iterator
from contextlib import AbstractContextManager
from typing import Protocol

from chunkstream.core.ingestion.models import Unit


class SourceEnumerator(Protocol):
    """Lists item identifiers. Called once, before any worker starts."""

    def list_items(self) -> list[str]: ...


class ContentFetcher(Protocol):
    """Opens one item's content as incrementally readable text pieces."""

    def fetch(self, item_id: str) -> AbstractContextManager[Iterator[str]]: ...


class UnitExtractor(Protocol):
    """Turns one item's content into zero or more units, in document order."""

    def extract(self, item_id: str, pieces: Iterable[str]) -> Iterator[Unit]: ...


class ItemSource(SourceEnumerator, ContentFetcher, Protocol):
    """A source that both lists and fetches its items."""

    def describe(self) -> str: ...
