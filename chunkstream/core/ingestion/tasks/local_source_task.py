"""
Local directory source.

Lists the files of one directory and opens them as streams of text pieces.
Identifiers are file names relative to the directory.

Dependencies: pathlib
System role: Item listing and content fetching for local files
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

from chunkstream.core.exceptions import ItemFetchError, SourceListingError

logger = logging.getLogger(__name__)


class LocalDirectorySource:
    """List and read files in a local directory."""

    def __init__(
        self,
        directory: str | Path,
        encoding: str = "utf-8",
        read_chunk_size: int = 64 * 1024,
    ) -> None:
        """
        Initialize local directory source.

        Args:
            directory: Directory holding the items
            encoding: Text encoding of the files
            read_chunk_size: Characters per read when streaming a file
        """
        self._directory = Path(directory)
        self._encoding = encoding
        self._read_chunk_size = read_chunk_size

    def describe(self) -> str:
        return str(self._directory)

    def list_items(self) -> list[str]:
        """
        List file names in the directory, sorted.

        Subdirectories are skipped.

        Returns:
            list[str]: File names

        Raises:
            SourceListingError: When the path is missing, not a directory, or unreadable
        """
        try:
            if not self._directory.is_dir():
                raise SourceListingError(
                    "Provided path is not a directory", source=self.describe()
                )
            names = sorted(entry.name for entry in self._directory.iterdir() if entry.is_file())
        except OSError as e:
            raise SourceListingError(
                f"Failed to list directory: {e}", source=self.describe()
            ) from e

        logger.info(f"{__name__}:list_items - Found {len(names)} files in {self._directory}")
        return names

    def _resolve(self, item_id: str) -> Path:
        path = (self._directory / item_id).resolve()
        if not path.is_relative_to(self._directory.resolve()):
            raise ItemFetchError("Item is outside the source directory", item_id=item_id)
        return path

    @contextmanager
    def fetch(self, item_id: str) -> Iterator[Iterator[str]]:
        """
        Open a file for streaming.

        Args:
            item_id: File name relative to the directory

        Yields:
            Iterator[str]: Text pieces of at most read_chunk_size characters

        Raises:
            ItemFetchError: When the file cannot be opened, read or decoded
        """
        path = self._resolve(item_id)
        try:
            # newline="" keeps "\r\n" intact for the extractor's own line handling
            handle = open(path, encoding=self._encoding, newline="")
        except OSError as e:
            raise ItemFetchError(f"Failed to open file: {e}", item_id=item_id) from e

        try:
            yield self._read_pieces(handle, item_id)
        finally:
            handle.close()

    def _read_pieces(self, handle: TextIO, item_id: str) -> Iterator[str]:
        try:
            while True:
                piece = handle.read(self._read_chunk_size)
                if not piece:
                    return
                yield piece
        except (OSError, UnicodeDecodeError) as e:
            raise ItemFetchError(f"Failed to read file: {e}", item_id=item_id) from e
