"""
Paragraph extraction for plain-text items.

Consumes content as arbitrarily sized text pieces, so large files and network
streams never have to be held in memory whole. A paragraph is a run of
non-blank lines; each line is right-trimmed and the lines are joined with a
single space. Any whitespace-only line ends the current paragraph.

Dependencies: re
System role: Plain-text unit extractor
"""

import re
from collections.abc import Iterable, Iterator

from chunkstream.core.ingestion.models import Paragraph

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class ParagraphSplitter:
    """Incremental blank-line paragraph splitter."""

    def __init__(self) -> None:
        self._carry = ""
        self._lines: list[str] = []

    def feed(self, piece: str) -> list[str]:
        """
        Consume one piece of content.

        Args:
            piece: Next slice of the item's text, of any length

        Returns:
            list[str]: Paragraphs completed by this piece
        """
        text = self._carry + piece
        hold = ""
        # "\r" may be the first half of a "\r\n" split across pieces
        if text.endswith("\r"):
            text, hold = text[:-1], "\r"

        lines = _LINE_BREAK.split(text)
        self._carry = lines.pop() + hold

        paragraphs = []
        for line in lines:
            paragraph = self._take_line(line)
            if paragraph is not None:
                paragraphs.append(paragraph)
        return paragraphs

    def finish(self) -> list[str]:
        """
        Flush the trailing line and paragraph at end-of-input.

        Returns:
            list[str]: Remaining paragraphs (at most two)
        """
        paragraphs = []
        if self._carry:
            paragraph = self._take_line(self._carry)
            if paragraph is not None:
                paragraphs.append(paragraph)
            self._carry = ""

        paragraph = self._flush()
        if paragraph is not None:
            paragraphs.append(paragraph)
        return paragraphs

    def _take_line(self, line: str) -> str | None:
        if line.strip():
            self._lines.append(line.rstrip())
            return None
        return self._flush()

    def _flush(self) -> str | None:
        if not self._lines:
            return None
        paragraph = " ".join(self._lines)
        self._lines = []
        return paragraph


class ParagraphTask:
    """Extract paragraphs from plain-text content."""

    kind = "paragraph"

    def extract(self, item_id: str, pieces: Iterable[str]) -> Iterator[Paragraph]:
        """
        Split an item's content into paragraphs.

        Args:
            item_id: Identifier the paragraphs are tagged with
            pieces: Item content in read order

        Yields:
            Paragraph: Paragraphs in document order
        """
        splitter = ParagraphSplitter()
        for piece in pieces:
            for text in splitter.feed(piece):
                yield Paragraph(item_id=item_id, text=text)
        for text in splitter.finish():
            yield Paragraph(item_id=item_id, text=text)


def split_paragraphs(text: str) -> list[str]:
    """Split a complete string into paragraphs."""
    splitter = ParagraphSplitter()
    return splitter.feed(text) + splitter.finish()
