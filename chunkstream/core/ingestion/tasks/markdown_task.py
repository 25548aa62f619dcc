"""
Markdown section extraction.

Parses an item with markdown-it (CommonMark) and walks the top-level block
nodes in document order. Every heading starts a new section; paragraphs and
list items become body lines; fenced and indented code is kept apart as code
blocks so the body stays plain text for embedding.

Dependencies: markdown_it
System role: Structured-document unit extractor
"""

from collections.abc import Iterable, Iterator

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from chunkstream.core.exceptions import ExtractionError
from chunkstream.core.ingestion.models import CodeBlock, SectionChunk

_LIST_TYPES = ("bullet_list", "ordered_list")
_CODE_TYPES = ("fence", "code_block")
_VERBATIM_TYPES = ("text", "code_inline")
_BREAK_TYPES = ("softbreak", "hardbreak")


def flatten_text(node: SyntaxTreeNode) -> str:
    """
    Flatten a node to plain text.

    Text and inline code are kept verbatim, emphasis/strong/link markup is
    reduced to its text, line breaks become newlines. Nodes without text
    children (images, raw HTML, code blocks) contribute nothing.

    Args:
        node: Any markdown-it syntax tree node

    Returns:
        str: Concatenated text of the node
    """
    if node.type in _VERBATIM_TYPES:
        return node.content
    if node.type in _BREAK_TYPES:
        return "\n"
    if node.type == "image":
        return ""
    return "".join(flatten_text(child) for child in node.children)


def _code_block(node: SyntaxTreeNode) -> CodeBlock:
    info = node.info.strip() if node.type == "fence" else ""
    language = info.split()[0] if info else ""
    return CodeBlock(language=language, value=node.content.removesuffix("\n"))


class _SectionBuilder:
    """Accumulates one section at a time while walking the tree."""

    def __init__(self, item_id: str) -> None:
        self._item_id = item_id
        self._sections: list[SectionChunk] = []
        self._open("", 0)

    def _open(self, heading: str, level: int) -> None:
        self._heading = heading
        self._level = level
        self._body: list[str] = []
        self._code_blocks: list[CodeBlock] = []

    def close(self) -> None:
        section = SectionChunk(
            item_id=self._item_id,
            heading=self._heading,
            level=self._level,
            body="".join(self._body),
            code_blocks=tuple(self._code_blocks),
        )
        if not section.is_empty():
            self._sections.append(section)

    def heading(self, node: SyntaxTreeNode) -> None:
        self.close()
        self._open(flatten_text(node), int(node.tag[1:]))

    def paragraph(self, node: SyntaxTreeNode) -> None:
        self._body.append(flatten_text(node) + "\n")

    def code(self, node: SyntaxTreeNode) -> None:
        self._code_blocks.append(_code_block(node))

    def list_items(self, node: SyntaxTreeNode) -> None:
        for item in node.children:
            text = " ".join(flatten_text(child) for child in item.children)
            self._body.append(f"- {text}\n")

    @property
    def sections(self) -> list[SectionChunk]:
        return self._sections


def build_sections(root: SyntaxTreeNode, item_id: str = "") -> list[SectionChunk]:
    """
    Group a parsed document's top-level nodes into sections.

    Args:
        root: Root node of a markdown-it syntax tree
        item_id: Identifier the sections are tagged with

    Returns:
        list[SectionChunk]: Non-empty sections in document order
    """
    builder = _SectionBuilder(item_id)
    for node in root.children:
        if node.type == "heading":
            builder.heading(node)
        elif node.type == "paragraph":
            builder.paragraph(node)
        elif node.type in _CODE_TYPES:
            builder.code(node)
        elif node.type in _LIST_TYPES:
            builder.list_items(node)
    builder.close()
    return builder.sections


class MarkdownSectionTask:
    """Extract heading-delimited sections from markdown content."""

    kind = "section"

    def __init__(self, parser: MarkdownIt | None = None) -> None:
        """
        Initialize markdown section task.

        Args:
            parser: Configured markdown-it parser (CommonMark preset if None)
        """
        self._parser = parser or MarkdownIt("commonmark")

    def parse(self, content: str, item_id: str | None = None) -> SyntaxTreeNode:
        """
        Parse markdown into a syntax tree.

        Raises:
            ExtractionError: When the parser fails
        """
        try:
            return SyntaxTreeNode(self._parser.parse(content))
        except Exception as e:
            raise ExtractionError(f"Failed to parse markdown: {e}", item_id=item_id) from e

    def extract(self, item_id: str, pieces: Iterable[str]) -> Iterator[SectionChunk]:
        """
        Read the whole item, parse it, and yield its sections.

        Args:
            item_id: Identifier the sections are tagged with
            pieces: Item content in read order

        Yields:
            SectionChunk: Sections in document order

        Raises:
            ExtractionError: When the content cannot be parsed
        """
        tree = self.parse("".join(pieces), item_id)
        yield from build_sections(tree, item_id)
