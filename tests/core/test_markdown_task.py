"""Tests for markdown section extraction."""

from unittest.mock import MagicMock

import pytest

from chunkstream.core.exceptions import ExtractionError
from chunkstream.core.ingestion.models import CodeBlock, SectionChunk
from chunkstream.core.ingestion.tasks.markdown_task import MarkdownSectionTask, flatten_text


@pytest.fixture
def task() -> MarkdownSectionTask:
    return MarkdownSectionTask()


def _sections(task: MarkdownSectionTask, content: str, item_id: str = "doc.md") -> list[SectionChunk]:
    return list(task.extract(item_id, [content]))


# ============================================================================
# Sectioning Rules
# ============================================================================


class TestSectioning:
    """Test how headings open and close sections."""

    def test_basic_example(self, task) -> None:
        """Should produce one section with heading, body and code block."""
        sections = _sections(task, "# H1\nbody text\n\n```js\ncode\n```\n")

        assert len(sections) == 1
        section = sections[0]
        assert section.heading == "H1"
        assert section.level == 1
        assert "body text" in section.body
        assert section.code_blocks == (CodeBlock(language="js", value="code"),)
        assert section.item_id == "doc.md"

    def test_preamble_before_first_heading(self, task) -> None:
        """Should keep text before any heading in a level-0 section."""
        sections = _sections(task, "intro\n\n## Next\nmore\n")

        assert [(s.heading, s.level, s.body) for s in sections] == [
            ("", 0, "intro\n"),
            ("Next", 2, "more\n"),
        ]

    def test_empty_sections_dropped(self, task) -> None:
        """Should skip headings with no body and no code."""
        sections = _sections(task, "# A\n# B\ntext\n")

        assert [s.heading for s in sections] == ["B"]

    def test_heading_with_only_code_kept(self, task) -> None:
        """Should keep a section whose only content is code."""
        sections = _sections(task, "# Snippet\n\n```\nls\n```\n")

        assert sections[0].body == ""
        assert sections[0].code_blocks == (CodeBlock(language="", value="ls"),)

    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_heading_levels(self, task, level: int) -> None:
        """Should read the level from the heading marker."""
        sections = _sections(task, f"{'#' * level} Title\ntext\n")

        assert sections[0].level == level

    def test_setext_heading(self, task) -> None:
        """Should treat underlined headings like ATX headings."""
        sections = _sections(task, "Title\n=====\n\ntext\n")

        assert (sections[0].heading, sections[0].level) == ("Title", 1)

    def test_empty_document(self, task) -> None:
        """Should yield no sections for empty content."""
        assert _sections(task, "") == []


# ============================================================================
# Block Content
# ============================================================================


class TestBlockContent:
    """Test paragraph, list and code handling."""

    def test_inline_markup_flattened(self, task) -> None:
        """Should strip emphasis and keep inline code verbatim."""
        sections = _sections(task, "# T\n\nsome **bold** and *em* with `x = 1` and [a link](http://e.com)\n")

        assert sections[0].body == "some bold and em with x = 1 and a link\n"

    def test_soft_break_becomes_newline(self, task) -> None:
        """Should keep line breaks inside a paragraph."""
        sections = _sections(task, "# T\n\nfirst\nsecond\n")

        assert sections[0].body == "first\nsecond\n"

    def test_bullet_list(self, task) -> None:
        """Should render list items as dash lines."""
        sections = _sections(task, "# L\n\n- one\n- two\n")

        assert sections[0].body == "- one\n- two\n"

    def test_ordered_list(self, task) -> None:
        """Should render ordered items as dash lines too."""
        sections = _sections(task, "# L\n\n1. first\n2. second\n")

        assert sections[0].body == "- first\n- second\n"

    def test_code_blocks_in_order(self, task) -> None:
        """Should keep fenced and indented code in document order."""
        content = "# C\n\n```python extra\nprint(1)\n```\n\n    indented\n\n```sh\nls\n```\n"
        sections = _sections(task, content)

        assert sections[0].code_blocks == (
            CodeBlock(language="python", value="print(1)"),
            CodeBlock(language="", value="indented"),
            CodeBlock(language="sh", value="ls"),
        )

    def test_image_text_dropped(self, task) -> None:
        """Should drop image alt text from the body."""
        sections = _sections(task, "# I\n\n![diagram](d.png) caption\n")

        assert "diagram" not in sections[0].body
        assert "caption" in sections[0].body

    def test_blockquote_skipped(self, task) -> None:
        """Should ignore block quotes."""
        sections = _sections(task, "# Q\n\n> quoted\n\nplain\n")

        assert sections[0].body == "plain\n"

    def test_flatten_heading_node(self, task) -> None:
        """Should flatten a heading node to its text."""
        tree = task.parse("# Hello *world*\n")

        assert flatten_text(tree.children[0]) == "Hello world"


# ============================================================================
# Streaming and Errors
# ============================================================================


class TestMarkdownTask:
    """Test MarkdownSectionTask as an extractor."""

    def test_pieces_joined_before_parsing(self, task) -> None:
        """Should produce the same sections however content is split."""
        content = "# H1\nbody text\n\n```js\ncode\n```\n## Two\n- a\n"
        whole = _sections(task, content)
        pieces = [content[i : i + 3] for i in range(0, len(content), 3)]

        assert list(task.extract("doc.md", pieces)) == whole

    def test_parser_failure_wrapped(self) -> None:
        """Should raise ExtractionError naming the item."""
        parser = MagicMock()
        parser.parse.side_effect = RuntimeError("parser exploded")
        task = MarkdownSectionTask(parser=parser)

        with pytest.raises(ExtractionError) as exc_info:
            list(task.extract("broken.md", ["# x"]))

        assert exc_info.value.item_id == "broken.md"
        assert "parser exploded" in str(exc_info.value)

    def test_kind(self) -> None:
        """Should declare the section kind."""
        assert MarkdownSectionTask.kind == "section"
