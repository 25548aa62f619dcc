"""
Unit domain models for the ingestion pipeline.

A unit is the smallest value the pipeline emits: a paragraph of plain text or
a heading-delimited markdown section with its code blocks. Units are frozen
once constructed and carry their originating item identifier, so each can be
embedded or stored without reference to its siblings.

Dependencies: pydantic
System role: Output data structures of the ingestion pipeline
"""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class CodeBlock(BaseModel):
    """Fenced or indented code block found inside a markdown section."""

    model_config = ConfigDict(frozen=True)

    language: str = Field(default="", description="Info-string language, empty when absent")
    value: str = Field(description="Code text without the closing newline")


class Paragraph(BaseModel):
    """Paragraph of plain text tagged with the item it came from."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["paragraph"] = "paragraph"
    item_id: str = Field(description="Identifier of the originating item")
    text: str = Field(description="Paragraph lines joined by single spaces")

    @property
    def embedding_text(self) -> str:
        """Text handed to an embedding model."""
        return self.text


class SectionChunk(BaseModel):
    """Markdown section opened by a heading (or the document start)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["section"] = "section"
    item_id: str = Field(default="", description="Identifier of the originating item")
    heading: str = Field(default="", description="Flattened heading text")
    level: int = Field(default=0, ge=0, le=6, description="Heading depth, 0 before the first heading")
    body: str = Field(default="", description="Paragraph and list text, one line per block")
    code_blocks: tuple[CodeBlock, ...] = Field(default=(), description="Code blocks in document order")

    @property
    def embedding_text(self) -> str:
        """Plain body text; code blocks travel as metadata."""
        return self.body

    def is_empty(self) -> bool:
        """Return True when the section has no body text and no code."""
        return not self.body.strip() and not self.code_blocks

    def to_markdown(self) -> str:
        """
        Rebuild a markdown rendering of the section for an LLM prompt.

        Returns:
            str: Heading line, body, then each code block fenced
        """
        result = f"## {self.heading}\n" if self.heading else ""
        result += self.body
        for block in self.code_blocks:
            result += f"```{block.language}\n{block.value}\n```\n"
        return result


Unit = Union[Paragraph, SectionChunk]
