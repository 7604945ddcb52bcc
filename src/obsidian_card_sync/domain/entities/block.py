"""Block model for parsed Markdown documents.

A closed set of immutable node types. The parser adapter builds them, the
walker and serializers only read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Position:
    """Line span of a block in the source document (1-based, inclusive)."""

    start_line: int
    end_line: int

    def __post_init__(self) -> None:
        if self.start_line < 1:
            raise ValueError("Line numbers are 1-based")
        if self.end_line < self.start_line:
            raise ValueError("Block cannot end before it starts")


# Inline nodes


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class InlineCode:
    value: str


@dataclass(frozen=True)
class Image:
    alt: str
    url: str


Inline = Text | InlineCode | Image


# Block nodes


@dataclass(frozen=True)
class Paragraph:
    children: tuple[Inline, ...]
    position: Position | None = None


@dataclass(frozen=True)
class ListItem:
    children: tuple[Block, ...]
    position: Position | None = None


@dataclass(frozen=True)
class ListBlock:
    items: tuple[ListItem, ...]
    ordered: bool = False
    position: Position | None = None


@dataclass(frozen=True)
class FencedCode:
    lang: str
    value: str
    position: Position | None = None


@dataclass(frozen=True)
class Heading:
    depth: int
    children: tuple[Inline, ...]
    position: Position | None = None
    # Inline Markdown as written, escapes and link targets included
    source: str | None = None

    def __post_init__(self) -> None:
        if not 1 <= self.depth <= 6:
            raise ValueError("Heading depth must be between 1 and 6")

    @property
    def text(self) -> str:
        """Heading text used as the card key, for the tag check and metadata.

        The raw source when the parser supplied it, so create patches write
        the heading back unchanged. Otherwise the leading run of plain text,
        soft breaks included.
        """
        if self.source is not None:
            return self.source
        parts: list[str] = []
        for child in self.children:
            if not isinstance(child, Text):
                break
            parts.append(child.value)
        return "".join(parts)


@dataclass(frozen=True)
class HtmlComment:
    """Raw HTML block. Only comment-wrapped values carry meaning."""

    value: str
    position: Position | None = None

    @property
    def is_comment(self) -> bool:
        return self.value.startswith("<!--") and self.value.endswith("-->")


@dataclass(frozen=True)
class OtherBlock:
    """Block kind the serializers do not render (blockquote, table, rule)."""

    kind: str
    position: Position | None = None
    children: tuple[Block, ...] = field(default=())


Block = Paragraph | ListItem | ListBlock | FencedCode | Heading | HtmlComment | OtherBlock
