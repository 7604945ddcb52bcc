"""Markdown parser adapter producing the positioned block model.

markdown-it-py supplies the syntax tree because its nodes carry source line
maps, which the sync needs to patch the document in place. Rendering to HTML
is handled separately by ``rendering.markdown_converter``.
"""

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from ..domain.entities.block import (
    Block,
    FencedCode,
    Heading,
    HtmlComment,
    Image,
    Inline,
    InlineCode,
    ListBlock,
    ListItem,
    OtherBlock,
    Paragraph,
    Position,
    Text,
)
from ..exceptions import ParserError
from ..utils.logging import get_logger

logger = get_logger(__name__)

_LINE_BREAKS = {"softbreak", "hardbreak"}


def _create_parser() -> MarkdownIt:
    # CommonMark preset keeps raw HTML blocks, which carry the card state comments
    return MarkdownIt("commonmark")


def _position(node: SyntaxTreeNode) -> Position | None:
    line_map = node.map
    if not line_map:
        return None
    start, end = line_map
    return Position(start_line=start + 1, end_line=max(end, start + 1))


def _flatten_inline(node: SyntaxTreeNode) -> list[Inline]:
    """Map an inline node to model nodes, flattening emphasis and links."""
    if node.type in ("text", "text_special", "html_inline"):
        return [Text(node.content)]
    if node.type in _LINE_BREAKS:
        return [Text("\n")]
    if node.type == "code_inline":
        return [InlineCode(node.content)]
    if node.type == "image":
        return [Image(alt=node.content, url=str(node.attrs.get("src", "")))]

    flattened: list[Inline] = []
    for child in node.children:
        flattened.extend(_flatten_inline(child))
    return flattened


def _inline_children(node: SyntaxTreeNode) -> tuple[Inline, ...]:
    """Collect inline content of a paragraph or heading, merging adjacent text."""
    merged: list[Inline] = []
    for inline in node.children:
        for child in inline.children:
            for item in _flatten_inline(child):
                if isinstance(item, Text) and merged and isinstance(merged[-1], Text):
                    merged[-1] = Text(merged[-1].value + item.value)
                else:
                    merged.append(item)
    return tuple(merged)


def _inline_source(node: SyntaxTreeNode) -> str:
    """Raw Markdown of a heading's inline content, as written in the file."""
    return "".join(child.content for child in node.children if child.type == "inline")


def _strip_trailing_newline(value: str) -> str:
    return value[:-1] if value.endswith("\n") else value


def _convert(node: SyntaxTreeNode) -> Block:
    position = _position(node)

    match node.type:
        case "heading":
            return Heading(
                depth=int(node.tag[1:]),
                children=_inline_children(node),
                position=position,
                source=_inline_source(node),
            )
        case "paragraph":
            return Paragraph(children=_inline_children(node), position=position)
        case "bullet_list" | "ordered_list":
            return ListBlock(
                items=tuple(_convert_item(child) for child in node.children),
                ordered=node.type == "ordered_list",
                position=position,
            )
        case "list_item":
            return _convert_item(node)
        case "fence" | "code_block":
            info = node.info.strip() if node.type == "fence" else ""
            return FencedCode(
                lang=info.split()[0] if info else "",
                value=_strip_trailing_newline(node.content),
                position=position,
            )
        case "html_block":
            return HtmlComment(value=node.content.rstrip("\n"), position=position)
        case _:
            return OtherBlock(
                kind=node.type,
                position=position,
                children=tuple(_convert(child) for child in node.children),
            )


def _convert_item(node: SyntaxTreeNode) -> ListItem:
    return ListItem(
        children=tuple(_convert(child) for child in node.children),
        position=_position(node),
    )


def parse_blocks(text: str) -> list[Block]:
    """Parse Markdown text into top-level blocks with 1-based line positions.

    Args:
        text: Full document text

    Returns:
        Ordered list of top-level blocks

    Raises:
        ParserError: If markdown-it fails on the input
    """
    try:
        tokens = _create_parser().parse(text)
    except Exception as e:
        msg = f"Failed to parse Markdown: {e}"
        raise ParserError(msg) from e

    root = SyntaxTreeNode(tokens)
    blocks = [_convert(child) for child in root.children]
    logger.debug("document_parsed", blocks=len(blocks))
    return blocks
