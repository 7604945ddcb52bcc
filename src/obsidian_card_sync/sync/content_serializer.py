"""Serialize card blocks into canonical Markdown text.

The output is both the input of the fingerprint and the Markdown handed to
the HTML renderer, so it must be fully deterministic.
"""

import re
from dataclasses import dataclass, field

from ..domain.entities.block import (
    Block,
    FencedCode,
    Heading,
    Image,
    Inline,
    InlineCode,
    ListBlock,
    ListItem,
    Paragraph,
    Text,
)
from ..domain.entities.card import Card

ELEMENT_SEPARATOR = "\n"


@dataclass(frozen=True)
class SerializedCard:
    front: str
    back: str
    media: tuple[str, ...] = field(default=())

    @property
    def canonical(self) -> str:
        """Text the fingerprint is computed over."""
        return self.front + self.back


def _inline_text(inline: Inline, media: list[str]) -> str:
    match inline:
        case Text(value=value):
            return value
        case InlineCode(value=value):
            return f"`{value}`"
        case Image(alt=alt, url=url):
            media.append(url)
            return f"![{alt}]({url})"


def _paragraph_text(paragraph: Paragraph, media: list[str]) -> str:
    return "".join(_inline_text(child, media) for child in paragraph.children)


def _fenced_text(code: FencedCode) -> str:
    return f"```{code.lang}\n{code.value}\n```"


def _flatten(block: Block, media: list[str]) -> list[str]:
    """Flatten nested list structure into bare text lines."""
    match block:
        case Paragraph():
            return [_paragraph_text(block, media)]
        case FencedCode():
            return [_fenced_text(block)]
        case ListBlock(items=items):
            return [line for item in items for line in _flatten(item, media)]
        case ListItem(children=children):
            return [line for child in children for line in _flatten(child, media)]
        case _:
            return []


def _front_parts(block: Block, media: list[str]) -> list[str]:
    match block:
        case Paragraph():
            return [_paragraph_text(block, media)]
        case FencedCode():
            return [_fenced_text(block)]
        case ListBlock(items=items):
            return ["- " + " ".join(_flatten(item, media)) for item in items]
        case _:
            return []


def _back_parts(block: Block, media: list[str]) -> list[str]:
    match block:
        case Paragraph():
            return [_paragraph_text(block, media)]
        case FencedCode():
            return [_fenced_text(block)]
        case ListBlock():
            return _flatten(block, media)
        case _:
            return []


def heading_question(heading: Heading, card_tag: str = "#card") -> str:
    """Heading text with the card tag and anything after it removed."""
    pattern = re.escape(card_tag) + r"\s*(.*)"
    return re.sub(pattern, "", heading.text).strip()


def serialize_front(
    blocks: list[Block], card_tag: str = "#card", media: list[str] | None = None
) -> str:
    """Serialize the front: heading question first, then extra front blocks.

    ``blocks[0]`` must be the card heading.
    """
    media = media if media is not None else []
    heading = blocks[0]
    if not isinstance(heading, Heading):
        raise ValueError("Front blocks must start with the card heading")

    parts = [heading_question(heading, card_tag), ELEMENT_SEPARATOR]
    for block in blocks[1:]:
        parts.extend(_front_parts(block, media))
        parts.append(ELEMENT_SEPARATOR)
    return "\n".join(parts)


def serialize_back(blocks: list[Block], media: list[str] | None = None) -> str:
    """Serialize the back; every block is followed by a blank separator."""
    media = media if media is not None else []
    parts: list[str] = []
    for block in blocks:
        parts.extend(_back_parts(block, media))
        parts.append(ELEMENT_SEPARATOR)
    return "\n".join(parts)


def serialize_card(card: Card, card_tag: str = "#card") -> SerializedCard:
    media: list[str] = []
    front = serialize_front(card.front, card_tag, media)
    back = serialize_back(card.back, media)
    return SerializedCard(front=front, back=back, media=tuple(media))
