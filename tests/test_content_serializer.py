"""Tests for canonical card serialization."""

import pytest

from obsidian_card_sync.domain.entities.block import (
    FencedCode,
    Heading,
    Image,
    InlineCode,
    ListBlock,
    ListItem,
    OtherBlock,
    Paragraph,
    Text,
)
from obsidian_card_sync.obsidian.parser import parse_blocks
from obsidian_card_sync.obsidian.walker import walk_document
from obsidian_card_sync.sync.content_serializer import (
    heading_question,
    serialize_back,
    serialize_card,
    serialize_front,
)


def _heading(text: str, depth: int = 4) -> Heading:
    return Heading(depth=depth, children=(Text(text),))


def _paragraph(*children) -> Paragraph:
    return Paragraph(children=tuple(children))


def _bullets(*items: str) -> ListBlock:
    return ListBlock(
        items=tuple(ListItem(children=(_paragraph(Text(item)),)) for item in items)
    )


class TestHeadingQuestion:
    def test_strips_tag_and_trailing_text(self) -> None:
        assert heading_question(_heading("What is 2+2? #card extra")) == "What is 2+2?"

    def test_custom_tag(self) -> None:
        assert heading_question(_heading("Define entropy #flash"), "#flash") == "Define entropy"


class TestSerializeFront:
    def test_heading_only(self) -> None:
        assert serialize_front([_heading("Q1 #card")]) == "Q1\n\n"

    def test_extra_front_blocks(self) -> None:
        blocks = [_heading("Q1 #card"), _paragraph(Text("Given "), InlineCode("x"))]

        assert serialize_front(blocks) == "Q1\n\n\nGiven `x`\n\n"

    def test_list_items_become_dash_lines(self) -> None:
        blocks = [_heading("Q #card"), _bullets("alpha", "beta")]

        assert serialize_front(blocks) == "Q\n\n\n- alpha\n- beta\n\n"

    def test_requires_heading_first(self) -> None:
        with pytest.raises(ValueError, match="heading"):
            serialize_front([_paragraph(Text("not a heading"))])


class TestSerializeBack:
    def test_paragraphs_are_separated(self) -> None:
        back = [_paragraph(Text("first")), _paragraph(Text("second"))]

        assert serialize_back(back) == "first\n\n\nsecond\n\n"

    def test_lists_flatten_to_bare_lines(self) -> None:
        nested = ListBlock(
            items=(
                ListItem(children=(_paragraph(Text("outer")), _bullets("inner one", "inner two"))),
            )
        )

        assert serialize_back([nested]) == "outer\ninner one\ninner two\n\n"

    def test_fenced_code(self) -> None:
        back = [FencedCode(lang="python", value="print(1)")]

        assert serialize_back(back) == "```python\nprint(1)\n```\n\n"

    def test_unrendered_blocks_contribute_only_separator(self) -> None:
        assert serialize_back([OtherBlock(kind="hr")]) == "\n"

    def test_images_are_collected_as_media(self) -> None:
        media: list[str] = []
        back = [_paragraph(Text("See "), Image(alt="cell", url="img/cell.png"))]

        text = serialize_back(back, media)

        assert text == "See ![cell](img/cell.png)\n\n"
        assert media == ["img/cell.png"]


class TestSerializeCard:
    def test_canonical_text_is_front_then_back(self, sample_note_content) -> None:
        walk = walk_document(parse_blocks(sample_note_content))
        first, second = walk.cards.values()

        first_text = serialize_card(first)
        second_text = serialize_card(second)

        assert first_text.front == "What is a cell?\n\n"
        assert first_text.back == "The basic unit of life.\n\n"
        assert first_text.canonical == "What is a cell?\n\nThe basic unit of life.\n\n"
        assert second_text.back == "Nucleus\nMitochondria\n\n"
        assert first_text.media == ()

    def test_serialization_is_deterministic(self, sample_note_content) -> None:
        def first_card():
            walk = walk_document(parse_blocks(sample_note_content))
            return next(iter(walk.cards.values()))

        assert serialize_card(first_card()) == serialize_card(first_card())
