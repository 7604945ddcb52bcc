"""Document tree walker: turns top-level blocks into cards.

One pass over the blocks classifies each one as metadata, a card heading,
card content, or a control comment.
"""

from dataclasses import dataclass, field

from ..domain.entities.block import Block, Heading, HtmlComment
from ..domain.entities.card import Card, CardKey
from ..error_codes import ErrorCode
from ..exceptions import MetadataError
from ..utils.logging import get_logger
from .card_state import parse_state_comment

logger = get_logger(__name__)

METADATA_INDEX = 1
FRONT_START_MARKER = "AnkiFront:start"
FRONT_END_MARKER = "AnkiFront:end"

_DECK_TOKEN = "deck:"


@dataclass
class WalkResult:
    """Deck, tags, and cards extracted from one document snapshot."""

    deck_name: str
    tags: list[str] = field(default_factory=list)
    cards: dict[CardKey, Card] = field(default_factory=dict)


def parse_metadata(text: str, namespace: str = "all::") -> tuple[str, list[str]]:
    """Split the metadata heading into a deck name and tags.

    The first line holds the tags (every token after the first); the first
    line containing ``deck:`` holds the deck name.

    Raises:
        MetadataError: If no line contains ``deck:``
    """
    lines = text.split("\n")
    tags = [token for token in lines[0].split()[1:] if not token.startswith(_DECK_TOKEN)]

    deck_line = next((line for line in lines if _DECK_TOKEN in line), None)
    if deck_line is None:
        raise MetadataError(
            "Metadata heading has no deck: entry",
            suggestion="Add a line like 'deck: MyDeck' to the second block of the note",
            error_code=ErrorCode.DOC_META_MISSING_DECK.value,
            context={"heading": text},
        )

    deck = deck_line.split(_DECK_TOKEN, 1)[1].strip()
    return namespace + deck, tags


class DocumentWalker:
    """Stateful single-pass walker over a document's top-level blocks."""

    def __init__(
        self,
        card_tag: str = "#card",
        deck_namespace: str = "all::",
        default_deck: str = "Default",
    ) -> None:
        self.card_tag = card_tag
        self.deck_namespace = deck_namespace
        self.default_deck = default_deck

    def walk(self, blocks: list[Block]) -> WalkResult:
        result = WalkResult(deck_name=self.default_deck)
        current: Card | None = None
        additional_front = False
        seen_headings: set[str] = set()

        for index, block in enumerate(blocks):
            if isinstance(block, HtmlComment):
                if not block.is_comment:
                    continue
                if FRONT_START_MARKER in block.value:
                    additional_front = True
                elif FRONT_END_MARKER in block.value:
                    additional_front = False
                elif current is not None and self._follows_heading(block, current):
                    self._apply_state_comment(block, current)
                continue

            if isinstance(block, Heading):
                if index == METADATA_INDEX:
                    result.deck_name, result.tags = parse_metadata(
                        block.text, self.deck_namespace
                    )
                    continue

                current = self._start_card(block, seen_headings)
                if current is not None:
                    result.cards[current.key] = current
                continue

            if current is None:
                continue

            if additional_front:
                current.front.append(block)
            else:
                current.back.append(block)

        logger.debug(
            "document_walked",
            deck=result.deck_name,
            tags=result.tags,
            cards=len(result.cards),
        )
        return result

    def _start_card(self, heading: Heading, seen_headings: set[str]) -> Card | None:
        text = heading.text
        if self.card_tag not in text or heading.position is None:
            return None

        if text in seen_headings:
            logger.warning(
                "duplicate_card_heading", heading=text, line=heading.position.start_line
            )
        seen_headings.add(text)

        return Card(
            key=CardKey(heading=text, line=heading.position.start_line),
            heading=heading,
            position=heading.position,
        )

    @staticmethod
    def _follows_heading(comment: HtmlComment, card: Card) -> bool:
        return (
            comment.position is not None
            and comment.position.start_line == card.position.start_line + 1
        )

    @staticmethod
    def _apply_state_comment(comment: HtmlComment, card: Card) -> None:
        state = parse_state_comment(comment.value)
        if state is None:
            logger.warning(
                "card_state_comment_invalid",
                card=card.key.heading,
                comment=comment.value,
            )
            return
        card.remote_id, card.content_hash = state


def walk_document(
    blocks: list[Block],
    card_tag: str = "#card",
    deck_namespace: str = "all::",
    default_deck: str = "Default",
) -> WalkResult:
    """Extract deck, tags, and cards from parsed blocks."""
    walker = DocumentWalker(
        card_tag=card_tag, deck_namespace=deck_namespace, default_deck=default_deck
    )
    return walker.walk(blocks)
