"""Domain entities for flashcards and sync results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

from .block import Block, Heading, Position


class CardKey(NamedTuple):
    """Identity of a card within one document snapshot.

    The heading text alone is what gets written back to the document; the
    heading line keeps two cards with identical headings apart.
    """

    heading: str
    line: int


@dataclass
class Card:
    """A flashcard extracted from a ``#card`` heading and its content.

    Only ``remote_id`` and ``content_hash`` change after the walk, and only
    after a successful remote write.
    """

    key: CardKey
    heading: Heading
    position: Position
    front: list[Block] = field(default_factory=list)
    back: list[Block] = field(default_factory=list)
    remote_id: int | None = None
    content_hash: str | None = None

    def __post_init__(self) -> None:
        if not self.front:
            self.front.append(self.heading)
        elif self.front[0] is not self.heading:
            raise ValueError("First front block must be the card heading")

    @property
    def depth(self) -> int:
        return self.heading.depth

    @property
    def is_new(self) -> bool:
        """Check if card is new (not yet in Anki)."""
        return self.remote_id is None

    @property
    def heading_line(self) -> int:
        """Zero-based editor line of the heading."""
        return self.position.start_line - 1


@dataclass(frozen=True)
class SyncContext:
    """Document-level values shared by every card of one run."""

    deck_name: str
    tags: tuple[str, ...]
    note_type: str


class SyncActionType(Enum):
    """Remote write chosen for a card."""

    CREATE = "create"
    UPDATE = "update"


class SyncOutcome(Enum):
    """Per-card result of a sync run."""

    UNCHANGED = "unchanged"
    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class LinePatch:
    """Replace zero-based document line ``line`` with ``text``.

    ``text`` may contain newlines, in which case the document grows.
    """

    line: int
    text: str


@dataclass(frozen=True)
class CardSyncResult:
    """Outcome of syncing a single card."""

    key: CardKey
    outcome: SyncOutcome
    action: SyncActionType | None = None
    remote_id: int | None = None
    content_hash: str | None = None
    reason: str | None = None
    patch: LinePatch | None = None
    media: tuple[str, ...] = ()

    @property
    def is_failure(self) -> bool:
        return self.outcome is SyncOutcome.FAILED


@dataclass
class SyncReport:
    """Aggregated results of one sync run."""

    results: list[CardSyncResult] = field(default_factory=list)

    def add(self, result: CardSyncResult) -> None:
        self.results.append(result)

    def count(self, outcome: SyncOutcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def patches(self) -> list[LinePatch]:
        return [r.patch for r in self.results if r.patch is not None]

    @property
    def failures(self) -> list[CardSyncResult]:
        return [r for r in self.results if r.is_failure]

    def summary(self) -> dict[str, int]:
        return {outcome.value: self.count(outcome) for outcome in SyncOutcome}
