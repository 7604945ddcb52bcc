"""Domain entities package."""

from .block import (
    Block,
    FencedCode,
    Heading,
    HtmlComment,
    Image,
    InlineCode,
    ListBlock,
    ListItem,
    OtherBlock,
    Paragraph,
    Position,
    Text,
)
from .card import (
    Card,
    CardKey,
    CardSyncResult,
    LinePatch,
    SyncActionType,
    SyncContext,
    SyncOutcome,
    SyncReport,
)

__all__ = [
    "Block",
    "Card",
    "CardKey",
    "CardSyncResult",
    "FencedCode",
    "Heading",
    "HtmlComment",
    "Image",
    "InlineCode",
    "LinePatch",
    "ListBlock",
    "ListItem",
    "OtherBlock",
    "Paragraph",
    "Position",
    "SyncActionType",
    "SyncContext",
    "SyncOutcome",
    "SyncReport",
    "Text",
]
