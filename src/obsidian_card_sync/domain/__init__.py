"""Domain layer for the card sync service.

This package contains the domain entities, services, and interfaces.
"""

from .entities.card import (
    Card,
    CardKey,
    CardSyncResult,
    LinePatch,
    SyncActionType,
    SyncContext,
    SyncOutcome,
    SyncReport,
)
from .interfaces.anki_client import IAnkiClient
from .interfaces.document import IDocument
from .services.content_hash_service import ContentHashService

__all__ = [
    "Card",
    "CardKey",
    "CardSyncResult",
    "ContentHashService",
    "IAnkiClient",
    "IDocument",
    "LinePatch",
    "SyncActionType",
    "SyncContext",
    "SyncOutcome",
    "SyncReport",
]
