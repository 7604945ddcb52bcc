"""Card serialization, reconciliation, and the sync engine."""

from .content_serializer import SerializedCard, serialize_back, serialize_card, serialize_front
from .engine import CardInspection, SyncEngine, extract_cards, inspect_cards
from .reconciler import CardReconciler

__all__ = [
    "CardInspection",
    "CardReconciler",
    "SerializedCard",
    "SyncEngine",
    "extract_cards",
    "inspect_cards",
    "serialize_back",
    "serialize_card",
    "serialize_front",
]
