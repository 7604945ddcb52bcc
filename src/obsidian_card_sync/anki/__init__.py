"""AnkiConnect client."""

from .client import AnkiClient

__all__ = [
    "AnkiClient",
]
