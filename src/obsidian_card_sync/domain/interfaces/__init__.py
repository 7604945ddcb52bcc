"""Domain interfaces package."""

from .anki_client import IAnkiClient
from .document import IDocument

__all__ = [
    "IAnkiClient",
    "IDocument",
]
