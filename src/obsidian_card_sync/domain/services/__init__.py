"""Domain services package."""

from .content_hash_service import ContentHashService

__all__ = [
    "ContentHashService",
]
