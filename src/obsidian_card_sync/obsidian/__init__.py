"""Markdown note parsing, card extraction, and the file-backed document."""

from .document import MarkdownDocument
from .parser import parse_blocks
from .walker import DocumentWalker, WalkResult, parse_metadata, walk_document

__all__ = [
    "DocumentWalker",
    "MarkdownDocument",
    "WalkResult",
    "parse_blocks",
    "parse_metadata",
    "walk_document",
]
