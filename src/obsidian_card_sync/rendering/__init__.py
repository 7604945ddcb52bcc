"""Markdown to HTML conversion for Anki fields.

- Markdown parsing with mistune
- Syntax highlighting with Pygments
- HTML sanitization with nh3
"""

from obsidian_card_sync.rendering.markdown_converter import (
    MarkdownRenderer,
    convert_markdown_to_html,
    sanitize_html,
)

__all__ = [
    "MarkdownRenderer",
    "convert_markdown_to_html",
    "sanitize_html",
]
