"""Convert serialized card Markdown to HTML for Anki fields.

Uses mistune for Markdown parsing, Pygments for syntax highlighting of fenced
code, and nh3 for HTML sanitization.
"""

import mistune
import nh3
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from obsidian_card_sync.utils.logging import get_logger

logger = get_logger(__name__)

# Allowed HTML tags for Anki cards (used by nh3 sanitizer)
ALLOWED_TAGS = {
    "p",
    "br",
    "strong",
    "b",
    "em",
    "i",
    "u",
    "s",
    "del",
    "code",
    "pre",
    "ul",
    "ol",
    "li",
    "input",
    "table",
    "thead",
    "tbody",
    "tr",
    "th",
    "td",
    "blockquote",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "a",
    "img",
    "div",
    "span",
    "sup",
    "sub",
    "hr",
}

_GLOBAL_ATTRIBUTES = {"class", "id", "style"}

# "rel" is excluded from "a" because nh3.clean() sets it via link_rel
_TAG_SPECIFIC_ATTRIBUTES = {
    "a": {"href", "title", "target"},
    "img": {"src", "alt", "title", "width", "height"},
    "input": {"type", "checked", "disabled"},
    "td": {"colspan", "rowspan", "align"},
    "th": {"colspan", "rowspan", "align"},
}


def _build_allowed_attributes() -> dict[str, set[str]]:
    """Build allowed attributes dict with global attrs applied to all tags."""
    return {
        tag: _GLOBAL_ATTRIBUTES | _TAG_SPECIFIC_ATTRIBUTES.get(tag, set())
        for tag in ALLOWED_TAGS
    }


ALLOWED_ATTRIBUTES = _build_allowed_attributes()


class AnkiHighlightRenderer(mistune.HTMLRenderer):
    """mistune renderer with Pygments syntax highlighting for fenced code."""

    def __init__(self, escape: bool = False) -> None:
        super().__init__(escape=escape)
        self._formatter = HtmlFormatter(cssclass="codehilite", nowrap=False)

    def block_code(self, code: str, info: str | None = None) -> str:
        lang = info.split()[0] if info and info.strip() else None

        if lang:
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                highlighted: str = highlight(code, lexer, self._formatter)
                return highlighted

        lang_class = f"language-{lang}" if lang else "language-text"
        escaped = mistune.escape(code.rstrip("\n"))
        return f'<pre><code class="{lang_class}">{escaped}</code></pre>\n'


def _create_mistune_converter() -> mistune.Markdown:
    return mistune.create_markdown(
        renderer=AnkiHighlightRenderer(),
        plugins=["strikethrough", "table", "task_lists"],
    )


def sanitize_html(html: str) -> str:
    """Sanitize HTML with nh3, keeping comments and the Anki-safe tag set."""
    if not html:
        return html

    return nh3.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        link_rel="noopener noreferrer",
        strip_comments=False,
    )


def convert_markdown_to_html(md_content: str, sanitize: bool = True) -> str:
    """
    Convert Markdown content to HTML.

    Args:
        md_content: Markdown-formatted text
        sanitize: Whether to sanitize HTML output (default True)

    Returns:
        HTML-formatted text suitable for an Anki field
    """
    if not md_content or not md_content.strip():
        return ""

    result = _create_mistune_converter()(md_content)
    html: str = result if isinstance(result, str) else str(result)

    if sanitize:
        html = sanitize_html(html)

    logger.debug("markdown_rendered", markdown_length=len(md_content), html_length=len(html))
    return html


class MarkdownRenderer:
    """Renders both faces of a card; injectable for tests."""

    def __init__(self, sanitize: bool = True) -> None:
        self.sanitize = sanitize

    def render(self, md_content: str) -> str:
        return convert_markdown_to_html(md_content, sanitize=self.sanitize)
