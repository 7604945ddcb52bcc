"""File-backed Markdown document with editor-style line patching."""

import re
from pathlib import Path

from ..domain.interfaces.document import IDocument
from ..error_codes import ErrorCode
from ..exceptions import DocumentError
from ..utils.io import atomic_write
from ..utils.logging import get_logger

logger = get_logger(__name__)

# Same line breaks markdown-it counts, so line numbers agree with block positions
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> tuple[list[str], list[str]]:
    """Split text into line contents and their terminators.

    The last terminator is "" (text after the final break, possibly empty).
    """
    lines: list[str] = []
    endings: list[str] = []
    start = 0
    for match in _LINE_BREAK_RE.finditer(text):
        lines.append(text[start : match.start()])
        endings.append(match.group())
        start = match.end()
    lines.append(text[start:])
    endings.append("")
    return lines, endings


class MarkdownDocument(IDocument):
    """A Markdown note held in memory as lines.

    ``set_line`` follows editor semantics: writing text with newlines into
    one line splits it, so later lines move down. Each line keeps its own
    terminator, so untouched ``\\r\\n`` or ``\\r`` breaks are written back
    as read. Nothing touches disk until ``save`` is called.
    """

    def __init__(self, text: str, path: Path | None = None) -> None:
        self.path = path
        self._lines, self._endings = split_lines(text)
        self._newline = next((ending for ending in self._endings if ending), "\n")
        self._dirty = False

    @classmethod
    def from_path(cls, path: Path) -> "MarkdownDocument":
        try:
            # newline="" keeps \r\n intact so untouched lines round-trip
            with open(path, encoding="utf-8", newline="") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Cannot read document: {path}"
            raise DocumentError(
                msg,
                suggestion=str(e),
                error_code=ErrorCode.DOC_READ_FAILED.value,
                context={"path": str(path)},
            ) from e
        return cls(text, path=path)

    @property
    def name(self) -> str:
        return str(self.path) if self.path else "<memory>"

    @property
    def dirty(self) -> bool:
        """Whether any line was patched since loading or the last save."""
        return self._dirty

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def read(self) -> str:
        return "".join(line + ending for line, ending in zip(self._lines, self._endings))

    def get_line(self, line: int) -> str:
        self._check_line(line)
        return self._lines[line]

    def set_line(self, line: int, text: str) -> None:
        self._check_line(line)
        new_lines = text.split("\n")
        # Inserted lines reuse the break of the line they replace
        ending = self._endings[line]
        separator = ending or self._newline
        new_endings = [separator] * (len(new_lines) - 1) + [ending]
        self._lines[line : line + 1] = new_lines
        self._endings[line : line + 1] = new_endings
        self._dirty = True
        logger.debug("document_line_set", document=self.name, line=line)

    def save(self) -> None:
        """Write the document back to its path atomically."""
        if self.path is None:
            msg = "Document has no path to save to"
            raise DocumentError(msg, error_code=ErrorCode.DOC_WRITE_FAILED.value)
        if not self._dirty:
            return

        try:
            with atomic_write(self.path) as f:
                f.write(self.read())
        except OSError as e:
            msg = f"Cannot write document: {self.path}"
            raise DocumentError(
                msg,
                suggestion=str(e),
                error_code=ErrorCode.DOC_WRITE_FAILED.value,
                context={"path": str(self.path)},
            ) from e

        self._dirty = False
        logger.info("document_saved", document=self.name)

    def _check_line(self, line: int) -> None:
        if not 0 <= line < len(self._lines):
            msg = f"Line {line} is outside the document (0..{len(self._lines) - 1})"
            raise DocumentError(
                msg,
                error_code=ErrorCode.DOC_LINE_OUT_OF_RANGE.value,
                context={"document": self.name, "line": line},
            )
