"""Interface for the live document being synced."""

from abc import ABC, abstractmethod


class IDocument(ABC):
    """Contract for reading a document and patching it line by line."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable document name used in logs."""
        pass

    @abstractmethod
    def read(self) -> str:
        """Return the full current text of the document."""
        pass

    @abstractmethod
    def set_line(self, line: int, text: str) -> None:
        """Replace zero-based ``line`` with ``text``.

        A ``text`` containing newlines replaces the single line with several,
        shifting every later line down.

        Raises:
            DocumentError: If ``line`` is outside the document
        """
        pass
