"""Centralized exception hierarchy for obsidian-card-sync.

All custom exceptions inherit from CardSyncError, making it easy to catch
every sync-related error with a single except clause.

Exception Hierarchy:
    CardSyncError (base)
     ConfigurationError - Configuration loading/validation errors
     ParserError - Markdown document parsing errors
        MetadataError - Missing or malformed deck/tag heading
     DocumentError - Reading or writing the source document
     AnkiError - Anki-related errors
        AnkiConnectError - AnkiConnect communication errors

Usage Examples:
    try:
        report = await engine.run(document)
    except MetadataError as e:
        print(f"Cannot sync: {e.message}")
        print(f"Suggestion: {e.suggestion}")
"""

from typing import Any


class CardSyncError(Exception):
    """Base exception for all sync-related errors.

    Attributes:
        message: Human-readable error message
        suggestion: Optional suggestion for resolving the error
        error_code: Structured error code for machine-readable handling
        context: Additional context for debugging (e.g., file paths, card keys)
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            suggestion: Optional suggestion for resolving the error
            error_code: Structured error code (e.g., "DOC-META-001")
            context: Additional context for debugging
        """
        self.message = message
        self.suggestion = suggestion
        self.error_code = error_code
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with error code and suggestion if available."""
        parts = []
        if self.error_code:
            parts.append(f"[{self.error_code}] {self.message}")
        else:
            parts.append(self.message)
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "message": self.message,
            "error_code": self.error_code,
            "suggestion": self.suggestion,
            "context": self.context,
            "type": type(self).__name__,
        }


# Configuration Errors


class ConfigurationError(CardSyncError):
    """Configuration loading or validation errors.

    Raised when:
    - Config file is malformed
    - Configuration values fail validation
    """


# Parsing Errors


class ParserError(CardSyncError):
    """Markdown document parsing errors."""


class MetadataError(ParserError):
    """Deck/tag metadata heading errors.

    Raised when the metadata heading (second top-level block) has no
    ``deck:`` token. Every card needs a deck, so the whole run fails.
    """


# Document Errors


class DocumentError(CardSyncError):
    """Source document errors.

    Raised when:
    - The document file cannot be read or written
    - A line patch targets a line outside the document
    """


# Anki Errors


class AnkiError(CardSyncError):
    """Base class for Anki-related errors."""


class AnkiConnectError(AnkiError):
    """AnkiConnect communication errors.

    Raised when:
    - Cannot connect to AnkiConnect
    - Anki is not running
    - AnkiConnect addon is not installed
    - AnkiConnect API returns an error
    """
