"""Structured error codes for machine-readable error handling.

Error codes follow the format: {DOMAIN}-{CATEGORY}-{NUMBER}

Error Domains:
    DOC - Source document errors (metadata, reading, patching)
    ANK - Anki errors (connection, note creation/update)
    CFG - Configuration errors

Usage:
    from obsidian_card_sync.error_codes import ErrorCode

    logger.warning(
        "card_sync_failed",
        error_code=ErrorCode.ANK_ACTION_FAILED.value,
        card=card.key.heading,
    )
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Structured error codes for machine-readable handling."""

    # =========================================================================
    # Document Errors (DOC-xxx-xxx)
    # =========================================================================
    DOC_META_MISSING_DECK = "DOC-META-001"
    """Metadata heading has no deck: token."""

    DOC_READ_FAILED = "DOC-IO-001"
    """Document file could not be read."""

    DOC_WRITE_FAILED = "DOC-IO-002"
    """Document file could not be written."""

    DOC_LINE_OUT_OF_RANGE = "DOC-PATCH-001"
    """Line patch targets a line outside the document."""

    # =========================================================================
    # Anki Errors (ANK-xxx-xxx)
    # =========================================================================
    ANK_CONNECTION_FAILED = "ANK-CONN-001"
    """AnkiConnect is unreachable or timed out."""

    ANK_HTTP_ERROR = "ANK-CONN-002"
    """AnkiConnect answered with a non-2xx status."""

    ANK_INVALID_RESPONSE = "ANK-RESP-001"
    """AnkiConnect response was not valid JSON or had an unexpected shape."""

    ANK_REQUEST_FAILED = "ANK-RESP-002"
    """AnkiConnect envelope carried an error."""

    ANK_ACTION_FAILED = "ANK-RESP-003"
    """A single action inside a multi request carried an error."""

    ANK_MISSING_NOTE_ID = "ANK-RESP-004"
    """addNote succeeded without returning a note id."""

    # =========================================================================
    # Configuration Errors (CFG-xxx-xxx)
    # =========================================================================
    CFG_YAML_INVALID = "CFG-YAML-001"
    """config.yaml could not be parsed."""

    CFG_VALUE_INVALID = "CFG-VAL-001"
    """A configuration value failed validation."""
