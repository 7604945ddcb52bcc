"""Logging configuration using structlog for structured JSON logging."""

import logging
import sys
from collections.abc import MutableMapping
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer
from structlog.stdlib import LoggerFactory, add_log_level, add_logger_name

# Standard library logging levels mapping
_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# User-facing event names that should appear on terminal (without --verbose)
# These are the only events shown to users by default, plus all ERROR/CRITICAL
USER_FACING_EVENTS: set[str] = {
    "sync_started",
    "sync_completed",
    "sync_skipped_no_document",
    "card_sync_failed",
    "duplicate_card_heading",
    "anki_connection_warning",
}


def _get_level_no(level_name: str) -> int:
    """Get numeric log level from name."""
    return _LOG_LEVELS.get(level_name.upper(), logging.INFO)


class UserFacingConsoleFilter(logging.Filter):
    """Logging filter that only passes user-facing events to console.

    Allows:
    - Events in USER_FACING_EVENTS set
    - All ERROR and CRITICAL level messages
    - All messages when verbose mode is enabled
    """

    def __init__(self, verbose: bool = False) -> None:
        super().__init__()
        self.verbose = verbose

    def filter(self, record: logging.LogRecord) -> bool:
        if self.verbose:
            return True

        if record.levelno >= logging.ERROR:
            return True

        # structlog passes the event dict as the record message
        msg = record.msg
        if isinstance(msg, dict):
            return msg.get("event") in USER_FACING_EVENTS

        event = record.getMessage()
        return any(user_event in event for user_event in USER_FACING_EVENTS)


class UserFriendlyConsoleRenderer:
    """Renders user-facing logs in a clean, readable format for terminal output.

    Falls back to the standard console renderer for everything else.
    """

    def __init__(self) -> None:
        self._fallback = ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        """Render log event as user-friendly string."""
        event = event_dict.get("event", "")
        level = str(event_dict.get("level", "info")).upper()

        if event == "sync_started":
            document = event_dict.get("document", "")
            mode = " (dry-run)" if event_dict.get("dry_run") else ""
            return f"Syncing cards from {document}{mode}"

        elif event == "sync_completed":
            return (
                f"Sync completed: {event_dict.get('created', 0)} created, "
                f"{event_dict.get('updated', 0)} updated, "
                f"{event_dict.get('unchanged', 0)} unchanged, "
                f"{event_dict.get('failed', 0)} failed"
            )

        elif event == "sync_skipped_no_document":
            return "No active document, nothing to sync"

        elif event == "card_sync_failed":
            card = event_dict.get("card", "")
            error = event_dict.get("error", "Unknown error")
            return f"WARNING: card '{card}' failed to sync: {error}"

        elif event == "duplicate_card_heading":
            return (
                f"WARNING: heading '{event_dict.get('heading', '')}' is used by "
                "more than one card"
            )

        elif level == "ERROR":
            error = event_dict.get("error", event)
            return f"ERROR: {error}"

        return str(self._fallback(logger, method_name, event_dict))


# Global state for handlers
_configured = False
_handlers: list[logging.Handler] = []


def _base_processors() -> list[structlog.typing.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _setup_stdlib_logging() -> None:
    """Configure standard library logging to work with structlog."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    structlog.configure(
        processors=[
            *_base_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(
    log_level: str = "INFO",
    log_dir: Path | None = None,
    verbose: bool = False,
) -> None:
    """Configure structlog logging.

    Console output is always installed. File output (JSON, rotated by size)
    is only installed when ``log_dir`` is given, together with a separate
    error log.

    Args:
        log_level: Minimum console log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files (no file logging when None)
        verbose: If True, show all log messages on terminal
    """
    global _configured

    _setup_stdlib_logging()

    root_logger = logging.getLogger()
    for handler in _handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    level = _get_level_no(log_level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.addFilter(UserFacingConsoleFilter(verbose=verbose))

    if verbose:
        renderer: Any = ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
    else:
        renderer = UserFriendlyConsoleRenderer()

    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_base_processors(),
        )
    )
    root_logger.addHandler(console_handler)
    _handlers.append(console_handler)

    if log_dir is not None:
        log_dir.mkdir(exist_ok=True, parents=True)
        file_formatter = structlog.stdlib.ProcessorFormatter(
            processor=JSONRenderer(),
            foreign_pre_chain=_base_processors(),
        )

        # 10MB per file, keep 5 backups
        file_handler = RotatingFileHandler(
            filename=str(log_dir / "obsidian-card-sync.log"),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)
        _handlers.append(file_handler)

        error_handler = RotatingFileHandler(
            filename=str(log_dir / "errors.log"),
            maxBytes=10 * 1024 * 1024,
            backupCount=10,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_formatter)
        root_logger.addHandler(error_handler)
        _handlers.append(error_handler)

    _configured = True

    logger = get_logger("obsidian_card_sync.utils.logging")
    logger.debug(
        "logging_configured",
        console_level=log_level,
        log_dir=str(log_dir) if log_dir else None,
        verbose=verbose,
    )


def get_logger(name: str) -> Any:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger bound to the given name
    """
    if not _configured:
        configure_logging()

    return structlog.get_logger(name)
