"""Shared utilities for CLI commands."""

from pathlib import Path
from typing import Any

from rich.console import Console

from obsidian_card_sync.config import Config, load_config, set_config
from obsidian_card_sync.utils.logging import configure_logging, get_logger

# Shared console for all commands
console = Console()


def get_config_and_logger(
    config_path: Path | None = None,
    log_level: str = "INFO",
    verbose: bool = False,
) -> tuple[Config, Any]:
    """Load configuration and configure logging for one command.

    Args:
        config_path: Optional path to config file
        log_level: Console log level
        verbose: Show all log messages on terminal

    Returns:
        Tuple of (Config, Logger)
    """
    config = load_config(config_path)
    set_config(config)

    configure_logging(log_level or config.log_level, log_dir=config.log_dir, verbose=verbose)
    return config, get_logger("cli")
