"""Core CLI commands: sync, inspect, check."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Annotated

import typer

from .shared import get_config_and_logger
from .sync_handler import run_check, run_inspect, run_sync

NotePath = Annotated[
    Path,
    typer.Argument(
        help="Path to the Markdown note", exists=True, dir_okay=False, readable=True
    ),
]
ConfigPath = Annotated[
    Path | None,
    typer.Option("--config", help="Path to config.yaml", exists=True),
]
LogLevel = Annotated[
    str,
    typer.Option("--log-level", help="Log level (DEBUG, INFO, WARN, ERROR)"),
]


def register(app: typer.Typer) -> None:
    """Register core commands on the given Typer app."""

    @app.command()
    def sync(
        note_path: NotePath,
        dry_run: Annotated[
            bool,
            typer.Option("--dry-run", help="Preview changes without applying"),
        ] = False,
        config_path: ConfigPath = None,
        log_level: LogLevel = "INFO",
        verbose: Annotated[
            bool,
            typer.Option(
                "--verbose",
                "-v",
                help="Show all log messages on terminal (for debugging)",
            ),
        ] = False,
    ) -> None:
        """Synchronize the #card sections of a note to Anki."""
        start_time = time.time()
        config, logger = get_config_and_logger(config_path, log_level, verbose=verbose)

        logger.info(
            "cli_command_started",
            command="sync",
            document=str(note_path),
            dry_run=dry_run,
            anki_connect_url=config.anki_connect_url,
        )

        run_sync(config=config, logger=logger, note_path=note_path, dry_run=dry_run)

        logger.info(
            "cli_command_completed",
            command="sync",
            duration=round(time.time() - start_time, 2),
        )

    @app.command()
    def inspect(
        note_path: NotePath,
        config_path: ConfigPath = None,
        log_level: LogLevel = "INFO",
    ) -> None:
        """Show the cards of a note and whether they need syncing."""
        config, logger = get_config_and_logger(config_path, log_level)
        run_inspect(config=config, logger=logger, note_path=note_path)

    @app.command()
    def check(
        config_path: ConfigPath = None,
        log_level: LogLevel = "INFO",
    ) -> None:
        """Check that AnkiConnect is reachable."""
        config, logger = get_config_and_logger(config_path, log_level)
        run_check(config=config, logger=logger)
