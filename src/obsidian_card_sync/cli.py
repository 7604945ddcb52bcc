"""Command-line interface for the card sync service."""

from __future__ import annotations

import typer

from .cli_commands import core_commands

app = typer.Typer(
    name="obsidian-card-sync",
    help="Sync #card sections of Markdown notes to Anki.",
    no_args_is_help=True,
)

core_commands.register(app)


def cli() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
