"""Sync, inspect, and check command implementation logic."""

import asyncio
from pathlib import Path
from typing import Any

import typer
from rich.table import Table

from ..anki.client import AnkiClient
from ..config import Config
from ..domain.entities.card import SyncOutcome, SyncReport
from ..exceptions import CardSyncError
from ..obsidian.document import MarkdownDocument
from ..sync.engine import SyncEngine, inspect_cards
from .shared import console

_OUTCOME_STYLES = {
    SyncOutcome.CREATED: "green",
    SyncOutcome.UPDATED: "cyan",
    SyncOutcome.UNCHANGED: "dim",
    SyncOutcome.SKIPPED: "yellow",
    SyncOutcome.FAILED: "red",
}


def _print_error(error: CardSyncError) -> None:
    console.print(f"[bold red]Error:[/bold red] {error.message}")
    if error.suggestion:
        console.print(f"  [dim]{error.suggestion}[/dim]")


def _print_report(report: SyncReport) -> None:
    table = Table(title="Card Sync Results")
    table.add_column("Card", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Outcome")
    table.add_column("Note ID", justify="right")
    table.add_column("Details", style="dim")

    for result in report.results:
        style = _OUTCOME_STYLES[result.outcome]
        details = result.reason or ""
        if result.outcome is SyncOutcome.SKIPPED and result.action:
            details = f"would {result.action.value}"
        table.add_row(
            result.key.heading,
            str(result.key.line),
            f"[{style}]{result.outcome.value}[/{style}]",
            str(result.remote_id) if result.remote_id is not None else "-",
            details,
        )

    console.print(table)
    summary = ", ".join(f"{count} {name}" for name, count in report.summary().items() if count)
    console.print(f"\n[bold]Summary:[/bold] {summary or 'no cards found'}")


async def _sync(config: Config, document: MarkdownDocument, dry_run: bool) -> SyncReport:
    async with AnkiClient(config.anki_connect_url, timeout=config.request_timeout) as client:
        engine = SyncEngine(config, client)
        return await engine.run(document, dry_run=dry_run)


def run_sync(config: Config, logger: Any, note_path: Path, dry_run: bool = False) -> None:
    """Execute the sync operation for one note.

    Raises:
        typer.Exit: On a failure that aborts the whole run, or when any card failed
    """
    try:
        document = MarkdownDocument.from_path(note_path)
        try:
            report = asyncio.run(_sync(config, document, dry_run))
        finally:
            # Patches for notes already created must reach disk even if the run aborts
            if document.dirty:
                document.save()
    except CardSyncError as e:
        logger.error(
            "sync_failed",
            document=str(note_path),
            error=e.message,
            error_code=e.error_code,
            error_type=type(e).__name__,
        )
        _print_error(e)
        raise typer.Exit(code=1) from e

    _print_report(report)
    if report.failures:
        raise typer.Exit(code=1)


def run_inspect(config: Config, logger: Any, note_path: Path) -> None:
    """List the cards of a note with their local sync state."""
    try:
        document = MarkdownDocument.from_path(note_path)
        walk, inspections = inspect_cards(document.read(), config)
    except CardSyncError as e:
        logger.error("inspect_failed", document=str(note_path), error=e.message)
        _print_error(e)
        raise typer.Exit(code=1) from e

    console.print(f"[bold]Deck:[/bold] {walk.deck_name}")
    console.print(f"[bold]Tags:[/bold] {' '.join(walk.tags) or '-'}\n")

    table = Table(title=f"Cards in {note_path.name}")
    table.add_column("Card", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Note ID", justify="right")
    table.add_column("Stored hash", style="dim")
    table.add_column("Fingerprint", style="dim")
    table.add_column("Status")
    table.add_column("Media", justify="right")

    for item in inspections:
        card = item.card
        status = (
            f"[yellow]needs {item.action.value}[/yellow]"
            if item.action
            else "[green]in sync[/green]"
        )
        table.add_row(
            card.key.heading,
            str(card.key.line),
            str(card.remote_id) if card.remote_id is not None else "-",
            card.content_hash or "-",
            item.fingerprint,
            status,
            str(len(item.media)),
        )

    console.print(table)


def run_check(config: Config, logger: Any) -> None:
    """Check that AnkiConnect answers.

    Raises:
        typer.Exit: If AnkiConnect is unreachable
    """

    async def _check() -> bool:
        async with AnkiClient(config.anki_connect_url, timeout=config.request_timeout) as client:
            return await client.check_connection()

    if asyncio.run(_check()):
        console.print(f"[green]PASS[/green] AnkiConnect reachable at {config.anki_connect_url}")
        return

    logger.error("anki_connection_failed", url=config.anki_connect_url)
    console.print(f"[red]FAIL[/red] AnkiConnect not reachable at {config.anki_connect_url}")
    console.print("  [dim]Start Anki and make sure the AnkiConnect add-on is installed[/dim]")
    raise typer.Exit(code=1)
