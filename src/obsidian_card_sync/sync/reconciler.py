"""Sequential reconciliation of cards with the remote store."""

from collections.abc import Iterable
from dataclasses import replace
from typing import Protocol, cast

from ..domain.entities.card import (
    Card,
    CardSyncResult,
    LinePatch,
    SyncActionType,
    SyncContext,
    SyncOutcome,
    SyncReport,
)
from ..domain.interfaces.anki_client import IAnkiClient
from ..domain.interfaces.document import IDocument
from ..domain.services.content_hash_service import ContentHashService
from ..error_codes import ErrorCode
from ..exceptions import AnkiConnectError, CardSyncError
from ..obsidian.card_state import format_heading, format_state_comment
from ..utils.logging import get_logger
from .content_serializer import SerializedCard, serialize_card

logger = get_logger(__name__)


class Renderer(Protocol):
    def render(self, md_content: str) -> str: ...


def _reason(error: Exception) -> str:
    if isinstance(error, CardSyncError):
        return error.message
    return str(error) or type(error).__name__


def create_patch(card: Card, remote_id: int, content_hash: str, inserted: int) -> LinePatch:
    """Rewrite the heading line and add the state comment below it."""
    text = (
        format_heading(card.depth, card.key.heading)
        + "\n"
        + format_state_comment(remote_id, content_hash)
    )
    return LinePatch(line=card.heading_line + inserted, text=text)


def update_patch(card: Card, remote_id: int, content_hash: str, inserted: int) -> LinePatch:
    """Refresh the state comment that follows the heading."""
    return LinePatch(
        line=card.heading_line + 1 + inserted,
        text=format_state_comment(remote_id, content_hash),
    )


class CardReconciler:
    """Upserts changed cards one at a time and patches the document.

    Each create inserts one line into the document, so the running
    ``inserted`` count offsets every later patch. Cards must therefore be
    processed in document order and never concurrently.
    """

    def __init__(
        self,
        client: IAnkiClient,
        context: SyncContext,
        renderer: Renderer,
        document: IDocument | None = None,
        card_tag: str = "#card",
        dry_run: bool = False,
    ) -> None:
        self.client = client
        self.context = context
        self.renderer = renderer
        self.document = document
        self.card_tag = card_tag
        self.dry_run = dry_run

    async def reconcile(self, cards: Iterable[Card]) -> SyncReport:
        report = SyncReport()
        inserted = 0

        for card in cards:
            result = await self.sync_card(card, inserted)
            if result.patch is not None:
                try:
                    self._apply(result.patch)
                except Exception as e:
                    result = self._patch_failed(result, e)
                else:
                    if result.outcome is SyncOutcome.CREATED:
                        inserted += 1
            report.add(result)

        return report

    async def sync_card(self, card: Card, inserted: int = 0) -> CardSyncResult:
        """Sync one card; render and remote failures become a FAILED result."""
        serialized = serialize_card(card, self.card_tag)
        fingerprint = ContentHashService.fingerprint(serialized.canonical)

        if not ContentHashService.needs_sync(card, fingerprint):
            logger.debug("card_unchanged", card=card.key.heading, line=card.key.line)
            return CardSyncResult(
                key=card.key,
                outcome=SyncOutcome.UNCHANGED,
                remote_id=card.remote_id,
                content_hash=fingerprint,
                media=serialized.media,
            )

        action = SyncActionType.CREATE if card.is_new else SyncActionType.UPDATE

        if self.dry_run:
            logger.info("card_sync_planned", card=card.key.heading, action=action.value)
            return CardSyncResult(
                key=card.key,
                outcome=SyncOutcome.SKIPPED,
                action=action,
                remote_id=card.remote_id,
                content_hash=fingerprint,
                media=serialized.media,
            )

        try:
            new_id = await self._upsert(card, serialized)
            if action is SyncActionType.CREATE and new_id is None:
                raise AnkiConnectError(
                    "addNote returned no note id",
                    error_code=ErrorCode.ANK_MISSING_NOTE_ID.value,
                )
        except Exception as e:
            reason = _reason(e)
            logger.warning(
                "card_sync_failed",
                card=card.key.heading,
                line=card.key.line,
                action=action.value,
                error=reason,
                error_type=type(e).__name__,
                error_code=getattr(e, "error_code", None),
            )
            return CardSyncResult(
                key=card.key,
                outcome=SyncOutcome.FAILED,
                action=action,
                remote_id=card.remote_id,
                reason=reason,
                media=serialized.media,
            )

        if action is SyncActionType.CREATE:
            card.remote_id = new_id
        remote_id = cast("int", card.remote_id)

        if action is SyncActionType.CREATE:
            patch = create_patch(card, remote_id, fingerprint, inserted)
            outcome = SyncOutcome.CREATED
        else:
            patch = update_patch(card, remote_id, fingerprint, inserted)
            outcome = SyncOutcome.UPDATED
        card.content_hash = fingerprint

        logger.info(
            "card_synced",
            card=card.key.heading,
            note_id=card.remote_id,
            action=action.value,
            line=patch.line,
        )
        return CardSyncResult(
            key=card.key,
            outcome=outcome,
            action=action,
            remote_id=card.remote_id,
            content_hash=fingerprint,
            patch=patch,
            media=serialized.media,
        )

    async def _upsert(self, card: Card, serialized: SerializedCard) -> int | None:
        fields = {
            "Front": self.renderer.render(serialized.front),
            "Back": self.renderer.render(serialized.back),
        }
        return await self.client.upsert_note(
            deck_name=self.context.deck_name,
            model_name=self.context.note_type,
            fields=fields,
            tags=list(self.context.tags),
            note_id=card.remote_id,
        )

    def _patch_failed(self, result: CardSyncResult, error: Exception) -> CardSyncResult:
        """Report a synced card whose document patch could not be written.

        The remote note exists, so its id stays in the result. Without the
        state comment the next run treats the card as new again.
        """
        reason = _reason(error)
        logger.error(
            "card_patch_failed",
            card=result.key.heading,
            line=result.patch.line if result.patch else None,
            note_id=result.remote_id,
            error=reason,
            error_type=type(error).__name__,
        )
        return replace(
            result,
            outcome=SyncOutcome.FAILED,
            reason=f"note {result.remote_id} synced but the document patch failed: {reason}",
            patch=None,
        )

    def _apply(self, patch: LinePatch) -> None:
        if self.document is None:
            return
        self.document.set_line(patch.line, patch.text)
