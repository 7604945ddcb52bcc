"""Sync engine: one document, one pass, cards synced in order."""

from dataclasses import dataclass

from ..config_settings import Config
from ..domain.entities.card import Card, SyncActionType, SyncContext, SyncOutcome, SyncReport
from ..domain.interfaces.anki_client import IAnkiClient
from ..domain.interfaces.document import IDocument
from ..domain.services.content_hash_service import ContentHashService
from ..obsidian.parser import parse_blocks
from ..obsidian.walker import WalkResult, walk_document
from ..rendering.markdown_converter import MarkdownRenderer
from ..utils.logging import get_logger
from .content_serializer import serialize_card
from .reconciler import CardReconciler, Renderer

logger = get_logger(__name__)


@dataclass(frozen=True)
class CardInspection:
    """Local view of a card without contacting Anki."""

    card: Card
    fingerprint: str
    action: SyncActionType | None
    media: tuple[str, ...]


def extract_cards(text: str, config: Config) -> WalkResult:
    """Parse text and collect deck, tags, and cards.

    Raises:
        MetadataError: If the metadata heading lacks a deck
    """
    return walk_document(
        parse_blocks(text),
        card_tag=config.card_tag,
        deck_namespace=config.deck_namespace,
        default_deck=config.anki_deck_name,
    )


def inspect_cards(text: str, config: Config) -> tuple[WalkResult, list[CardInspection]]:
    """Fingerprint every card and report the action a sync would take."""
    walk = extract_cards(text, config)
    inspections = []
    for card in walk.cards.values():
        serialized = serialize_card(card, config.card_tag)
        fingerprint = ContentHashService.fingerprint(serialized.canonical)
        action: SyncActionType | None = None
        if ContentHashService.needs_sync(card, fingerprint):
            action = SyncActionType.CREATE if card.is_new else SyncActionType.UPDATE
        inspections.append(
            CardInspection(
                card=card,
                fingerprint=fingerprint,
                action=action,
                media=serialized.media,
            )
        )
    return walk, inspections


class SyncEngine:
    """Orchestrates parse, walk, fingerprint, and reconcile for a document."""

    def __init__(
        self,
        config: Config,
        client: IAnkiClient,
        renderer: Renderer | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.renderer = renderer or MarkdownRenderer()

    async def run(self, document: IDocument | None, dry_run: bool = False) -> SyncReport:
        """Sync every card of the document.

        Args:
            document: The active document; None makes the run a no-op
            dry_run: Decide actions without contacting Anki or patching

        Returns:
            Per-card results, including failures
        """
        if document is None:
            logger.info("sync_skipped_no_document")
            return SyncReport()

        logger.info("sync_started", document=document.name, dry_run=dry_run)

        walk = extract_cards(document.read(), self.config)
        context = SyncContext(
            deck_name=walk.deck_name,
            tags=tuple(walk.tags),
            note_type=self.config.anki_note_type,
        )
        reconciler = CardReconciler(
            client=self.client,
            context=context,
            renderer=self.renderer,
            document=document,
            card_tag=self.config.card_tag,
            dry_run=dry_run,
        )
        report = await reconciler.reconcile(walk.cards.values())

        logger.info(
            "sync_completed",
            document=document.name,
            deck=context.deck_name,
            created=report.count(SyncOutcome.CREATED),
            updated=report.count(SyncOutcome.UPDATED),
            unchanged=report.count(SyncOutcome.UNCHANGED),
            failed=report.count(SyncOutcome.FAILED),
            skipped=report.count(SyncOutcome.SKIPPED),
        )
        return report
