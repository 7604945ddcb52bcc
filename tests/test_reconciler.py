"""Tests for sequential card reconciliation and document patching."""

import pytest

from obsidian_card_sync.domain.entities.block import Heading, Position, Text
from obsidian_card_sync.domain.entities.card import (
    Card,
    CardKey,
    LinePatch,
    SyncActionType,
    SyncContext,
    SyncOutcome,
)
from obsidian_card_sync.domain.services.content_hash_service import ContentHashService
from obsidian_card_sync.error_codes import ErrorCode
from obsidian_card_sync.exceptions import DocumentError
from obsidian_card_sync.obsidian.document import MarkdownDocument
from obsidian_card_sync.obsidian.parser import parse_blocks
from obsidian_card_sync.obsidian.walker import walk_document
from obsidian_card_sync.sync.reconciler import CardReconciler, create_patch, update_patch

FIRST_HASH = ContentHashService.fingerprint("What is a cell?\n\nThe basic unit of life.\n\n")
SECOND_HASH = ContentHashService.fingerprint("Name two organelles\n\nNucleus\nMitochondria\n\n")
SYNCED_HASH = ContentHashService.fingerprint("Q\n\nA\n\n")

MIXED_NOTE = (
    "---\ntags: t\ndeck: D\n---\n\n"
    "## New #card\n\nfresh\n\n"
    "## Old #card\n<!-- 77 deadbeef -->\n\nchanged\n"
)


@pytest.fixture
def context():
    return SyncContext(
        deck_name="all::Biology", tags=("biology", "cells"), note_type="Basic-23794"
    )


@pytest.fixture
def make_reconciler(mock_anki_client, renderer, context):
    def _make(document=None, dry_run=False):
        return CardReconciler(
            client=mock_anki_client,
            context=context,
            renderer=renderer,
            document=document,
            dry_run=dry_run,
        )

    return _make


def _cards(document: MarkdownDocument) -> list[Card]:
    return list(walk_document(parse_blocks(document.read())).cards.values())


def _card(text: str, depth: int, line: int) -> Card:
    heading = Heading(depth=depth, children=(Text(text),), position=Position(line, line))
    return Card(key=CardKey(text, line), heading=heading, position=heading.position)


class TestPatches:
    def test_create_patch_rewrites_heading_with_state_comment(self) -> None:
        card = _card("My Card #card", depth=4, line=3)

        patch = create_patch(card, 123, "abc", inserted=0)

        assert patch == LinePatch(line=2, text="#### My Card #card\n<!-- 123 abc -->")

    def test_create_patch_shifts_by_inserted_lines(self) -> None:
        card = _card("My Card #card", depth=2, line=10)

        assert create_patch(card, 1, "abc", inserted=2).line == 11

    def test_update_patch_targets_line_after_heading(self) -> None:
        card = _card("My Card #card", depth=2, line=10)

        patch = update_patch(card, 5, "def", inserted=1)

        assert patch == LinePatch(line=11, text="<!-- 5 def -->")


class TestCardReconciler:
    @pytest.mark.asyncio
    async def test_creates_new_cards_and_patches_document(
        self, make_reconciler, mock_anki_client, sample_document
    ) -> None:
        report = await make_reconciler(sample_document).reconcile(_cards(sample_document))

        assert [r.outcome for r in report.results] == [SyncOutcome.CREATED, SyncOutcome.CREATED]
        assert report.patches == [
            LinePatch(5, f"## What is a cell? #card\n<!-- 1000 {FIRST_HASH} -->"),
            LinePatch(14, f"### Name two organelles #card\n<!-- 1001 {SECOND_HASH} -->"),
        ]
        assert sample_document.get_line(6) == f"<!-- 1000 {FIRST_HASH} -->"
        assert sample_document.get_line(14) == "### Name two organelles #card"
        assert sample_document.get_line(15) == f"<!-- 1001 {SECOND_HASH} -->"
        assert sample_document.dirty

    @pytest.mark.asyncio
    async def test_create_sends_rendered_fields_deck_and_tags(
        self, make_reconciler, mock_anki_client, sample_document
    ) -> None:
        await make_reconciler(sample_document).reconcile(_cards(sample_document))

        first_call = mock_anki_client.upsert_calls[0]
        assert first_call == {
            "id": None,
            "deckName": "all::Biology",
            "modelName": "Basic-23794",
            "fields": {
                "Front": "What is a cell?\n\n",
                "Back": "The basic unit of life.\n\n",
            },
            "tags": ["biology", "cells"],
        }

    @pytest.mark.asyncio
    async def test_successful_sync_updates_card_state(
        self, make_reconciler, sample_document
    ) -> None:
        cards = _cards(sample_document)

        await make_reconciler(sample_document).reconcile(cards)

        assert cards[0].remote_id == 1000
        assert cards[0].content_hash == FIRST_HASH

    @pytest.mark.asyncio
    async def test_update_keeps_remote_id(self, make_reconciler, mock_anki_client) -> None:
        document = MarkdownDocument(MIXED_NOTE)
        old = _cards(document)[1]

        result = await make_reconciler(document).sync_card(old)

        assert result.outcome is SyncOutcome.UPDATED
        assert result.action is SyncActionType.UPDATE
        assert result.remote_id == 77
        assert mock_anki_client.upsert_calls[0]["id"] == 77
        assert result.patch == LinePatch(10, f"<!-- 77 {result.content_hash} -->")

    @pytest.mark.asyncio
    async def test_update_after_create_is_offset_by_inserted_line(
        self, make_reconciler
    ) -> None:
        document = MarkdownDocument(MIXED_NOTE)

        report = await make_reconciler(document).reconcile(_cards(document))

        new, old = report.results
        assert new.outcome is SyncOutcome.CREATED
        assert old.outcome is SyncOutcome.UPDATED
        assert old.patch.line == 11
        assert document.get_line(10) == "## Old #card"
        assert document.get_line(11) == f"<!-- 77 {old.content_hash} -->"

    @pytest.mark.asyncio
    async def test_unchanged_card_makes_no_call(
        self, make_reconciler, mock_anki_client
    ) -> None:
        document = MarkdownDocument(
            f"---\ntags: t\ndeck: D\n---\n\n## Q #card\n<!-- 5 {SYNCED_HASH} -->\n\nA\n"
        )

        report = await make_reconciler(document).reconcile(_cards(document))

        assert report.count(SyncOutcome.UNCHANGED) == 1
        assert mock_anki_client.upsert_calls == []
        assert not document.dirty

    @pytest.mark.asyncio
    async def test_failed_card_does_not_stop_the_run(
        self, make_reconciler, mock_anki_client, sample_document
    ) -> None:
        mock_anki_client.fail_call(0, "deck does not exist")
        cards = _cards(sample_document)

        report = await make_reconciler(sample_document).reconcile(cards)

        failed, created = report.results
        assert failed.outcome is SyncOutcome.FAILED
        assert failed.reason == "deck does not exist"
        assert failed.patch is None
        assert cards[0].remote_id is None
        assert cards[0].content_hash is None

        assert created.outcome is SyncOutcome.CREATED
        assert created.patch.line == 13
        assert sample_document.get_line(5) == "## What is a cell? #card"
        assert sample_document.get_line(6) == ""
        assert sample_document.get_line(14) == f"<!-- 1000 {SECOND_HASH} -->"
        assert report.failures == [failed]

    @pytest.mark.asyncio
    async def test_create_without_note_id_fails(
        self, make_reconciler, mock_anki_client, sample_document
    ) -> None:
        mock_anki_client.missing_id_calls.add(0)
        card = _cards(sample_document)[0]

        result = await make_reconciler(sample_document).sync_card(card)

        assert result.outcome is SyncOutcome.FAILED
        assert card.remote_id is None
        assert not sample_document.dirty

    @pytest.mark.asyncio
    async def test_dry_run_plans_without_writing(
        self, make_reconciler, mock_anki_client, sample_document
    ) -> None:
        report = await make_reconciler(sample_document, dry_run=True).reconcile(
            _cards(sample_document)
        )

        assert [r.outcome for r in report.results] == [SyncOutcome.SKIPPED] * 2
        assert [r.action for r in report.results] == [SyncActionType.CREATE] * 2
        assert report.patches == []
        assert mock_anki_client.upsert_calls == []
        assert not sample_document.dirty

    @pytest.mark.asyncio
    async def test_media_urls_reported(self, make_reconciler) -> None:
        document = MarkdownDocument(
            "---\ntags: t\ndeck: D\n---\n\n## Q #card\n\n![cell](img/cell.png)\n"
        )

        (result,) = (await make_reconciler(document).reconcile(_cards(document))).results

        assert result.media == ("img/cell.png",)


class FailingRenderer:
    """Renderer that raises on one chosen call."""

    def __init__(self, fail_on: int):
        self.fail_on = fail_on
        self.calls = 0

    def render(self, md_content: str) -> str:
        self.calls += 1
        if self.calls == self.fail_on:
            raise RuntimeError("renderer failed")
        return md_content


class ReadOnlyOnceDocument(MarkdownDocument):
    """Document whose first line write fails."""

    def __init__(self, text: str):
        super().__init__(text)
        self.failed = False

    def set_line(self, line: int, text: str) -> None:
        if not self.failed:
            self.failed = True
            raise DocumentError(
                "Line is locked", error_code=ErrorCode.DOC_LINE_OUT_OF_RANGE.value
            )
        super().set_line(line, text)


class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_renderer_error_fails_only_that_card(
        self, mock_anki_client, context, sample_document
    ) -> None:
        # Front and back render per card, so call 3 is the second card's front
        reconciler = CardReconciler(
            client=mock_anki_client,
            context=context,
            renderer=FailingRenderer(fail_on=3),
            document=sample_document,
        )

        report = await reconciler.reconcile(_cards(sample_document))

        created, failed = report.results
        assert created.outcome is SyncOutcome.CREATED
        assert failed.outcome is SyncOutcome.FAILED
        assert failed.reason == "renderer failed"
        assert failed.patch is None
        assert len(mock_anki_client.upsert_calls) == 1
        assert sample_document.get_line(6) == f"<!-- 1000 {FIRST_HASH} -->"
        assert sample_document.get_line(14) == "### Name two organelles #card"
        assert sample_document.get_line(15) == ""

    @pytest.mark.asyncio
    async def test_patch_error_fails_card_and_keeps_offsets(
        self, make_reconciler, mock_anki_client, sample_note_content
    ) -> None:
        document = ReadOnlyOnceDocument(sample_note_content)

        report = await make_reconciler(document).reconcile(_cards(document))

        unpatched, created = report.results
        assert unpatched.outcome is SyncOutcome.FAILED
        assert unpatched.remote_id == 1000
        assert unpatched.patch is None
        assert "Line is locked" in unpatched.reason
        assert created.outcome is SyncOutcome.CREATED
        assert created.patch.line == 13
        assert document.get_line(5) == "## What is a cell? #card"
        assert document.get_line(14) == f"<!-- 1001 {SECOND_HASH} -->"

    @pytest.mark.asyncio
    async def test_unexpected_client_error_becomes_failed_result(
        self, make_reconciler, mock_anki_client, sample_document
    ) -> None:
        async def broken_upsert(**kwargs):
            raise ValueError("invalid literal for int() with base 10: 'abc'")

        mock_anki_client.upsert_note = broken_upsert

        report = await make_reconciler(sample_document).reconcile(_cards(sample_document))

        assert report.count(SyncOutcome.FAILED) == 2
        assert report.failures[0].reason.startswith("invalid literal")
        assert not sample_document.dirty
