"""Tests for logging configuration, console filtering and rendering."""

import logging

import pytest

from obsidian_card_sync.utils.logging import (
    USER_FACING_EVENTS,
    UserFacingConsoleFilter,
    UserFriendlyConsoleRenderer,
    configure_logging,
    get_logger,
)


def _record(msg, level=logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("test", level, __file__, 1, msg, None, None)


@pytest.fixture
def restore_logging():
    yield
    configure_logging()


class TestUserFacingConsoleFilter:
    @pytest.mark.parametrize("event", sorted(USER_FACING_EVENTS))
    def test_user_facing_events_pass(self, event) -> None:
        assert UserFacingConsoleFilter().filter(_record({"event": event}))

    def test_internal_events_are_hidden(self) -> None:
        assert not UserFacingConsoleFilter().filter(_record({"event": "document_line_set"}))

    def test_errors_always_pass(self) -> None:
        record = _record({"event": "card_patch_failed"}, level=logging.ERROR)

        assert UserFacingConsoleFilter().filter(record)

    def test_verbose_passes_everything(self) -> None:
        record = _record({"event": "document_line_set"}, level=logging.DEBUG)

        assert UserFacingConsoleFilter(verbose=True).filter(record)

    def test_plain_string_messages(self) -> None:
        assert UserFacingConsoleFilter().filter(_record("sync_completed in 2s"))
        assert not UserFacingConsoleFilter().filter(_record("httpx request sent"))


class TestUserFriendlyConsoleRenderer:
    def test_sync_completed_summary(self) -> None:
        rendered = UserFriendlyConsoleRenderer()(
            None,
            "info",
            {"event": "sync_completed", "created": 2, "updated": 1, "failed": 1},
        )

        assert rendered == "Sync completed: 2 created, 1 updated, 0 unchanged, 1 failed"

    def test_card_failure_names_card_and_error(self) -> None:
        rendered = UserFriendlyConsoleRenderer()(
            None,
            "warning",
            {"event": "card_sync_failed", "card": "Q #card", "error": "renderer failed"},
        )

        assert rendered == "WARNING: card 'Q #card' failed to sync: renderer failed"

    def test_other_errors_show_error_text(self) -> None:
        rendered = UserFriendlyConsoleRenderer()(
            None,
            "error",
            {"event": "card_patch_failed", "level": "error", "error": "Line is locked"},
        )

        assert rendered == "ERROR: Line is locked"


class TestConfigureLogging:
    def test_log_dir_gets_json_and_error_logs(self, tmp_path, restore_logging) -> None:
        log_dir = tmp_path / "logs"
        configure_logging(log_level="DEBUG", log_dir=log_dir)

        logger = get_logger("test")
        logger.info("card_synced", card="Q #card", note_id=1000)
        logger.error("card_patch_failed", card="Q #card", error="Line is locked")
        for handler in logging.getLogger().handlers:
            handler.flush()

        main_log = (log_dir / "obsidian-card-sync.log").read_text(encoding="utf-8")
        assert '"event": "card_synced"' in main_log
        assert '"event": "card_patch_failed"' in main_log

        errors = (log_dir / "errors.log").read_text(encoding="utf-8")
        assert "card_patch_failed" in errors
        assert "card_synced" not in errors

    def test_reconfigure_replaces_handlers(self, tmp_path, restore_logging) -> None:
        configure_logging(log_dir=tmp_path)
        count = len(logging.getLogger().handlers)

        configure_logging(log_dir=tmp_path)

        assert len(logging.getLogger().handlers) == count
