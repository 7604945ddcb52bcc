"""Pytest configuration and fixtures for the test suite."""

import pytest

from obsidian_card_sync.config import Config, reset_config
from obsidian_card_sync.obsidian.document import MarkdownDocument
from tests.fixtures import MockAnkiClient

SAMPLE_NOTE = """---
tags: biology cells
deck: Biology
---

## What is a cell? #card

The basic unit of life.

## Plain section

Not a card.

### Name two organelles #card

- Nucleus
- Mitochondria
"""


class PassthroughRenderer:
    """Renderer that returns Markdown unchanged, keeping fields predictable."""

    def __init__(self):
        self.rendered: list[str] = []

    def render(self, md_content: str) -> str:
        self.rendered.append(md_content)
        return md_content


@pytest.fixture(autouse=True)
def _reset_config():
    yield
    reset_config()


@pytest.fixture
def mock_anki_client():
    """Provide a mock Anki client for testing."""
    return MockAnkiClient()


@pytest.fixture
def renderer():
    return PassthroughRenderer()


@pytest.fixture
def test_config():
    return Config(
        anki_connect_url="http://localhost:8765",
        anki_note_type="Basic-23794",
        anki_deck_name="Default",
        deck_namespace="all::",
        card_tag="#card",
        log_level="INFO",
    )


@pytest.fixture
def sample_note_content():
    """Note with metadata, two cards, and a section that is not a card."""
    return SAMPLE_NOTE


@pytest.fixture
def sample_document(sample_note_content):
    return MarkdownDocument(sample_note_content)


@pytest.fixture
def sample_note_file(tmp_path, sample_note_content):
    path = tmp_path / "cells.md"
    path.write_text(sample_note_content, encoding="utf-8")
    return path
