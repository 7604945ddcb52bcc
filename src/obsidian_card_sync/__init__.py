"""Sync #card sections of Markdown notes to Anki via AnkiConnect."""

__version__ = "0.1.0"
