"""Settings model for the card sync service."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARN", "WARNING", "ERROR", "CRITICAL"}


class Config(BaseSettings):
    """Service configuration using pydantic-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Anki settings
    anki_connect_url: str = Field(
        default="http://127.0.0.1:8765", description="AnkiConnect URL"
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="AnkiConnect request timeout in seconds"
    )
    anki_note_type: str = Field(
        default="Basic-23794", description="Anki note type used for every card"
    )
    anki_deck_name: str = Field(
        default="Default",
        description="Deck used when the document has no metadata heading",
    )
    deck_namespace: str = Field(
        default="all::", description="Prefix applied to the document's deck name"
    )

    # Document conventions
    card_tag: str = Field(
        default="#card", description="Heading marker that starts a card"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_dir: Path | None = Field(
        default=None, description="Directory for JSON log files (disabled if unset)"
    )

    @field_validator("anki_connect_url", "anki_note_type", "card_tag")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty strings for required settings."""
        if not v or not v.strip():
            msg = "Value must not be empty"
            raise ValueError(msg)
        return v.strip()

    @field_validator("anki_connect_url")
    @classmethod
    def validate_url_scheme(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            msg = f"anki_connect_url must start with http:// or https://, got {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _VALID_LOG_LEVELS:
            msg = f"Invalid log level {v!r}, expected one of {sorted(_VALID_LOG_LEVELS)}"
            raise ValueError(msg)
        return level

    @field_validator("log_dir", mode="before")
    @classmethod
    def parse_log_dir(cls, v: Any) -> Path | None:
        """Convert string to Path."""
        if v is None or v == "":
            return None
        if isinstance(v, (str, Path)):
            return Path(v).expanduser()
        msg = f"log_dir must be string or Path, got {type(v).__name__}"
        raise ValueError(msg)
