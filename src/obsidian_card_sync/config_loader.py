"""Config loader utilities."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .config_settings import Config
from .error_codes import ErrorCode
from .exceptions import ConfigurationError
from .utils.logging import get_logger

_config: Config | None = None


def _find_config_file(config_path: Path | None) -> Path | None:
    logger = get_logger(__name__)

    candidate_paths: list[Path] = []
    if config_path:
        candidate_paths.append(config_path.expanduser())
    else:
        env_path = os.getenv("OBSIDIAN_CARD_SYNC_CONFIG")
        if env_path:
            candidate_paths.append(Path(env_path).expanduser())
        candidate_paths.append(Path.cwd() / "config.yaml")

    for candidate in candidate_paths:
        if candidate.exists():
            logger.debug("config_file_found", config_path=str(candidate))
            return candidate

    logger.debug(
        "config_file_not_found", searched_paths=[str(p) for p in candidate_paths]
    )
    return None


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from environment, .env, and an optional config.yaml.

    Values in config.yaml take precedence over environment variables.

    Raises:
        ConfigurationError: If the YAML is malformed or a value is invalid
    """
    resolved_path = _find_config_file(config_path)

    yaml_data: dict[str, Any] = {}
    if resolved_path:
        try:
            with open(resolved_path, encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            msg = f"Failed to parse config file: {resolved_path}"
            raise ConfigurationError(
                msg,
                suggestion=(
                    "Check YAML syntax (indentation, colons, quotes). "
                    f"Original error: {e}"
                ),
                error_code=ErrorCode.CFG_YAML_INVALID.value,
                context={"config_path": str(resolved_path)},
            ) from e

        if not isinstance(yaml_data, dict):
            msg = f"Config file must contain a mapping: {resolved_path}"
            raise ConfigurationError(
                msg,
                error_code=ErrorCode.CFG_YAML_INVALID.value,
                context={"config_path": str(resolved_path)},
            )

    try:
        return Config(**yaml_data)
    except ValidationError as e:
        msg = "Invalid configuration"
        raise ConfigurationError(
            msg,
            suggestion=str(e),
            error_code=ErrorCode.CFG_VALUE_INVALID.value,
            context={"config_path": str(resolved_path) if resolved_path else None},
        ) from e


def get_config() -> Config:
    """Return the active configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Config) -> None:
    global _config
    _config = config


def reset_config() -> None:
    """Forget the cached configuration (used by tests)."""
    global _config
    _config = None
