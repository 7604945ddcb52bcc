"""File I/O utilities for safe and atomic operations."""

import os
import tempfile
from collections.abc import Generator
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import Any

from obsidian_card_sync.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def atomic_write(
    path: str | Path,
    encoding: str = "utf-8",
    newline: str | None = "",
) -> Generator[Any]:
    """
    Context manager for atomic text file writing.

    Writes to a temporary file in the same directory, then renames it over
    the target, so the document is never left half written.

    Args:
        path: Target file path
        encoding: File encoding
        newline: Passed to open(); "" writes line endings untranslated

    Yields:
        File object opened for writing
    """
    path = Path(path)
    parent = path.parent
    parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path = tempfile.mkstemp(dir=parent, prefix=f".tmp_{path.name}_", text=True)
    os.close(temp_fd)
    temp_path_obj = Path(temp_path)

    try:
        with open(temp_path, "w", encoding=encoding, newline=newline) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())

        temp_path_obj.replace(path)
    except Exception as e:
        with suppress(OSError):
            temp_path_obj.unlink()
        logger.error("atomic_write_failed", path=str(path), error=str(e))
        raise
