"""The ``<!-- <noteId> <hash> -->`` comment persisted under each card heading."""

import re

_STATE_COMMENT_RE = re.compile(r"^<!--\s*(\d+)\s+([0-9a-fA-F]+)\s*-->$")


def parse_state_comment(value: str) -> tuple[int, str] | None:
    """Return (note id, hash), or None if the comment has another form."""
    match = _STATE_COMMENT_RE.match(value.strip())
    if not match:
        return None
    return int(match.group(1)), match.group(2)


def format_state_comment(remote_id: int, content_hash: str) -> str:
    return f"<!-- {remote_id} {content_hash} -->"


def format_heading(depth: int, text: str) -> str:
    return f"{'#' * depth} {text}"
