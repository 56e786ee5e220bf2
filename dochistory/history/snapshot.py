"""State snapshotter - captures the tracked artifacts of a workspace."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..schema import FileSnapshot, StateSnapshot
from ..workspace import Workspace, format_timestamp, read_text_exact

logger = logging.getLogger(__name__)


def _snapshot_file(path: Path | None) -> FileSnapshot:
    """
    Content of ``path``, or an absent marker if it cannot be read.

    Bytes that are not valid UTF-8 are replaced with U+FFFD, so a restore
    of such a file is not byte-identical.
    """
    if path is None:
        return FileSnapshot.absent()
    try:
        return FileSnapshot(exists=True, content=read_text_exact(path, errors="replace"))
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        logger.debug(f"Snapshot: {path} not present")
        return FileSnapshot.absent()


def latest_draft(workspace: Workspace) -> Path | None:
    """
    Most recent draft: the greatest ``*.md`` file name in drafts/.

    Ordering is lexicographic on the file name, not modification time.
    """
    if not workspace.drafts_dir.is_dir():
        return None
    drafts = sorted(
        (p for p in workspace.drafts_dir.iterdir() if p.suffix == ".md" and p.is_file()),
        key=lambda p: p.name,
        reverse=True,
    )
    return drafts[0] if drafts else None


def extract_status(config_content: str | None) -> str:
    """Document status from raw config.json content; "unknown" if unavailable."""
    if config_content is None:
        return "unknown"
    try:
        data = json.loads(config_content)
    except json.JSONDecodeError:
        return "unknown"
    if not isinstance(data, dict):
        return "unknown"
    status = data.get("status")
    return status if isinstance(status, str) and status else "unknown"


def capture_current_state(workspace: Workspace) -> StateSnapshot:
    """
    Snapshot config.json, outline.md and the latest draft.

    Each file is captured independently; a missing file is recorded as
    ``exists: false`` and never aborts the capture. A config that does not
    parse only degrades ``status`` to "unknown".
    """
    config = _snapshot_file(workspace.config_path)
    outline = _snapshot_file(workspace.outline_path)
    current_draft = _snapshot_file(latest_draft(workspace))

    return StateSnapshot(
        timestamp=format_timestamp(),
        status=extract_status(config.content),
        config=config,
        outline=outline,
        current_draft=current_draft,
    )


__all__ = [
    "latest_draft",
    "extract_status",
    "capture_current_state",
]
