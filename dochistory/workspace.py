"""
Workspace layout and file helpers.

A workspace is one document directory:

    config.json
    outline.md
    drafts/
    .history/
        timeline.jsonl
        checkpoints/<name>.json
        prompts/<name>.md
        prompts/NNN-<slug>.md
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

CONFIG_FILE = "config.json"
OUTLINE_FILE = "outline.md"
DRAFTS_DIR = "drafts"
CURRENT_DRAFT_FILE = "current-draft.md"
HISTORY_DIR = ".history"
TIMELINE_FILE = "timeline.jsonl"
CHECKPOINTS_DIR = "checkpoints"
PROMPTS_DIR = "prompts"


@dataclass(frozen=True)
class Workspace:
    """Paths of one document workspace. Nothing is created on construction."""

    root: Path

    @classmethod
    def resolve(cls, path: str | Path | None = None) -> "Workspace":
        """Workspace at ``path``, or at the current working directory."""
        return cls(root=Path(path) if path else Path.cwd())

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILE

    @property
    def outline_path(self) -> Path:
        return self.root / OUTLINE_FILE

    @property
    def drafts_dir(self) -> Path:
        return self.root / DRAFTS_DIR

    @property
    def history_dir(self) -> Path:
        return self.root / HISTORY_DIR

    @property
    def timeline_path(self) -> Path:
        return self.history_dir / TIMELINE_FILE

    @property
    def checkpoints_dir(self) -> Path:
        return self.history_dir / CHECKPOINTS_DIR

    @property
    def prompts_dir(self) -> Path:
        return self.history_dir / PROMPTS_DIR

    def checkpoint_path(self, name: str) -> Path:
        return self.checkpoints_dir / f"{name}.json"

    def checkpoint_prompt_path(self, name: str) -> Path:
        return self.prompts_dir / f"{name}.md"

    def relative(self, path: Path) -> str:
        """Workspace-relative POSIX path for display and event payloads."""
        return path.relative_to(self.root).as_posix()


def format_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-01-02T03:04:05.678Z."""
    moment = moment or datetime.now(timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def read_text_exact(path: Path, errors: str = "strict") -> str:
    """
    Read a UTF-8 file without newline translation.

    ``errors`` is passed to the decoder; "replace" turns undecodable bytes
    into U+FFFD instead of raising UnicodeDecodeError.
    """
    with open(path, encoding="utf-8", errors=errors, newline="") as f:
        return f.read()


def atomic_write_text(path: Path, content: str) -> None:
    """
    Write ``content`` to ``path`` via a temp file in the same directory.

    Uses write-to-temp-then-rename so readers never see a partial file.
    No newline translation is applied.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(
        suffix=".tmp",
        prefix=f".{path.name}_",
        dir=path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        # Atomic rename
        os.rename(temp_path, path)
    except Exception:
        # Clean up temp file on error
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


__all__ = [
    "CONFIG_FILE",
    "OUTLINE_FILE",
    "DRAFTS_DIR",
    "CURRENT_DRAFT_FILE",
    "HISTORY_DIR",
    "TIMELINE_FILE",
    "CHECKPOINTS_DIR",
    "PROMPTS_DIR",
    "Workspace",
    "format_timestamp",
    "read_text_exact",
    "atomic_write_text",
]
