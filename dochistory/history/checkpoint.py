"""
CheckpointStore - named, restorable snapshots of a document workspace.

Each checkpoint is one JSON file (.history/checkpoints/<name>.json) plus an
optional markdown rendering (.history/prompts/<name>.md). Creating a
checkpoint with an existing name overwrites it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from ..config import HistoryConfig
from ..errors import (
    CheckpointNotFoundError,
    CorruptCheckpointError,
    InvalidCheckpointNameError,
)
from ..schema import (
    CheckpointContext,
    CheckpointCreatedData,
    CheckpointCreatedEvent,
    CheckpointMetadata,
    CheckpointRestoredData,
    CheckpointRestoredEvent,
)
from ..workspace import Workspace, atomic_write_text, format_timestamp, read_text_exact
from .render import render_checkpoint_prompt
from .snapshot import capture_current_state
from .timeline import TimelineLog

logger = logging.getLogger(__name__)

CHECKPOINT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")

TRACKED_SUFFIXES = (".md", ".json")


def validate_checkpoint_name(name: str) -> str:
    """Return ``name`` if it is safe as a file stem, else raise."""
    if not CHECKPOINT_NAME_PATTERN.match(name or "") or ".." in name:
        raise InvalidCheckpointNameError(name)
    return name


def list_workspace_files(workspace: Workspace) -> list[str]:
    """Sorted names of the .md/.json files directly in the workspace root."""
    if not workspace.root.is_dir():
        return []
    return sorted(
        p.name
        for p in workspace.root.iterdir()
        if p.is_file() and p.suffix in TRACKED_SUFFIXES
    )


@dataclass
class CreatedCheckpoint:
    """Outcome of CheckpointStore.create."""

    metadata: CheckpointMetadata
    checkpoint_path: Path
    prompt_path: Path | None


@dataclass
class RestoreResult:
    """Outcome of CheckpointStore.restore."""

    name: str
    restored_from: str  # original checkpoint timestamp
    status: str
    restored_files: list[str] = field(default_factory=list)  # workspace-relative
    skipped: list[str] = field(default_factory=list)  # artifacts absent in the snapshot


class CheckpointStore:
    """
    Create, list, show and restore checkpoints of one workspace.

    Every mutating operation ends by appending one event to the timeline.
    There is no locking; one process per workspace is assumed.
    """

    def __init__(self, workspace: Workspace, config: HistoryConfig | None = None):
        self.workspace = workspace
        self.config = config or HistoryConfig()
        self.timeline = TimelineLog(workspace, self.config)

    def create(self, name: str, message: str, capture_prompt: bool = True) -> CreatedCheckpoint:
        """
        Snapshot the workspace under ``name``.

        Args:
            name: Checkpoint name (kebab-case); overwrites an existing one
            message: Why the checkpoint was taken
            capture_prompt: Also write the markdown rendering to prompts/

        Returns:
            CreatedCheckpoint with the metadata and written paths
        """
        validate_checkpoint_name(name)
        self.workspace.checkpoints_dir.mkdir(parents=True, exist_ok=True)

        snapshot = capture_current_state(self.workspace)
        metadata = CheckpointMetadata(
            name=name,
            timestamp=snapshot.timestamp,
            message=message,
            status=snapshot.status,
            snapshot=snapshot,
            context=CheckpointContext(
                files_changed=list_workspace_files(self.workspace),
                events_since_last_checkpoint=self.timeline.count_since_last_checkpoint(),
            ),
        )

        checkpoint_path = self.workspace.checkpoint_path(name)
        atomic_write_text(checkpoint_path, metadata.to_json(indent=2))

        prompt_path = None
        if capture_prompt:
            prompt_path = self.workspace.checkpoint_prompt_path(name)
            limit = self.config.recent_events_limit
            recent = self.timeline.events()[-limit:] if limit > 0 else []
            atomic_write_text(
                prompt_path,
                render_checkpoint_prompt(metadata, recent, self.config.draft_preview_chars),
            )

        self.timeline.append(
            CheckpointCreatedEvent(
                timestamp=snapshot.timestamp,
                data=CheckpointCreatedData(
                    name=name,
                    message=message,
                    snapshot_path=self.workspace.relative(checkpoint_path),
                    prompt_path=self.workspace.relative(prompt_path) if prompt_path else None,
                ),
            )
        )

        logger.info(f"Checkpoint {name} created in {self.workspace.root}")
        return CreatedCheckpoint(metadata, checkpoint_path, prompt_path)

    def list(self) -> list[CheckpointMetadata]:
        """
        All checkpoints, oldest first.

        A missing checkpoints directory means no checkpoints. Unreadable
        checkpoint files are logged and left out.
        """
        directory = self.workspace.checkpoints_dir
        if not directory.is_dir():
            return []

        checkpoints = []
        for path in directory.glob("*.json"):
            if not path.is_file():
                continue
            try:
                checkpoints.append(self._parse(path.stem, self._read(path.stem, path)))
            except CorruptCheckpointError as e:
                logger.warning(f"Skipping checkpoint file {path}: {e}")
        checkpoints.sort(key=lambda c: (c.timestamp, c.name))
        return checkpoints

    def load(self, name: str) -> CheckpointMetadata:
        """
        Read one checkpoint.

        Raises:
            CheckpointNotFoundError: If no checkpoint file exists for ``name``
            CorruptCheckpointError: If the file cannot be parsed
        """
        validate_checkpoint_name(name)
        path = self.workspace.checkpoint_path(name)
        try:
            content = self._read(name, path)
        except FileNotFoundError as e:
            raise CheckpointNotFoundError(name, path) from e
        return self._parse(name, content)

    def restore(self, name: str) -> RestoreResult:
        """
        Write a checkpoint's captured artifacts back into the workspace.

        Artifacts recorded as present overwrite the live files; artifacts
        recorded as absent are left alone. The draft goes to a new file,
        drafts/restored-from-<name>.md. Each file is replaced atomically, but
        the set of files is not: a failure midway leaves a partial restore.
        """
        checkpoint = self.load(name)
        snapshot = checkpoint.snapshot
        result = RestoreResult(
            name=name,
            restored_from=checkpoint.timestamp,
            status=checkpoint.status,
        )

        targets = [
            ("config", snapshot.config, self.workspace.config_path),
            ("outline", snapshot.outline, self.workspace.outline_path),
            (
                "currentDraft",
                snapshot.current_draft,
                self.workspace.drafts_dir / f"restored-from-{name}.md",
            ),
        ]
        for label, file_snapshot, target in targets:
            if file_snapshot is None or not file_snapshot.exists:
                result.skipped.append(label)
                continue
            atomic_write_text(target, file_snapshot.content or "")
            result.restored_files.append(self.workspace.relative(target))

        self.timeline.append(
            CheckpointRestoredEvent(
                timestamp=format_timestamp(),
                data=CheckpointRestoredData(
                    checkpoint=name,
                    restored_from=checkpoint.timestamp,
                    restored_files=result.restored_files,
                ),
            )
        )

        logger.info(f"Checkpoint {name} restored in {self.workspace.root}: {result.restored_files}")
        return result

    def _read(self, name: str, path: Path) -> str:
        try:
            return read_text_exact(path)
        except UnicodeDecodeError as e:
            raise CorruptCheckpointError(name, f"not valid UTF-8: {e}") from e

    def _parse(self, name: str, content: str) -> CheckpointMetadata:
        try:
            return CheckpointMetadata.model_validate_json(content)
        except ValidationError as e:
            raise CorruptCheckpointError(name, str(e.errors()[0]["msg"]) if e.errors() else str(e)) from e


__all__ = [
    "CHECKPOINT_NAME_PATTERN",
    "validate_checkpoint_name",
    "list_workspace_files",
    "CreatedCheckpoint",
    "RestoreResult",
    "CheckpointStore",
]
