"""
Version management for documents.

User-controlled version numbering:
- 0.x = draft versions (minor increments)
- 0.x -> 1.0 = publication, a one-way transition
- 1.x and later = maintenance and major updates after publication
"""

from __future__ import annotations

import json
import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, NamedTuple

from pydantic import ValidationError

from ..errors import ConfigNotFoundError, DocHistoryError, InvalidVersionError
from ..history.timeline import TimelineLog
from ..schema import DocumentConfig, VersionChangeData, VersionEvent, VersionHistoryEntry
from ..workspace import (
    CURRENT_DRAFT_FILE,
    Workspace,
    atomic_write_text,
    format_timestamp,
    read_text_exact,
)

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"^v?(\d+)\.(\d+)$")

IncrementType = Literal["minor", "major"]


class VersionPair(NamedTuple):
    """(major, minor); major 0 means unpublished draft."""

    major: int
    minor: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"

    @property
    def published(self) -> bool:
        return self.major >= 1

    def bump(self, increment: IncrementType) -> "VersionPair":
        if increment == "major":
            return VersionPair(self.major + 1, 0)
        if increment == "minor":
            return VersionPair(self.major, self.minor + 1)
        raise ValueError(f"Unknown increment type: {increment}")


def parse_version(version: object) -> VersionPair:
    """
    Parse "1.2" or "v1.2".

    Raises:
        InvalidVersionError: For anything else
    """
    match = VERSION_PATTERN.match(version) if isinstance(version, str) else None
    if not match:
        raise InvalidVersionError(version)
    return VersionPair(int(match.group(1)), int(match.group(2)))


def format_version(major: int, minor: int) -> str:
    return str(VersionPair(major, minor))


@dataclass
class VersionIncrement:
    """Outcome of VersionManager.increment."""

    old_version: str
    new_version: str
    increment_type: IncrementType
    event_type: str  # "version_incremented" | "version_published"
    published: bool
    draft_path: str | None
    notes: str | None

    @property
    def is_publication(self) -> bool:
        return self.event_type == "version_published"


class VersionManager:
    """
    Reads and bumps the version recorded in a workspace's config.json.

    Config keys unrelated to versioning are preserved on write.
    """

    def __init__(self, workspace: Workspace):
        self.workspace = workspace
        self.timeline = TimelineLog(workspace)

    def _load_raw(self) -> dict:
        path = self.workspace.config_path
        try:
            content = read_text_exact(path)
        except FileNotFoundError as e:
            raise ConfigNotFoundError(path) from e
        except UnicodeDecodeError as e:
            raise DocHistoryError(f"Document config is not valid UTF-8: {path}: {e}") from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise DocHistoryError(f"Document config is not valid JSON: {path}: {e}") from e
        if not isinstance(data, dict):
            raise DocHistoryError(f"Document config must be a JSON object: {path}")
        return data

    def _validate(self, data: dict) -> DocumentConfig:
        try:
            return DocumentConfig.model_validate(data)
        except ValidationError as e:
            raise DocHistoryError(f"Document config is invalid: {self.workspace.config_path}: {e}") from e

    def load_config(self) -> DocumentConfig:
        """
        Read config.json.

        Raises:
            ConfigNotFoundError: If the file is missing
            DocHistoryError: If it is not a JSON object
        """
        return self._validate(self._load_raw())

    def current(self) -> VersionPair:
        return parse_version(self.load_config().version)

    def increment(
        self,
        increment_type: IncrementType,
        notes: str | None = None,
        save_draft: bool = True,
    ) -> VersionIncrement:
        """
        Bump the document version.

        minor: (M, m) -> (M, m+1). major: (M, m) -> (M+1, 0); from major 0
        this is the publication event.

        Args:
            increment_type: "minor" or "major"
            notes: Free-form notes stored with the history entry
            save_draft: Archive the current draft as drafts/draft-v<old>.md

        Returns:
            VersionIncrement describing the change
        """
        raw = self._load_raw()
        config = self._validate(raw)
        current = parse_version(config.version)
        new = current.bump(increment_type)

        if increment_type == "major" and current.major == 0:
            event_type = "version_published"
        else:
            event_type = "version_incremented"

        timestamp = format_timestamp()

        draft_path = None
        if save_draft:
            # Archived under the old version: it is the content being superseded
            draft_path = self._archive_draft(str(current))

        entry = VersionHistoryEntry(
            version=str(new),
            timestamp=timestamp,
            draft_path=draft_path,
            notes=notes,
        )
        history = [*config.version_history, entry]

        # Only the version fields change; every other key is written back as read
        raw["version"] = str(new)
        raw["published"] = new.published
        raw["versionHistory"] = [e.model_dump(mode="json", by_alias=True, exclude_none=True) for e in history]
        raw["updatedAt"] = timestamp
        atomic_write_text(self.workspace.config_path, json.dumps(raw, indent=2, ensure_ascii=False) + "\n")

        self.timeline.append(
            VersionEvent(
                timestamp=timestamp,
                type=event_type,
                data=VersionChangeData(
                    old_version=str(current),
                    new_version=str(new),
                    increment_type=increment_type,
                    published=new.published,
                    draft_path=draft_path,
                    notes=notes,
                ),
            )
        )

        logger.info(f"Version {current} -> {new} ({event_type}) in {self.workspace.root}")
        return VersionIncrement(
            old_version=str(current),
            new_version=str(new),
            increment_type=increment_type,
            event_type=event_type,
            published=new.published,
            draft_path=draft_path,
            notes=notes,
        )

    def history(self) -> list[VersionHistoryEntry]:
        return list(self.load_config().version_history)

    def _current_draft_source(self) -> Path | None:
        for candidate in (
            self.workspace.drafts_dir / CURRENT_DRAFT_FILE,
            self.workspace.root / CURRENT_DRAFT_FILE,
        ):
            if candidate.is_file():
                return candidate
        return None

    def _archive_draft(self, version: str) -> str | None:
        """Copy the current draft to drafts/draft-v<version>.md; None if there is none."""
        source = self._current_draft_source()
        if source is None:
            return None

        target = self.workspace.drafts_dir / f"draft-v{version}.md"
        self.workspace.drafts_dir.mkdir(parents=True, exist_ok=True)
        try:
            shutil.copyfile(source, target)
        except FileNotFoundError:
            # Removed between the probe and the copy
            return None
        return self.workspace.relative(target)


__all__ = [
    "VERSION_PATTERN",
    "IncrementType",
    "VersionPair",
    "parse_version",
    "format_version",
    "VersionIncrement",
    "VersionManager",
]
