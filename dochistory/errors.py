"""Exceptions raised by the history, checkpoint and version operations."""

from __future__ import annotations

from pathlib import Path


class DocHistoryError(Exception):
    """Base class for every error this package raises on purpose."""


class CheckpointNotFoundError(DocHistoryError):
    """Raised when a named checkpoint has no file on disk."""

    def __init__(self, name: str, path: Path):
        self.name = name
        self.path = path
        super().__init__(f"Checkpoint not found: {name} ({path})")


class CorruptCheckpointError(DocHistoryError):
    """Raised when a checkpoint file exists but cannot be parsed."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Checkpoint {name} is unreadable: {reason}")


class InvalidCheckpointNameError(DocHistoryError):
    """Raised when a checkpoint name cannot be used as a file name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Invalid checkpoint name: {name!r}. Use letters, digits, '-', '_' or '.' "
            "(kebab-case recommended)"
        )


class ConfigNotFoundError(DocHistoryError):
    """Raised when config.json is missing for a version operation."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Document config not found: {path}")


class InvalidVersionError(DocHistoryError):
    """Raised for version strings that are not MAJOR.MINOR."""

    def __init__(self, version: object):
        self.version = version
        super().__init__(
            f"Invalid version format: {version}. Expected format: v0.1 or 1.0"
        )


class MalformedTimelineError(DocHistoryError):
    """Raised in strict mode when a timeline line cannot be parsed."""

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Malformed timeline line {line_number}: {reason}")


class InvalidTimestampError(DocHistoryError):
    """Raised when a caller-supplied timestamp is not ISO-8601."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid timestamp: {value!r}. Expected ISO-8601")


__all__ = [
    "DocHistoryError",
    "CheckpointNotFoundError",
    "CorruptCheckpointError",
    "InvalidCheckpointNameError",
    "ConfigNotFoundError",
    "InvalidVersionError",
    "MalformedTimelineError",
    "InvalidTimestampError",
]
