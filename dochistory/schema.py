"""
Persisted record models for document history.

Pydantic models for timeline.jsonl lines, checkpoint JSON files and the
version-relevant part of config.json. Field names are snake_case in Python
and camelCase on disk.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Accepts a trailing "Z". Naive values are taken as UTC.

    Raises:
        ValueError: If the value is not ISO-8601
    """
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class _Record(BaseModel):
    """Base for on-disk records: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self, indent: int | None = None) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)


class EventType(str, Enum):
    """Every event type the timeline accepts."""

    DOCUMENT_CREATED = "document_created"
    OUTLINE_CREATED = "outline_created"
    DRAFT_CREATED = "draft_created"
    REVISION_ADDED = "revision_added"
    EVIDENCE_ADDED = "evidence_added"
    EXPORTED = "exported"
    NARRATIVE_CHUNK = "narrative_chunk"
    CHECKPOINT_CREATED = "checkpoint_created"
    CHECKPOINT_RESTORED = "checkpoint_restored"
    VERSION_INCREMENTED = "version_incremented"
    VERSION_PUBLISHED = "version_published"


# -----------------------------------------------------------------------------
# Timeline events
# -----------------------------------------------------------------------------


class _Payload(_Record):
    """Typed event payload; keys added by other writers are kept."""

    model_config = ConfigDict(extra="allow")


class CheckpointCreatedData(_Payload):
    name: str
    message: str
    snapshot_path: str
    prompt_path: str | None = None


class CheckpointRestoredData(_Payload):
    checkpoint: str
    restored_from: str
    restored_files: list[str] = Field(default_factory=list)


class VersionChangeData(_Payload):
    old_version: str
    new_version: str
    increment_type: Literal["minor", "major"]
    published: bool
    draft_path: str | None = None
    notes: str | None = None


class NarrativeChunkData(_Payload):
    content: str
    source: Literal["typing", "voice", "paste", "import"] | None = None
    context: str | None = None
    speaker: Literal["user", "assistant", "system"] = "user"
    prompt_path: str | None = None


class _EventBase(_Record):
    timestamp: str

    @field_validator("timestamp")
    @classmethod
    def _check_timestamp(cls, value: str) -> str:
        # Stored verbatim; only checked for parseability
        parse_timestamp(value)
        return value

    @property
    def instant(self) -> datetime:
        return parse_timestamp(self.timestamp)


class LifecycleEvent(_EventBase):
    """Event written by document tooling outside the history subsystem."""

    type: Literal[
        "document_created",
        "outline_created",
        "draft_created",
        "revision_added",
        "evidence_added",
        "exported",
    ]
    data: dict[str, Any] = Field(default_factory=dict)


class NarrativeChunkEvent(_EventBase):
    type: Literal["narrative_chunk"] = "narrative_chunk"
    data: NarrativeChunkData


class CheckpointCreatedEvent(_EventBase):
    type: Literal["checkpoint_created"] = "checkpoint_created"
    data: CheckpointCreatedData


class CheckpointRestoredEvent(_EventBase):
    type: Literal["checkpoint_restored"] = "checkpoint_restored"
    data: CheckpointRestoredData


class VersionEvent(_EventBase):
    """Version bump; ``version_published`` marks the 0.x -> 1.0 transition."""

    type: Literal["version_incremented", "version_published"]
    data: VersionChangeData


TimelineEvent = Annotated[
    Union[
        LifecycleEvent,
        NarrativeChunkEvent,
        CheckpointCreatedEvent,
        CheckpointRestoredEvent,
        VersionEvent,
    ],
    Field(discriminator="type"),
]

TIMELINE_EVENT_ADAPTER: TypeAdapter[TimelineEvent] = TypeAdapter(TimelineEvent)


def parse_event_line(line: str) -> TimelineEvent:
    """Parse one timeline.jsonl line. Raises pydantic.ValidationError."""
    return TIMELINE_EVENT_ADAPTER.validate_json(line)


# -----------------------------------------------------------------------------
# Snapshots and checkpoints
# -----------------------------------------------------------------------------


class FileSnapshot(_Record):
    """Presence and exact content of one tracked file."""

    exists: bool
    content: str | None = None

    @classmethod
    def absent(cls) -> "FileSnapshot":
        return cls(exists=False)


class StateSnapshot(_Record):
    timestamp: str
    status: str = "unknown"
    config: FileSnapshot | None = None
    outline: FileSnapshot | None = None
    current_draft: FileSnapshot | None = None


class CheckpointContext(_Record):
    files_changed: list[str] = Field(default_factory=list)
    events_since_last_checkpoint: int = Field(default=0, ge=0)


class CheckpointMetadata(_Record):
    """Contents of .history/checkpoints/<name>.json."""

    name: str
    timestamp: str
    message: str
    status: str = "unknown"
    snapshot: StateSnapshot
    context: CheckpointContext = Field(default_factory=CheckpointContext)


# -----------------------------------------------------------------------------
# Versioning
# -----------------------------------------------------------------------------


class VersionHistoryEntry(_Record):
    version: str
    timestamp: str
    draft_path: str | None = None
    notes: str | None = None


class DocumentConfig(_Record):
    """
    Version-relevant view of config.json.

    Unknown keys (title, status, ...) are kept and written back untouched.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    version: str = "0.1"
    published: bool = False
    version_history: list[VersionHistoryEntry] = Field(default_factory=list)
    status: str | None = None
    updated_at: str | None = None


__all__ = [
    "parse_timestamp",
    "EventType",
    "CheckpointCreatedData",
    "CheckpointRestoredData",
    "VersionChangeData",
    "NarrativeChunkData",
    "LifecycleEvent",
    "NarrativeChunkEvent",
    "CheckpointCreatedEvent",
    "CheckpointRestoredEvent",
    "VersionEvent",
    "TimelineEvent",
    "TIMELINE_EVENT_ADAPTER",
    "parse_event_line",
    "FileSnapshot",
    "StateSnapshot",
    "CheckpointContext",
    "CheckpointMetadata",
    "VersionHistoryEntry",
    "DocumentConfig",
]
