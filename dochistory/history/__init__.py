"""History Layer - timeline, snapshots and checkpoints of a workspace."""

from .checkpoint import (
    CheckpointStore,
    CreatedCheckpoint,
    RestoreResult,
    list_workspace_files,
    validate_checkpoint_name,
)
from .snapshot import capture_current_state, extract_status, latest_draft
from .timeline import (
    SkippedLine,
    TimelineLog,
    TimelineReadResult,
    filter_events,
    log_event,
    read_timeline,
)

__all__ = [
    "CheckpointStore",
    "CreatedCheckpoint",
    "RestoreResult",
    "list_workspace_files",
    "validate_checkpoint_name",
    "capture_current_state",
    "extract_status",
    "latest_draft",
    "SkippedLine",
    "TimelineLog",
    "TimelineReadResult",
    "filter_events",
    "log_event",
    "read_timeline",
]
