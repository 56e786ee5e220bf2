"""dochistory: history, checkpoints and versioning for document workspaces.

Every workspace keeps an append-only timeline (.history/timeline.jsonl),
named checkpoints that snapshot config.json, outline.md and the latest
draft, and a MAJOR.MINOR version with a one-way draft -> published step.

Layers:
- History: timeline log, state snapshots, checkpoint store
- Version: version numbering and history
- Narrative: conversational input captured as numbered prompt files
- Skills: tool registry and /history slash commands
"""

__version__ = "0.1.0"

# History Layer
from .history import (
    CheckpointStore,
    RestoreResult,
    TimelineLog,
    TimelineReadResult,
    capture_current_state,
    log_event,
    read_timeline,
)

# Version Layer
from .version import VersionManager, VersionPair, parse_version

# Narrative
from .narrative import add_narrative

# Types, Config & Errors
from .config import HistoryConfig, default_history_config
from .errors import (
    CheckpointNotFoundError,
    ConfigNotFoundError,
    CorruptCheckpointError,
    DocHistoryError,
    InvalidCheckpointNameError,
    InvalidTimestampError,
    InvalidVersionError,
    MalformedTimelineError,
)
from .schema import (
    CheckpointMetadata,
    EventType,
    FileSnapshot,
    StateSnapshot,
    TimelineEvent,
    VersionHistoryEntry,
)
from .workspace import Workspace, format_timestamp

__all__ = [
    # History
    "CheckpointStore",
    "RestoreResult",
    "TimelineLog",
    "TimelineReadResult",
    "capture_current_state",
    "log_event",
    "read_timeline",
    # Version
    "VersionManager",
    "VersionPair",
    "parse_version",
    # Narrative
    "add_narrative",
    # Config
    "HistoryConfig",
    "default_history_config",
    # Errors
    "DocHistoryError",
    "CheckpointNotFoundError",
    "ConfigNotFoundError",
    "CorruptCheckpointError",
    "InvalidCheckpointNameError",
    "InvalidTimestampError",
    "InvalidVersionError",
    "MalformedTimelineError",
    # Types
    "CheckpointMetadata",
    "EventType",
    "FileSnapshot",
    "StateSnapshot",
    "TimelineEvent",
    "VersionHistoryEntry",
    "Workspace",
    "format_timestamp",
]
