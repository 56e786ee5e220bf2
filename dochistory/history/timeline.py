"""TimelineLog - append-only JSONL event log for a document workspace."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from ..config import HistoryConfig
from ..errors import InvalidTimestampError, MalformedTimelineError
from ..schema import EventType, TimelineEvent, parse_event_line, parse_timestamp
from ..workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass
class SkippedLine:
    """A timeline line that could not be parsed."""

    line_number: int  # 1-based
    reason: str


@dataclass
class TimelineReadResult:
    """Events read from the log plus the lines that were skipped."""

    events: list[TimelineEvent] = field(default_factory=list)
    skipped_lines: list[SkippedLine] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_lines)


class TimelineLog:
    """
    JSONL-based event log for one workspace.

    One file per workspace: <workspace>/.history/timeline.jsonl
    Human-readable. Append-only. No compaction.

    Order is the order of lines in the file; timestamps are not re-sorted.
    """

    def __init__(self, workspace: Workspace, config: HistoryConfig | None = None):
        self.workspace = workspace
        self.config = config or HistoryConfig()

    @property
    def path(self) -> Path:
        return self.workspace.timeline_path

    def append(self, event: TimelineEvent) -> None:
        """
        Append one event as a single JSON line.

        I/O errors propagate to the caller.
        """
        self.workspace.history_dir.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(event.to_json() + "\n")

    def read(self) -> TimelineReadResult:
        """
        Read every event in append order.

        A missing log file is an empty timeline. Blank lines are ignored.
        Malformed lines are skipped with a warning, or raise
        MalformedTimelineError when strict_timeline is set.
        """
        result = TimelineReadResult()
        if not self.path.exists():
            return result

        # Partial writes from a crashed process may leave invalid UTF-8
        with open(self.path, encoding="utf-8", errors="replace") as f:
            for line_number, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    result.events.append(parse_event_line(line))
                except ValidationError as e:
                    reason = _first_error(e)
                    if self.config.strict_timeline:
                        raise MalformedTimelineError(line_number, reason) from e
                    logger.warning(f"Skipping malformed timeline line {line_number} in {self.path}: {reason}")
                    result.skipped_lines.append(SkippedLine(line_number, reason))

        return result

    def events(self) -> list[TimelineEvent]:
        """Shortcut for ``read().events``."""
        return self.read().events

    def count_since_last_checkpoint(self) -> int:
        """
        Count events strictly after the most recent checkpoint_created event.

        Equals the full event count when no checkpoint was ever created.
        """
        events = self.events()
        for index in range(len(events) - 1, -1, -1):
            if events[index].type == EventType.CHECKPOINT_CREATED.value:
                return len(events) - index - 1
        return len(events)

    def query(
        self,
        since: str | None = None,
        event_type: str | None = None,
        limit: int | None = None,
    ) -> list[TimelineEvent]:
        """
        Filter the timeline.

        Filters apply in order: timestamp >= since, exact type match, then
        the last ``limit`` of what remains.

        Raises:
            InvalidTimestampError: If ``since`` is not ISO-8601
        """
        return filter_events(self.events(), since, event_type, limit)


def filter_events(
    events: list[TimelineEvent],
    since: str | None = None,
    event_type: str | None = None,
    limit: int | None = None,
) -> list[TimelineEvent]:
    """Apply the since / type / limit filters, in that order."""
    if since:
        since_instant = _parse_since(since)
        events = [e for e in events if e.instant >= since_instant]

    if event_type:
        events = [e for e in events if e.type == event_type]

    if limit:
        events = events[-limit:]

    return events


def _parse_since(value: str) -> datetime:
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise InvalidTimestampError(value) from e


def _first_error(error: ValidationError) -> str:
    errors = error.errors()
    if not errors:
        return str(error)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid")
    return f"{location}: {message}" if location else message


def log_event(workspace: Workspace, event: TimelineEvent) -> None:
    """Append ``event`` to the workspace timeline."""
    TimelineLog(workspace).append(event)


def read_timeline(workspace: Workspace, config: HistoryConfig | None = None) -> list[TimelineEvent]:
    """All parseable events of the workspace timeline, in append order."""
    return TimelineLog(workspace, config).events()


__all__ = [
    "SkippedLine",
    "TimelineReadResult",
    "TimelineLog",
    "filter_events",
    "log_event",
    "read_timeline",
]
