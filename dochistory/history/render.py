"""Markdown renderings of snapshots, checkpoints and timeline events."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..schema import CheckpointMetadata, StateSnapshot, TimelineEvent


def restore_hint(name: str) -> str:
    return f'checkpoint_restore({{ checkpoint: "{name}" }})'


def event_data(event: "TimelineEvent") -> dict:
    """Event payload as it appears on disk."""
    if isinstance(event.data, dict):
        return event.data
    return event.data.model_dump(by_alias=True, exclude_none=True)


def format_event_line(event: "TimelineEvent") -> str:
    """One-line bullet used in checkpoint prompt files."""
    return f"- {event.timestamp}: {event.type} - {json.dumps(event_data(event))}"


def format_snapshot(snapshot: "StateSnapshot", preview_chars: int = 500) -> str:
    """Markdown body for a snapshot; absent artifacts are left out."""
    output = ""

    if snapshot.status:
        output += f"**Current Status**: {snapshot.status}\n\n"

    if snapshot.config and snapshot.config.exists:
        output += f"### config.json\n\n```json\n{snapshot.config.content}\n```\n\n"

    if snapshot.outline and snapshot.outline.exists:
        output += f"### outline.md\n\n{snapshot.outline.content}\n\n"

    if snapshot.current_draft and snapshot.current_draft.exists:
        content = snapshot.current_draft.content or ""
        preview = content[:preview_chars]
        ellipsis = "..." if len(content) > preview_chars else ""
        output += f"### Current Draft (preview)\n\n{preview}{ellipsis}\n\n"

    return output


def render_checkpoint_prompt(
    checkpoint: "CheckpointMetadata",
    recent_events: list["TimelineEvent"],
    preview_chars: int = 500,
) -> str:
    """Human-readable companion file written to prompts/<name>.md."""
    files = "\n".join(f"- {f}" for f in checkpoint.context.files_changed) or "- (none)"
    events = "\n".join(format_event_line(e) for e in recent_events) or "- (no events yet)"

    return f"""# Checkpoint: {checkpoint.name}

**Timestamp**: {checkpoint.timestamp}
**Status**: {checkpoint.status or 'unknown'}
**Message**: {checkpoint.message}

## Current State

{format_snapshot(checkpoint.snapshot, preview_chars)}
## Files at This Point

{files}

## Recent Timeline

{events}

---

This checkpoint captures the state of the document at this moment in time.
You can restore to this checkpoint using: `{restore_hint(checkpoint.name)}`
"""


def render_checkpoint_list(checkpoints: list["CheckpointMetadata"]) -> str:
    if not checkpoints:
        return "No checkpoints found."

    output = f"Found {len(checkpoints)} checkpoint(s):\n\n"
    for checkpoint in checkpoints:
        output += f"- **{checkpoint.name}** ({checkpoint.timestamp})\n"
        output += f"  Status: {checkpoint.status}\n"
        output += f"  Message: {checkpoint.message}\n"
        output += f"  Events since last: {checkpoint.context.events_since_last_checkpoint}\n\n"
    return output


def render_checkpoint_detail(
    checkpoint: "CheckpointMetadata",
    prompt_location: str,
    preview_chars: int = 500,
) -> str:
    files = ", ".join(checkpoint.context.files_changed) or "(none)"

    output = f"# Checkpoint: {checkpoint.name}\n\n"
    output += f"**Created**: {checkpoint.timestamp}\n"
    output += f"**Status**: {checkpoint.status}\n"
    output += f"**Message**: {checkpoint.message}\n\n"
    output += "## Context\n\n"
    output += f"- Files changed: {files}\n"
    output += f"- Events since last checkpoint: {checkpoint.context.events_since_last_checkpoint}\n\n"
    output += "## Snapshot\n\n"
    output += f"{format_snapshot(checkpoint.snapshot, preview_chars)}\n"
    output += "\n---\n\n"
    output += f"View full prompt context: {prompt_location}\n"
    output += f"Restore: {restore_hint(checkpoint.name)}"
    return output


def render_history(events: list["TimelineEvent"], skipped: int = 0) -> str:
    output = "# Document History\n\n"
    output += f"Total events: {len(events)}\n"
    if skipped:
        output += f"Skipped malformed lines: {skipped}\n"
    output += "\n"

    for event in events:
        output += f"## {event.timestamp} - {event.type}\n\n"
        output += f"```json\n{json.dumps(event_data(event), indent=2)}\n```\n\n"

    return output


__all__ = [
    "restore_hint",
    "event_data",
    "format_event_line",
    "format_snapshot",
    "render_checkpoint_prompt",
    "render_checkpoint_list",
    "render_checkpoint_detail",
    "render_history",
]
