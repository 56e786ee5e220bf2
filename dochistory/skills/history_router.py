"""Document history tool router.

Exposes the history, checkpoint, version and narrative operations as named
tools with typed arguments, and as /history slash commands. Handlers return
markdown text; ``execute_tool`` wraps them in a ToolResult envelope.
"""

from __future__ import annotations

import shlex
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dochistory.config import HistoryConfig
from dochistory.errors import DocHistoryError
from dochistory.history.checkpoint import CheckpointStore
from dochistory.history.render import (
    render_checkpoint_detail,
    render_checkpoint_list,
    render_history,
    restore_hint,
)
from dochistory.history.timeline import TimelineLog, filter_events
from dochistory.narrative import add_narrative as capture_narrative
from dochistory.version.manager import VersionManager, parse_version
from dochistory.workspace import Workspace


# -----------------------------------------------------------------------------
# Tool arguments
# -----------------------------------------------------------------------------


class ToolArgs(BaseModel):
    """Common tool arguments. ``path`` defaults to the current directory."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    path: str | None = Field(default=None, description="Path to document directory")

    def workspace(self) -> Workspace:
        return Workspace.resolve(self.path)


class CheckpointCreateArgs(ToolArgs):
    name: str = Field(description="Checkpoint name (kebab-case)")
    message: str = Field(description="Description of why checkpoint created")
    capture_prompt: bool = Field(default=True, alias="capturePrompt", description="Capture conversation context")


class CheckpointListArgs(ToolArgs):
    pass


class CheckpointShowArgs(ToolArgs):
    checkpoint: str = Field(description="Checkpoint name")


class CheckpointRestoreArgs(ToolArgs):
    checkpoint: str = Field(description="Checkpoint name")


class HistoryShowArgs(ToolArgs):
    since: str | None = Field(default=None, description="Show events since this ISO timestamp")
    event_type: str | None = Field(default=None, alias="eventType", description="Filter by event type")
    limit: int | None = Field(default=None, ge=1, description="Maximum number of events to show")


class IncrementVersionArgs(ToolArgs):
    type: Literal["minor", "major"] = Field(description="'minor' for 0.x -> 0.x+1, 'major' for x.y -> x+1.0")
    notes: str | None = Field(default=None, description="Notes about this version")
    save_draft: bool = Field(default=True, alias="saveDraft", description="Save current draft as versioned file")


class GetVersionArgs(ToolArgs):
    pass


class ListVersionsArgs(ToolArgs):
    pass


class AddNarrativeArgs(ToolArgs):
    content: str = Field(description="Raw narrative content to capture")
    source: Literal["typing", "voice", "paste", "import"] | None = Field(default=None, description="Source of the narrative")
    context: str | None = Field(default=None, description="Context about what prompted this narrative")
    speaker: Literal["user", "assistant", "system"] | None = Field(default=None, description="Who is speaking")


class ToolResult(BaseModel):
    """Envelope returned to the command/protocol layer."""

    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None


# -----------------------------------------------------------------------------
# Handlers
# -----------------------------------------------------------------------------


async def checkpoint_create(args: CheckpointCreateArgs, config: HistoryConfig | None = None) -> str:
    config = config or HistoryConfig.load()
    workspace = args.workspace()
    created = CheckpointStore(workspace, config).create(args.name, args.message, args.capture_prompt)

    output = f"{config.icon('ok')} Checkpoint created: {args.name}\n\n"
    output += f"Location: {created.checkpoint_path}\n"
    if created.prompt_path:
        output += f"Prompt: {created.prompt_path}\n"
    output += f"\nYou can restore this checkpoint later with:\n  {restore_hint(args.name)}"
    return output


async def checkpoint_list(args: CheckpointListArgs, config: HistoryConfig | None = None) -> str:
    config = config or HistoryConfig.load()
    return render_checkpoint_list(CheckpointStore(args.workspace(), config).list())


async def checkpoint_show(args: CheckpointShowArgs, config: HistoryConfig | None = None) -> str:
    config = config or HistoryConfig.load()
    workspace = args.workspace()
    checkpoint = CheckpointStore(workspace, config).load(args.checkpoint)
    return render_checkpoint_detail(
        checkpoint,
        str(workspace.checkpoint_prompt_path(args.checkpoint)),
        config.draft_preview_chars,
    )


async def checkpoint_restore(args: CheckpointRestoreArgs, config: HistoryConfig | None = None) -> str:
    config = config or HistoryConfig.load()
    result = CheckpointStore(args.workspace(), config).restore(args.checkpoint)

    output = f"{config.icon('ok')} Restored to checkpoint: {result.name}\n\n"
    output += f"Restored from: {result.restored_from}\n"
    output += f"Status: {result.status}\n\n"
    if result.restored_files:
        output += "Files restored:\n"
        output += "\n".join(f"  - {f}" for f in result.restored_files)
    else:
        output += "No files restored (nothing was captured in this checkpoint)."
    if result.skipped:
        output += f"\n\nNot captured, left untouched: {', '.join(result.skipped)}"
    return output


async def history_show(args: HistoryShowArgs, config: HistoryConfig | None = None) -> str:
    config = config or HistoryConfig.load()
    read = TimelineLog(args.workspace(), config).read()
    if not read.events and not read.skipped_lines:
        return "No history events found."

    events = filter_events(read.events, since=args.since, event_type=args.event_type, limit=args.limit)
    return render_history(events, skipped=read.skipped_count)


async def increment_version(args: IncrementVersionArgs, config: HistoryConfig | None = None) -> str:
    config = config or HistoryConfig.load()
    change = VersionManager(args.workspace()).increment(args.type, args.notes, args.save_draft)

    message = f"{config.icon('ok')} Version incremented: v{change.old_version} → v{change.new_version}"
    if change.is_publication:
        message += f"\n\n{config.icon('published')} Document published! (v{change.new_version})"
    if change.draft_path:
        message += f"\n\nDraft saved: {change.draft_path}"
    if change.notes:
        message += f"\n\nNotes: {change.notes}"
    return message


async def get_version(args: GetVersionArgs, config: HistoryConfig | None = None) -> str:
    config = config or HistoryConfig.load()
    document = VersionManager(args.workspace()).load_config()
    version = parse_version(document.version)
    status = f"{config.icon('book')} Published" if version.published else f"{config.icon('draft')} Draft"

    output = "# Version Information\n\n"
    output += f"**Current Version**: v{version} {status}\n"
    output += f"**Published**: {'Yes' if document.published else 'No'}\n"
    output += f"**Last Updated**: {document.updated_at or 'unknown'}\n\n"

    if document.version_history:
        output += "## Version History\n\n"
        output += "| Version | Date | Notes |\n"
        output += "|---------|------|-------|\n"
        for entry in document.version_history:
            output += f"| v{entry.version} | {entry.timestamp[:10]} | {entry.notes or '-'} |\n"

    return output


async def list_versions(args: ListVersionsArgs, config: HistoryConfig | None = None) -> str:
    document = VersionManager(args.workspace()).load_config()
    if not document.version_history:
        return "No version history found."

    output = "# Version History\n\n"
    output += f"**Current Version**: v{document.version}\n\n"
    for entry in document.version_history:
        output += f"## v{entry.version}\n\n"
        output += f"**Date**: {entry.timestamp}\n"
        if entry.draft_path:
            output += f"**Draft**: {entry.draft_path}\n"
        if entry.notes:
            output += f"**Notes**: {entry.notes}\n"
        output += "\n"
    return output


async def add_narrative(args: AddNarrativeArgs, config: HistoryConfig | None = None) -> str:
    config = config or HistoryConfig.load()
    captured = capture_narrative(
        args.workspace(),
        args.content,
        source=args.source,
        context=args.context,
        speaker=args.speaker,
    )
    return (
        f"{config.icon('ok')} Narrative saved to timeline and {captured.filename} "
        f"({captured.characters} characters)"
    )


# Tool registry (for dispatch and help)
TOOLS: dict[str, dict[str, Any]] = {
    "checkpoint_create": {
        "description": "Create a named checkpoint of current document state with prompt capture",
        "args": CheckpointCreateArgs,
        "handler": checkpoint_create,
    },
    "checkpoint_list": {
        "description": "List all checkpoints with timestamps and messages",
        "args": CheckpointListArgs,
        "handler": checkpoint_list,
    },
    "checkpoint_show": {
        "description": "Show one checkpoint including its full snapshot",
        "args": CheckpointShowArgs,
        "handler": checkpoint_show,
    },
    "checkpoint_restore": {
        "description": "Overwrite current files with a checkpoint's snapshot",
        "args": CheckpointRestoreArgs,
        "handler": checkpoint_restore,
    },
    "history_show": {
        "description": "Show the timeline, filtered by time, event type or count",
        "args": HistoryShowArgs,
        "handler": history_show,
    },
    "increment_version": {
        "description": "Increment the version: minor for drafts, major to publish (0.x -> 1.0)",
        "args": IncrementVersionArgs,
        "handler": increment_version,
    },
    "get_version": {
        "description": "Current version information and history",
        "args": GetVersionArgs,
        "handler": get_version,
    },
    "list_versions": {
        "description": "List every version with timestamps and notes",
        "args": ListVersionsArgs,
        "handler": list_versions,
    },
    "add_narrative": {
        "description": "Capture free-form input to the timeline and a numbered prompt file",
        "args": AddNarrativeArgs,
        "handler": add_narrative,
    },
}


async def execute_tool(
    tool_name: str,
    args: dict[str, Any] | None = None,
    config: HistoryConfig | None = None,
) -> ToolResult:
    """
    Validate ``args`` and run one tool.

    Expected failures (validation, missing resources, I/O) become
    ``ToolResult(success=False)``; nothing is raised.
    """
    tool = TOOLS.get(tool_name)
    if tool is None:
        return ToolResult(success=False, error=f"Unknown tool: {tool_name}")

    try:
        validated = tool["args"].model_validate(args or {})
        message = await tool["handler"](validated, config)
    except (DocHistoryError, ValidationError, OSError) as e:
        return ToolResult(success=False, error=str(e))

    return ToolResult(success=True, data={"message": message})


# -----------------------------------------------------------------------------
# /history slash commands
# -----------------------------------------------------------------------------

COMMANDS = {
    "checkpoint create": {
        "description": "Create a checkpoint",
        "example": '/history checkpoint create before-rewrite --message "Before restructuring"',
    },
    "checkpoint list": {
        "description": "List checkpoints",
        "example": "/history checkpoint list",
    },
    "checkpoint show": {
        "description": "Show one checkpoint",
        "example": "/history checkpoint show before-rewrite",
    },
    "checkpoint restore": {
        "description": "Restore a checkpoint",
        "example": "/history checkpoint restore before-rewrite",
    },
    "log": {
        "description": "Show timeline events",
        "example": "/history log --type checkpoint_created --limit 5",
    },
    "version": {
        "description": "Show current version",
        "example": "/history version",
    },
    "version list": {
        "description": "List version history",
        "example": "/history version list",
    },
    "version bump": {
        "description": "Increment version (minor or major)",
        "example": '/history version bump major --notes "First release"',
    },
    "narrative": {
        "description": "Capture a narrative chunk",
        "example": '/history narrative "We should open with the case study" --context intro',
    },
    "help": {
        "description": "Show all commands",
        "example": "/history help",
    },
}


def parse_flags(args_str: str | None) -> dict:
    """Parse --flag value pairs from args string.

    Supports both --flag value and --flag (boolean) syntax.
    Positional arguments are stored in "_positional" key.

    Examples:
        >>> parse_flags('checkpoint create v1 --message "first cut"')
        {'_positional': ['checkpoint', 'create', 'v1'], 'message': 'first cut'}

        >>> parse_flags("version bump minor --no-draft")
        {'_positional': ['version', 'bump', 'minor'], 'no-draft': True}
    """
    tokens = shlex.split(args_str) if args_str else []
    result: dict = {"_positional": []}

    i = 0
    while i < len(tokens):
        if tokens[i].startswith("--"):
            key = tokens[i][2:]
            if i + 1 < len(tokens) and not tokens[i + 1].startswith("--"):
                result[key] = tokens[i + 1]
                i += 2
            else:
                result[key] = True
                i += 1
        else:
            result["_positional"].append(tokens[i])
            i += 1

    return result


def generate_help_text() -> str:
    """Help table built from the command registry."""
    help_text = "## /history Commands\n\n"
    help_text += "| Command | Description | Example |\n"
    help_text += "|---------|-------------|----------|\n"

    for cmd, info in COMMANDS.items():
        help_text += f"| {cmd} | {info['description']} | `{info['example']}` |\n"

    help_text += "\n### Flags\n\n"
    help_text += "| Flag | Effect |\n"
    help_text += "|------|--------|\n"
    help_text += "| `--path DIR` | Document workspace (default: current directory) |\n"
    help_text += "| `--message TEXT` | Checkpoint message |\n"
    help_text += "| `--no-prompt` | Skip the checkpoint prompt file |\n"
    help_text += "| `--since ISO` | Events at or after this timestamp |\n"
    help_text += "| `--type TYPE` | Events of this type only |\n"
    help_text += "| `--limit N` | Last N events after filtering |\n"
    help_text += "| `--notes TEXT` | Version notes |\n"
    help_text += "| `--no-draft` | Do not archive the current draft on bump |\n"
    help_text += "| `--context / --source / --speaker` | Narrative metadata |\n"

    return help_text


def _command_to_tool(args: dict) -> tuple[str, dict[str, Any]] | str:
    """Map parsed slash-command args to (tool name, tool args), or an error message."""
    positional = args.get("_positional", [])
    command = positional[0] if positional else "help"
    sub = positional[1] if len(positional) > 1 else None
    target = positional[2] if len(positional) > 2 else None
    base: dict[str, Any] = {"path": args["path"]} if isinstance(args.get("path"), str) else {}

    if command == "checkpoint":
        if sub == "list" or sub is None:
            return "checkpoint_list", base
        if sub in ("show", "restore"):
            if not target:
                return f"Usage: /history checkpoint {sub} <name>"
            return f"checkpoint_{sub}", {**base, "checkpoint": target}
        if sub == "create":
            if not target:
                return "Usage: /history checkpoint create <name> --message TEXT"
            message = args.get("message")
            return "checkpoint_create", {
                **base,
                "name": target,
                "message": message if isinstance(message, str) else "",
                "capture_prompt": not args.get("no-prompt", False),
            }
        return f"Unknown checkpoint command: {sub}. Try `/history help`"

    if command in ("log", "history"):
        tool_args = dict(base)
        for flag, key in (("since", "since"), ("type", "event_type"), ("limit", "limit")):
            if isinstance(args.get(flag), str):
                tool_args[key] = args[flag]
        return "history_show", tool_args

    if command == "version":
        if sub in (None, "show", "get"):
            return "get_version", base
        if sub == "list":
            return "list_versions", base
        if sub == "bump":
            if target not in ("minor", "major"):
                return "Usage: /history version bump minor|major"
            tool_args = {**base, "type": target, "save_draft": not args.get("no-draft", False)}
            if isinstance(args.get("notes"), str):
                tool_args["notes"] = args["notes"]
            return "increment_version", tool_args
        return f"Unknown version command: {sub}. Try `/history help`"

    if command == "narrative":
        content = " ".join(positional[1:])
        if not content:
            return "Usage: /history narrative <text> [--context TEXT]"
        tool_args = {**base, "content": content}
        for flag in ("context", "source", "speaker"):
            if isinstance(args.get(flag), str):
                tool_args[flag] = args[flag]
        return "add_narrative", tool_args

    return f"Unknown command: {command}. Try `/history help`"


async def handle_history_command(args_str: str, config: HistoryConfig | None = None) -> str:
    """Main dispatcher for /history commands.

    Args:
        args_str: Raw command arguments string

    Returns:
        Command result as markdown, or "Error: ..." on failure
    """
    args = parse_flags(args_str)
    positional = args.get("_positional", [])
    if not positional or positional[0] == "help":
        return generate_help_text()

    routed = _command_to_tool(args)
    if isinstance(routed, str):
        return routed

    tool_name, tool_args = routed
    result = await execute_tool(tool_name, tool_args, config)
    if not result.success:
        return f"Error: {result.error}"
    return result.data["message"]


__all__ = [
    "ToolArgs",
    "CheckpointCreateArgs",
    "CheckpointListArgs",
    "CheckpointShowArgs",
    "CheckpointRestoreArgs",
    "HistoryShowArgs",
    "IncrementVersionArgs",
    "GetVersionArgs",
    "ListVersionsArgs",
    "AddNarrativeArgs",
    "ToolResult",
    "checkpoint_create",
    "checkpoint_list",
    "checkpoint_show",
    "checkpoint_restore",
    "history_show",
    "increment_version",
    "get_version",
    "list_versions",
    "add_narrative",
    "TOOLS",
    "execute_tool",
    "COMMANDS",
    "parse_flags",
    "generate_help_text",
    "handle_history_command",
]
