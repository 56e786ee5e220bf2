"""
Narrative capture - free-form input kept as timeline events and prompt files.

Every narrative chunk is saved twice:
1. timeline.jsonl - a narrative_chunk event, for the full chronology
2. .history/prompts/NNN-<slug>.md - a numbered file, reusable as a prompt
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .history.timeline import TimelineLog
from .schema import NarrativeChunkData, NarrativeChunkEvent
from .workspace import Workspace, atomic_write_text, format_timestamp

logger = logging.getLogger(__name__)

NarrativeSource = Literal["typing", "voice", "paste", "import"]
Speaker = Literal["user", "assistant", "system"]

NUMBERED_PROMPT_PATTERN = re.compile(r"^(\d{3,})-.*\.md$")
SLUG_MAX_LENGTH = 50
DEFAULT_SLUG = "narrative"


def slugify(context: str | None) -> str:
    """
    File-name slug for a narrative.

    Lowercased, runs of anything outside [a-z0-9] become one hyphen,
    truncated to 50 characters.
    """
    if not context:
        return DEFAULT_SLUG
    slug = re.sub(r"[^a-z0-9]+", "-", context.lower())[:SLUG_MAX_LENGTH].strip("-")
    return slug or DEFAULT_SLUG


def next_prompt_number(prompts_dir: Path) -> int:
    """One more than the highest NNN- prefix in ``prompts_dir``; 1 when there is none."""
    if not prompts_dir.is_dir():
        return 1
    numbers = [
        int(match.group(1))
        for match in (NUMBERED_PROMPT_PATTERN.match(p.name) for p in prompts_dir.iterdir())
        if match
    ]
    return max(numbers, default=0) + 1


def render_narrative(
    content: str,
    timestamp: str,
    source: str | None,
    context: str | None,
    speaker: str,
) -> str:
    return f"""# Narrative: {context or 'User Input'}

**Date**: {timestamp}
**Source**: {source or 'unknown'}
**Speaker**: {speaker}

---

{content}
"""


@dataclass
class CapturedNarrative:
    """Outcome of add_narrative."""

    filename: str
    prompt_path: Path
    timestamp: str
    characters: int


def add_narrative(
    workspace: Workspace,
    content: str,
    source: NarrativeSource | None = None,
    context: str | None = None,
    speaker: Speaker | None = None,
) -> CapturedNarrative:
    """
    Capture a narrative chunk.

    Args:
        workspace: Target workspace
        content: Raw narrative text
        source: How it was produced (typing, voice, paste, import)
        context: What prompted it; also names the prompt file
        speaker: user (default), assistant or system

    Returns:
        CapturedNarrative with the numbered file that was written
    """
    speaker = speaker or "user"
    timestamp = format_timestamp()

    number = next_prompt_number(workspace.prompts_dir)
    filename = f"{number:03d}-{slugify(context)}.md"
    prompt_path = workspace.prompts_dir / filename
    atomic_write_text(
        prompt_path,
        render_narrative(content, timestamp, source, context, speaker),
    )

    TimelineLog(workspace).append(
        NarrativeChunkEvent(
            timestamp=timestamp,
            data=NarrativeChunkData(
                content=content,
                source=source,
                context=context,
                speaker=speaker,
                prompt_path=workspace.relative(prompt_path),
            ),
        )
    )

    logger.info(f"Narrative saved to {prompt_path} ({len(content)} characters)")
    return CapturedNarrative(
        filename=filename,
        prompt_path=prompt_path,
        timestamp=timestamp,
        characters=len(content),
    )


__all__ = [
    "NarrativeSource",
    "Speaker",
    "NUMBERED_PROMPT_PATTERN",
    "slugify",
    "next_prompt_number",
    "render_narrative",
    "CapturedNarrative",
    "add_narrative",
]
