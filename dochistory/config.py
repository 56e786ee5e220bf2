"""
Configuration management for document history.

User settings live in ~/.claude/dochistory-config.json. Missing keys take
defaults, unknown keys are ignored, and an unreadable file falls back to
defaults.
"""

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

CONFIG_PATH = Path.home() / ".claude" / "dochistory-config.json"

STRICT_TIMELINE_ENV = "DOCHISTORY_STRICT_TIMELINE"

DEFAULT_HISTORY_CONFIG = {
    "strict_timeline": False,
    "recent_events_limit": 10,
    "draft_preview_chars": 500,
    "status_icons": True,
}


def _filter_dataclass_fields(data: dict[str, Any], cls: type) -> dict[str, Any]:
    """Filter dict to only include fields that exist in the dataclass."""
    valid_fields = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in valid_fields}


def _env_flag(name: str) -> bool | None:
    """Read a true/false environment variable; None when unset."""
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class HistoryConfig:
    """
    Document history user configuration.

    strict_timeline:
        Fail the whole timeline read on the first malformed line instead of
        skipping it. Overridden by DOCHISTORY_STRICT_TIMELINE.
    recent_events_limit:
        Timeline events embedded in a checkpoint's prompt file.
    draft_preview_chars:
        Characters of the draft shown in snapshot renderings.
    status_icons:
        Emoji markers in tool output; bracketed ASCII when False.
    """

    strict_timeline: bool = False
    recent_events_limit: int = 10
    draft_preview_chars: int = 500
    status_icons: bool = True

    @classmethod
    def load(cls, path: Path | None = None) -> "HistoryConfig":
        """
        Load config from file with defaults.

        Args:
            path: Optional config file path. Defaults to ~/.claude/dochistory-config.json

        Returns:
            HistoryConfig with user settings merged over defaults
        """
        if path is None:
            path = CONFIG_PATH

        config = DEFAULT_HISTORY_CONFIG.copy()

        if path.exists():
            try:
                user_config = json.loads(path.read_text(encoding="utf-8"))
                if isinstance(user_config, dict):
                    config.update(user_config)
            except (json.JSONDecodeError, UnicodeDecodeError, OSError):
                # Use defaults on error
                pass

        # Environment variable wins over the file
        strict = _env_flag(STRICT_TIMELINE_ENV)
        if strict is not None:
            config["strict_timeline"] = strict

        # Counts must be non-negative integers
        for key in ("recent_events_limit", "draft_preview_chars"):
            value = config.get(key)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                config[key] = DEFAULT_HISTORY_CONFIG[key]

        return cls(**_filter_dataclass_fields(config, cls))

    def save(self, path: Path | None = None) -> None:
        """
        Save configuration to file.

        Args:
            path: Optional config file path. Defaults to ~/.claude/dochistory-config.json
        """
        if path is None:
            path = CONFIG_PATH

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)

    def icon(self, name: str) -> str:
        """Status marker for tool output."""
        return (_ICONS if self.status_icons else _PLAIN_ICONS)[name]


_ICONS = {
    "ok": "✅",
    "published": "🎉",
    "draft": "📝",
    "book": "📗",
}

_PLAIN_ICONS = {
    "ok": "[OK]",
    "published": "[PUBLISHED]",
    "draft": "[DRAFT]",
    "book": "[PUBLISHED]",
}


# Default history configuration instance
default_history_config = HistoryConfig()


__all__ = [
    "CONFIG_PATH",
    "STRICT_TIMELINE_ENV",
    "DEFAULT_HISTORY_CONFIG",
    "HistoryConfig",
    "default_history_config",
]
