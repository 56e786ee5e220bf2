"""Version Layer - draft/published version numbering."""

from .manager import (
    VersionIncrement,
    VersionManager,
    VersionPair,
    format_version,
    parse_version,
)

__all__ = [
    "VersionIncrement",
    "VersionManager",
    "VersionPair",
    "format_version",
    "parse_version",
]
