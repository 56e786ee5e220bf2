"""Shared fixtures for dochistory tests."""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dochistory.config import HistoryConfig
from dochistory.workspace import Workspace


@pytest.fixture(autouse=True)
def _no_strict_env(monkeypatch: pytest.MonkeyPatch):
    """Keep a developer's DOCHISTORY_STRICT_TIMELINE out of the tests."""
    monkeypatch.delenv("DOCHISTORY_STRICT_TIMELINE", raising=False)


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """An empty document workspace."""
    root = tmp_path / "doc"
    root.mkdir()
    return Workspace(root=root)


@pytest.fixture
def populated_workspace(workspace: Workspace) -> Workspace:
    """Workspace with config.json (v0.3, drafting), outline.md and two drafts."""
    workspace.config_path.write_text(
        json.dumps(
            {"title": "Field Notes", "status": "drafting", "version": "0.3", "published": False},
            indent=2,
        )
    )
    workspace.outline_path.write_text("# Outline\n\n1. Opening\n2. Middle\n")
    workspace.drafts_dir.mkdir()
    (workspace.drafts_dir / "draft-001.md").write_text("first draft")
    (workspace.drafts_dir / "draft-002.md").write_text("second draft")
    return workspace


@pytest.fixture
def config() -> HistoryConfig:
    """Default configuration, independent of ~/.claude."""
    return HistoryConfig()
