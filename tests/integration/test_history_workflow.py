"""
Integration tests for a document's history over its lifetime.

Drive the public operations in the order a writer would use them and check
the timeline, checkpoints and config stay consistent with each other.
"""

import json

import pytest

from dochistory import (
    CheckpointStore,
    HistoryConfig,
    TimelineLog,
    VersionManager,
    Workspace,
    add_narrative,
    log_event,
)
from dochistory.schema import LifecycleEvent
from dochistory.skills import execute_tool


@pytest.fixture
def document(tmp_path) -> Workspace:
    root = tmp_path / "essay"
    root.mkdir()
    workspace = Workspace(root=root)
    workspace.config_path.write_text(json.dumps({"title": "Tides", "status": "outlining", "version": "0.1"}))
    log_event(
        workspace,
        LifecycleEvent(timestamp="2026-03-01T09:00:00.000Z", type="document_created", data={"title": "Tides"}),
    )
    return workspace


class TestDocumentLifecycle:
    """End-to-end: narrative, drafts, checkpoints, restore and publication."""

    def test_full_lifecycle(self, document):
        store = CheckpointStore(document)
        versions = VersionManager(document)

        add_narrative(document, "Start at low tide.", source="typing", context="Opening")

        document.outline_path.write_text("1. Low tide\n2. High tide\n")
        document.drafts_dir.mkdir()
        (document.drafts_dir / "current-draft.md").write_text("The water left quietly.")
        log_event(document, LifecycleEvent(timestamp="2026-03-02T09:00:00.000Z", type="draft_created"))

        created = store.create("first-draft", "Draft complete")
        assert created.metadata.context.events_since_last_checkpoint == 3
        assert created.metadata.status == "outlining"

        versions.increment("minor", notes="first full draft")
        document.outline_path.write_text("1. High tide only\n")
        (document.drafts_dir / "current-draft.md").write_text("Rewritten badly.")

        result = store.restore("first-draft")
        assert document.outline_path.read_text() == "1. Low tide\n2. High tide\n"
        # config.json comes back as captured, so the 0.2 bump is undone on disk
        assert json.loads(document.config_path.read_text())["version"] == "0.1"
        # restored draft lands next to the live one instead of replacing it
        assert (document.drafts_dir / "restored-from-first-draft.md").read_text() == "The water left quietly."
        assert (document.drafts_dir / "current-draft.md").read_text() == "Rewritten badly."
        assert "drafts/restored-from-first-draft.md" in result.restored_files

        published = versions.increment("major", notes="launch")
        assert published.old_version == "0.1"
        assert published.new_version == "1.0"
        assert published.is_publication
        assert (document.drafts_dir / "draft-v0.1.md").read_text() == "Rewritten badly."

        types = [e.type for e in TimelineLog(document).events()]
        assert types == [
            "document_created",
            "narrative_chunk",
            "draft_created",
            "checkpoint_created",
            "version_incremented",
            "checkpoint_restored",
            "version_published",
        ]

    def test_second_checkpoint_counts_only_new_events(self, document):
        store = CheckpointStore(document)
        store.create("one", "first")
        add_narrative(document, "more")
        add_narrative(document, "and more")

        second = store.create("two", "second")
        assert second.metadata.context.events_since_last_checkpoint == 2
        assert sorted(c.name for c in store.list()) == ["one", "two"]


class TestToolSurface:
    """The tool layer over a real workspace."""

    @pytest.mark.asyncio
    async def test_tools_share_one_timeline(self, document):
        config = HistoryConfig(status_icons=False)
        path = str(document.root)

        steps = [
            ("add_narrative", {"content": "idea", "context": "seed"}),
            ("checkpoint_create", {"name": "seeded", "message": "after first idea"}),
            ("increment_version", {"type": "minor", "saveDraft": False}),
            ("checkpoint_restore", {"checkpoint": "seeded"}),
        ]
        for tool, args in steps:
            result = await execute_tool(tool, {"path": path, **args}, config)
            assert result.success, result.error

        history = await execute_tool("history_show", {"path": path}, config)
        assert "Total events: 5" in history.data["message"]

        since = await execute_tool(
            "history_show",
            {"path": path, "since": "2026-03-01T09:00:00.001Z"},
            config,
        )
        assert "Total events: 4" in since.data["message"]

    @pytest.mark.asyncio
    async def test_strict_timeline_surfaces_corruption(self, document):
        with open(document.timeline_path, "a") as f:
            f.write('{"timestamp": "2026-03-01T10:00:00Z", "type": "draft_c')

        lenient = await execute_tool("history_show", {"path": str(document.root)}, HistoryConfig())
        assert lenient.success
        assert "Skipped malformed lines: 1" in lenient.data["message"]

        strict = await execute_tool(
            "history_show",
            {"path": str(document.root)},
            HistoryConfig(strict_timeline=True),
        )
        assert strict.success is False
        assert "Malformed timeline line 2" in strict.error
