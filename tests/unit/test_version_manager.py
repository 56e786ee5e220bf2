"""Tests for VersionManager and version parsing."""

import json

import pytest

from dochistory.errors import ConfigNotFoundError, DocHistoryError, InvalidVersionError
from dochistory.history.timeline import TimelineLog
from dochistory.version.manager import VersionManager, VersionPair, format_version, parse_version


def write_config(workspace, **fields):
    workspace.config_path.write_text(json.dumps(fields, indent=2))


def read_config(workspace) -> dict:
    return json.loads(workspace.config_path.read_text())


class TestParseVersion:
    """Test suite for parse_version."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("0.1", (0, 1)), ("v0.3", (0, 3)), ("1.0", (1, 0)), ("12.34", (12, 34))],
    )
    def test_valid(self, text, expected):
        assert parse_version(text) == expected

    @pytest.mark.parametrize("text", ["1", "1.2.3", "v", "", "a.b", "1.x", "V1.0", None, 1.0])
    def test_invalid(self, text):
        with pytest.raises(InvalidVersionError) as exc_info:
            parse_version(text)
        assert "Expected format: v0.1 or 1.0" in str(exc_info.value)

    def test_str_and_published(self):
        assert str(VersionPair(0, 9)) == "0.9"
        assert not VersionPair(0, 9).published
        assert VersionPair(1, 0).published
        assert format_version(2, 5) == "2.5"

    def test_bump(self):
        assert VersionPair(0, 3).bump("minor") == (0, 4)
        assert VersionPair(0, 3).bump("major") == (1, 0)
        assert VersionPair(1, 7).bump("major") == (2, 0)


class TestVersionIncrement:
    """Test suite for VersionManager.increment."""

    def test_minor_draft_bump(self, populated_workspace):
        change = VersionManager(populated_workspace).increment("minor")

        assert change.old_version == "0.3"
        assert change.new_version == "0.4"
        assert change.event_type == "version_incremented"
        assert change.published is False
        assert not change.is_publication

        config = read_config(populated_workspace)
        assert config["version"] == "0.4"
        assert config["published"] is False

    def test_major_from_draft_publishes(self, populated_workspace):
        change = VersionManager(populated_workspace).increment("major", notes="First release")

        assert change.new_version == "1.0"
        assert change.event_type == "version_published"
        assert change.is_publication

        config = read_config(populated_workspace)
        assert config["version"] == "1.0"
        assert config["published"] is True

        event = TimelineLog(populated_workspace).events()[-1]
        assert event.type == "version_published"
        assert event.data.old_version == "0.3"
        assert event.data.new_version == "1.0"
        assert event.data.increment_type == "major"
        assert event.data.notes == "First release"

    def test_major_after_publication_is_plain_increment(self, workspace):
        write_config(workspace, version="1.0", published=True)
        change = VersionManager(workspace).increment("major")

        assert change.new_version == "2.0"
        assert change.event_type == "version_incremented"
        assert read_config(workspace)["published"] is True

    def test_minor_after_publication_stays_published(self, workspace):
        write_config(workspace, version="1.0", published=True)
        change = VersionManager(workspace).increment("minor")
        assert change.new_version == "1.1"
        assert change.published is True

    def test_v_prefix_normalised(self, workspace):
        write_config(workspace, version="v0.2")
        change = VersionManager(workspace).increment("minor")
        assert change.old_version == "0.2"
        assert read_config(workspace)["version"] == "0.3"

    def test_missing_version_is_first_draft(self, workspace):
        write_config(workspace, title="Untitled")
        change = VersionManager(workspace).increment("minor")
        assert change.old_version == "0.1"
        assert change.new_version == "0.2"

    def test_other_keys_preserved(self, populated_workspace):
        config = read_config(populated_workspace)
        config["custom"] = {"nested": [1, 2, 3]}
        populated_workspace.config_path.write_text(json.dumps(config))

        VersionManager(populated_workspace).increment("minor")

        updated = read_config(populated_workspace)
        assert updated["title"] == "Field Notes"
        assert updated["status"] == "drafting"
        assert updated["custom"] == {"nested": [1, 2, 3]}
        assert "updatedAt" in updated

    def test_history_entries_appended(self, populated_workspace):
        manager = VersionManager(populated_workspace)
        manager.increment("minor", notes="tightened intro")
        manager.increment("major")

        history = manager.history()
        assert [entry.version for entry in history] == ["0.4", "1.0"]
        assert history[0].notes == "tightened intro"
        assert history[1].notes is None

        raw = read_config(populated_workspace)["versionHistory"]
        assert raw[0]["version"] == "0.4"
        assert "notes" not in raw[1]

    def test_missing_config(self, workspace):
        with pytest.raises(ConfigNotFoundError):
            VersionManager(workspace).increment("minor")
        assert not workspace.timeline_path.exists()

    def test_invalid_version_leaves_config_untouched(self, workspace):
        write_config(workspace, version="one point oh")
        before = workspace.config_path.read_text()

        with pytest.raises(InvalidVersionError):
            VersionManager(workspace).increment("minor")

        assert workspace.config_path.read_text() == before
        assert not workspace.timeline_path.exists()

    def test_config_not_an_object(self, workspace):
        workspace.config_path.write_text("[]")
        with pytest.raises(DocHistoryError):
            VersionManager(workspace).load_config()


class TestDraftArchive:
    """Test suite for draft archiving on increment."""

    def test_archived_under_old_version(self, populated_workspace):
        (populated_workspace.drafts_dir / "current-draft.md").write_text("the 0.3 text")

        change = VersionManager(populated_workspace).increment("minor")

        assert change.draft_path == "drafts/draft-v0.3.md"
        assert (populated_workspace.drafts_dir / "draft-v0.3.md").read_text() == "the 0.3 text"
        assert read_config(populated_workspace)["versionHistory"][0]["draftPath"] == "drafts/draft-v0.3.md"

    def test_root_current_draft_fallback(self, workspace):
        write_config(workspace, version="0.1")
        (workspace.root / "current-draft.md").write_text("legacy location")

        change = VersionManager(workspace).increment("minor")

        assert change.draft_path == "drafts/draft-v0.1.md"
        assert (workspace.drafts_dir / "draft-v0.1.md").read_text() == "legacy location"

    def test_drafts_dir_preferred_over_root(self, workspace):
        write_config(workspace, version="0.1")
        workspace.drafts_dir.mkdir()
        (workspace.drafts_dir / "current-draft.md").write_text("preferred")
        (workspace.root / "current-draft.md").write_text("ignored")

        VersionManager(workspace).increment("minor")

        assert (workspace.drafts_dir / "draft-v0.1.md").read_text() == "preferred"

    def test_no_current_draft(self, populated_workspace):
        change = VersionManager(populated_workspace).increment("minor")
        assert change.draft_path is None
        assert not (populated_workspace.drafts_dir / "draft-v0.3.md").exists()

    def test_save_draft_disabled(self, populated_workspace):
        (populated_workspace.drafts_dir / "current-draft.md").write_text("text")
        change = VersionManager(populated_workspace).increment("minor", save_draft=False)
        assert change.draft_path is None
        assert not (populated_workspace.drafts_dir / "draft-v0.3.md").exists()


class TestUndecodableConfig:
    def test_non_utf8_config(self, workspace):
        workspace.config_path.write_bytes(b'{"version": "0.1", "title": "caf\xe9"}')
        with pytest.raises(DocHistoryError) as exc_info:
            VersionManager(workspace).increment("minor")
        assert "not valid UTF-8" in str(exc_info.value)
        assert not workspace.timeline_path.exists()
