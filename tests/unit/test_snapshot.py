"""Tests for state snapshot capture."""

from dochistory.history.snapshot import capture_current_state, extract_status, latest_draft
from dochistory.schema import parse_timestamp


class TestLatestDraft:
    """Test suite for latest_draft selection."""

    def test_no_drafts_dir(self, workspace):
        assert latest_draft(workspace) is None

    def test_empty_drafts_dir(self, workspace):
        workspace.drafts_dir.mkdir()
        (workspace.drafts_dir / "notes.txt").write_text("not a draft")
        assert latest_draft(workspace) is None

    def test_greatest_name_wins(self, workspace):
        """Selection is by file name, not modification time."""
        workspace.drafts_dir.mkdir()
        (workspace.drafts_dir / "draft-010.md").write_text("ten")
        (workspace.drafts_dir / "draft-002.md").write_text("two")  # written last
        assert latest_draft(workspace).name == "draft-010.md"


class TestExtractStatus:
    """Test suite for extract_status."""

    def test_status_present(self):
        assert extract_status('{"status": "review"}') == "review"

    def test_missing_config(self):
        assert extract_status(None) == "unknown"

    def test_invalid_json(self):
        assert extract_status("{not json") == "unknown"

    def test_no_status_key(self):
        assert extract_status('{"title": "x"}') == "unknown"

    def test_non_object(self):
        assert extract_status("[1, 2]") == "unknown"


class TestCaptureCurrentState:
    """Test suite for capture_current_state."""

    def test_empty_workspace(self, workspace):
        """Nothing tracked exists: every artifact is absent, status unknown."""
        snapshot = capture_current_state(workspace)

        assert snapshot.status == "unknown"
        assert snapshot.config.exists is False
        assert snapshot.config.content is None
        assert snapshot.outline.exists is False
        assert snapshot.current_draft.exists is False
        parse_timestamp(snapshot.timestamp)

    def test_populated_workspace(self, populated_workspace):
        snapshot = capture_current_state(populated_workspace)

        assert snapshot.status == "drafting"
        assert snapshot.config.exists is True
        assert snapshot.config.content == populated_workspace.config_path.read_text()
        assert snapshot.outline.content == "# Outline\n\n1. Opening\n2. Middle\n"
        assert snapshot.current_draft.content == "second draft"

    def test_content_captured_exactly(self, workspace):
        """Line endings and trailing whitespace are not normalised."""
        workspace.outline_path.write_bytes(b"line one\r\nline two  \r\n\r\n")
        snapshot = capture_current_state(workspace)
        assert snapshot.outline.content == "line one\r\nline two  \r\n\r\n"

    def test_invalid_config_degrades_status_only(self, workspace):
        """A config that does not parse is still captured verbatim."""
        workspace.config_path.write_text("{oops")
        snapshot = capture_current_state(workspace)

        assert snapshot.status == "unknown"
        assert snapshot.config.exists is True
        assert snapshot.config.content == "{oops"

    def test_empty_file_is_present(self, workspace):
        workspace.outline_path.write_text("")
        snapshot = capture_current_state(workspace)
        assert snapshot.outline.exists is True
        assert snapshot.outline.content == ""

    def test_serialised_keys_are_camel_case(self, populated_workspace):
        data = capture_current_state(populated_workspace).model_dump(by_alias=True)
        assert "currentDraft" in data


class TestUndecodableFiles:
    """Files that are not valid UTF-8 are still captured."""

    def test_latin1_draft_is_captured_with_replacement(self, populated_workspace):
        (populated_workspace.drafts_dir / "draft-003.md").write_bytes(b"caf\xe9 latin-1")

        snapshot = capture_current_state(populated_workspace)

        assert snapshot.current_draft.exists is True
        assert snapshot.current_draft.content == "caf\ufffd latin-1"

    def test_undecodable_config_degrades_status(self, workspace):
        workspace.config_path.write_bytes(b'{"status": "dr\xffft"}')
        snapshot = capture_current_state(workspace)
        assert snapshot.config.exists is True
        assert snapshot.status == "dr\ufffdft"
