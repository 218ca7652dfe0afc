"""Tests for the edit history store.

Tests push/truncate, undo/redo, reset and discard notifications.
"""

import pytest

from pixshop.editing.history import HistoryStore
from pixshop.errors import NoOpError


@pytest.fixture
def artifacts(make_artifact):
    """Five distinct artifacts A0..A4."""
    return [make_artifact(color=(index * 40, 0, 0), filename=f"a{index}.png") for index in range(5)]


def build_history(artifacts, count: int, on_discard=None) -> HistoryStore:
    history = HistoryStore(on_discard=on_discard)
    history.push(artifacts[0])
    for index in range(1, count):
        history.push(artifacts[index], f"step {index}")
    return history


class TestHistoryStore:
    """Test HistoryStore basics."""

    def test_empty_history(self):
        """Test the invariants of an empty history."""
        history = HistoryStore()

        assert len(history) == 0
        assert history.cursor == -1
        assert history.current is None
        assert history.original is None
        assert history.can_undo is False
        assert history.can_redo is False

    def test_push_selects_new_entry(self, artifacts):
        """Test that push appends and moves the cursor to the end."""
        history = build_history(artifacts, 3)

        assert len(history) == 3
        assert history.cursor == 2
        assert history.current.artifact is artifacts[2]
        assert history.original.artifact is artifacts[0]
        assert history.original.action_description is None

    @pytest.mark.parametrize("count,cursor", [(1, 0), (3, 0), (3, 1), (5, 2), (5, 4)])
    def test_push_truncates_after_cursor(self, artifacts, make_artifact, count, cursor):
        """Test that pushing at cursor c yields length c+2 and cursor c+1."""
        history = build_history(artifacts, count)
        while history.cursor > cursor:
            history.undo()

        history.push(make_artifact(filename="new.png"), "new")

        assert len(history) == cursor + 2
        assert history.cursor == cursor + 1
        assert history.current.artifact.filename == "new.png"

    def test_undo_redo_round_trip(self, artifacts):
        """Test that undo then redo restores the identical artifact."""
        history = build_history(artifacts, 3)
        before = history.current.artifact

        history.undo()
        assert history.cursor == 1
        history.redo()

        assert history.cursor == 2
        assert history.current.artifact is before

    def test_undo_at_original_raises(self, artifacts):
        """Test that undo with nothing to undo reports a no-op."""
        history = build_history(artifacts, 1)

        with pytest.raises(NoOpError):
            history.undo()
        assert history.cursor == 0

    def test_redo_at_tip_raises(self, artifacts):
        """Test that redo with nothing to redo reports a no-op."""
        history = build_history(artifacts, 2)

        with pytest.raises(NoOpError):
            history.redo()
        assert history.cursor == 1

    def test_clear(self, artifacts):
        """Test that clear empties the history."""
        history = build_history(artifacts, 3)

        history.clear()

        assert len(history) == 0
        assert history.cursor == -1


class TestResetToOriginal:
    """Test reset semantics."""

    def test_reset_moves_cursor_only(self, artifacts):
        """Test that reset keeps later entries reachable by redo."""
        history = build_history(artifacts, 3)

        history.reset_to_original()

        assert history.cursor == 0
        assert len(history) == 3
        assert history.can_redo is True

    def test_push_after_reset_truncates_to_original(self, artifacts, make_artifact):
        """Test that the first edit after reset drops the old branch."""
        history = build_history(artifacts, 4)
        history.reset_to_original()

        history.push(make_artifact(filename="fresh.png"), "fresh")

        assert len(history) == 2
        assert history.cursor == 1
        assert [entry.artifact.filename for entry in history.entries] == ["a0.png", "fresh.png"]

    def test_reset_with_discard_redo(self, artifacts):
        """Test that reset can drop later entries eagerly."""
        discarded = []
        history = build_history(artifacts, 3, on_discard=discarded.append)

        history.reset_to_original(discard_redo=True)

        assert len(history) == 1
        assert history.cursor == 0
        assert [entry.artifact.filename for entry in discarded] == ["a1.png", "a2.png"]


class TestDiscardNotifications:
    """Test on_discard callbacks."""

    def test_truncated_entries_are_reported(self, artifacts, make_artifact):
        """Test that entries cut off by a push are reported once."""
        discarded = []
        history = build_history(artifacts, 4, on_discard=discarded.append)
        history.undo()
        history.undo()

        history.push(make_artifact(filename="branch.png"), "branch")

        assert [entry.artifact.filename for entry in discarded] == ["a2.png", "a3.png"]

    def test_clear_reports_every_entry(self, artifacts):
        """Test that clearing reports all entries."""
        discarded = []
        history = build_history(artifacts, 3, on_discard=discarded.append)

        history.clear()

        assert len(discarded) == 3


class TestRecordedActions:
    """Test recorded_actions."""

    def test_descriptions_up_to_cursor(self, artifacts):
        """Test that only entries 1..cursor are recorded."""
        history = build_history(artifacts, 4)
        history.undo()

        assert history.recorded_actions() == ["step 1", "step 2"]

    def test_original_only_records_nothing(self, artifacts):
        """Test that a fresh history has no recorded actions."""
        assert build_history(artifacts, 1).recorded_actions() == []
