"""Unit tests for webnotes.storage.ordering."""

from datetime import datetime, timedelta, timezone

from webnotes.storage.ordering import sort_for_display
from webnotes.storage.schemas import Note

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _note(note_id: str, updated: int, pinned_at: int | None = None) -> Note:
    return Note(
        id=note_id,
        created_at=T0,
        updated_at=T0 + timedelta(minutes=updated),
        is_pinned=pinned_at is not None,
        pinned_at=T0 + timedelta(minutes=pinned_at) if pinned_at is not None else None,
    )


class TestSortForDisplay:
    def test_pinned_first_by_most_recent_pin(self):
        notes = [
            _note("plain-old", updated=1),
            _note("pinned-early", updated=50, pinned_at=2),
            _note("plain-new", updated=90),
            _note("pinned-late", updated=3, pinned_at=10),
        ]

        assert [n.id for n in sort_for_display(notes)] == [
            "pinned-late", "pinned-early", "plain-new", "plain-old",
        ]

    def test_unpinned_by_most_recent_update(self):
        notes = [_note("a", 1), _note("b", 3), _note("c", 2)]
        assert [n.id for n in sort_for_display(notes)] == ["b", "c", "a"]

    def test_input_is_not_modified(self):
        notes = [_note("a", 1), _note("b", 2)]
        sort_for_display(notes)
        assert [n.id for n in notes] == ["a", "b"]

    def test_accepts_any_iterable(self):
        assert sort_for_display(iter([])) == []
