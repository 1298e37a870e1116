"""
Display ordering for note lists.

Pinned notes come first, most recently pinned at the top. The rest follow,
most recently updated at the top. This is a presentation order applied by
the coordinator, not something the stores guarantee.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from webnotes.storage.schemas import Note

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def display_key(note: Note) -> tuple[int, float, float]:
    pinned_at = note.pinned_at if note.is_pinned and note.pinned_at else _EPOCH
    return (
        0 if note.is_pinned else 1,
        -pinned_at.timestamp() if note.is_pinned else 0.0,
        -note.updated_at.timestamp(),
    )


def sort_for_display(notes: Iterable[Note]) -> list[Note]:
    """Return notes in display order. The input is not modified."""
    return sorted(notes, key=display_key)
