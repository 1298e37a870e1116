"""
Tentative State.

Optimistic edits a caller shows before the coordinator has confirmed them:
keystrokes in the editor, a pin toggle that should move the note right away.

The patches live here, never in a store. A caller projects them over the
committed notes it last received and drops each patch once the store's own
result arrives (or the call fails).

Usage:
    tentative = TentativeNotes()
    tentative.stage_pin_toggle(note)
    shown = tentative.project(committed)
    committed_note = await coordinator.pin_note(note.id)
    tentative.resolve(note.id)
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from webnotes.core.utils import utc_now
from webnotes.storage.ordering import sort_for_display
from webnotes.storage.schemas import Note

_PATCHABLE = frozenset({"title", "content", "folder_id", "is_pinned", "pinned_at"})


class TentativeNotes:
    """Pending per-note patches merged over committed state on read."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._patches: dict[str, dict[str, Any]] = {}
        self._clock = clock

    @property
    def pending(self) -> frozenset[str]:
        """Ids of notes with an unconfirmed patch."""
        return frozenset(self._patches)

    def stage(self, note_id: str, **changes: Any) -> None:
        """Record field changes for a note, merged with any earlier patch."""
        unknown = set(changes) - _PATCHABLE
        if unknown:
            raise ValueError(f"Cannot stage fields: {', '.join(sorted(unknown))}")
        patch = self._patches.setdefault(note_id, {})
        patch.update(changes)
        patch["updated_at"] = self._clock()

    def stage_pin_toggle(self, note: Note) -> Note:
        """Stage the pin toggle of a note and return how it will look."""
        current = self.apply(note)
        pinned = not current.is_pinned
        self.stage(
            note.id,
            is_pinned=pinned,
            pinned_at=self._clock() if pinned else None,
        )
        return self.apply(note)

    def apply(self, note: Note) -> Note:
        """Return the note with its pending patch applied."""
        patch = self._patches.get(note.id)
        if not patch:
            return note
        return note.model_copy(update=patch)

    def project(self, committed: Iterable[Note]) -> list[Note]:
        """Merge pending patches over committed notes, in display order."""
        return sort_for_display(self.apply(n) for n in committed)

    def resolve(self, note_id: str) -> None:
        """Drop the patch for a note once its committed result is known."""
        self._patches.pop(note_id, None)

    def clear(self) -> None:
        self._patches.clear()
