"""Status transitions for the classic store.

    Mark.DONE       U -> D, P -> D, D stays D
    Mark.UNDONE     D -> U, P -> U
    Mark.POSTPONED  U -> P only; D and P are written back unchanged

Bulk completion (mark_all_done) only touches U notes, so postponed items
are never resolved by it.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING

from stamp.models import Status

if TYPE_CHECKING:
    from stamp.models import Note


class Mark(Enum):
    DONE = "done"
    UNDONE = "undone"
    POSTPONED = "postponed"


_TRANSITIONS: dict[tuple[Mark, Status], Status] = {
    (Mark.DONE, Status.UNDONE): Status.DONE,
    (Mark.DONE, Status.POSTPONED): Status.DONE,
    (Mark.UNDONE, Status.DONE): Status.UNDONE,
    (Mark.UNDONE, Status.POSTPONED): Status.UNDONE,
    (Mark.POSTPONED, Status.UNDONE): Status.POSTPONED,
}


def transition(status: Status, mark: Mark) -> Status:
    """Next status for a single-note mark. Unlisted pairs keep the status."""
    return _TRANSITIONS.get((mark, status), status)


def apply_mark(note: Note, mark: Mark) -> Note:
    """Return note with the transition applied (the same object if unchanged)."""
    if note.status is None:
        return note
    new_status = transition(note.status, mark)
    if new_status is note.status:
        return note
    return replace(note, status=new_status)


def retag(note: Note, old: Status, new: Status) -> Note:
    """Bulk transition: switch note to new only if it currently has old."""
    if note.status is not old:
        return note
    return replace(note, status=new)
