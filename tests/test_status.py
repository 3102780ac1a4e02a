"""Tests for status transitions on the classic store."""

import pytest

from stamp.errors import NotFoundError, ValidationError
from stamp.models import Note, Status
from stamp.status import Mark, apply_mark, transition

U, D, P = Status.UNDONE, Status.DONE, Status.POSTPONED


class TestTransition:
    @pytest.mark.parametrize(
        ("status", "mark", "expected"),
        [
            (U, Mark.DONE, D),
            (P, Mark.DONE, D),
            (D, Mark.DONE, D),
            (D, Mark.UNDONE, U),
            (P, Mark.UNDONE, U),
            (U, Mark.UNDONE, U),
            (U, Mark.POSTPONED, P),
            (D, Mark.POSTPONED, D),
            (P, Mark.POSTPONED, P),
        ],
    )
    def test_table(self, status, mark, expected):
        assert transition(status, mark) is expected

    def test_apply_mark_returns_same_note_when_unchanged(self):
        note = Note(id=1, date="2024-01-01", content="x", status=D)
        assert apply_mark(note, Mark.POSTPONED) is note

    def test_apply_mark_copies(self):
        note = Note(id=1, date="2024-01-01", content="x", status=U)
        done = apply_mark(note, Mark.DONE)
        assert done.status is D
        assert note.status is U


@pytest.fixture
def mixed(memo_store):
    memo_store.path.write_text(
        "1\tU\t2024-01-01\tone\n"
        "2\tD\t2024-01-01\ttwo\n"
        "3\tP\t2024-01-02\tthree\n"
        "4\tU\t2024-01-02\tfour\n"
        "5\tD\t2024-01-03\tfive\n"
    )
    return memo_store


def _statuses(store):
    return {n.id: n.status for n in store.iter_notes()}


class TestStoreMarks:
    def test_mark_done(self, mixed):
        assert mixed.mark(1, Mark.DONE).status is D
        assert _statuses(mixed)[1] is D

    def test_mark_undone_from_postponed(self, mixed):
        mixed.mark(3, Mark.UNDONE)
        assert _statuses(mixed)[3] is U

    def test_postpone_done_is_noop(self, mixed):
        before = mixed.path.read_bytes()
        note = mixed.mark(2, Mark.POSTPONED)
        assert note.status is D
        assert mixed.path.read_bytes() == before

    def test_mark_missing_id(self, mixed):
        with pytest.raises(NotFoundError):
            mixed.mark(77, Mark.DONE)

    def test_mark_only_touches_status_field(self, mixed):
        mixed.mark(4, Mark.POSTPONED)
        assert mixed.path.read_text().splitlines()[3] == "4\tP\t2024-01-02\tfour"

    def test_category_store_has_no_status(self, stamp_store):
        stamp_store.add("x")
        with pytest.raises(ValidationError):
            stamp_store.mark(1, Mark.DONE)


class TestBulk:
    def test_mark_all_done_leaves_postponed(self, mixed):
        assert mixed.mark_all_done() == 2
        assert _statuses(mixed) == {1: D, 2: D, 3: P, 4: D, 5: D}

    def test_delete_done_after_mark_all(self, mixed):
        mixed.mark_all_done()
        done = {i for i, s in _statuses(mixed).items() if s is D}
        assert mixed.delete_done() == len(done) == 4
        assert _statuses(mixed) == {3: P}

    def test_delete_done_keeps_order(self, mixed):
        mixed.delete_done()
        assert mixed.path.read_text() == (
            "1\tU\t2024-01-01\tone\n"
            "3\tP\t2024-01-02\tthree\n"
            "4\tU\t2024-01-02\tfour\n"
        )

    def test_mark_all_generic(self, mixed):
        assert mixed.mark_all(P, U) == 1
        assert _statuses(mixed)[3] is U

    def test_delete_where_status(self, mixed):
        assert mixed.delete_where_status(U) == 2
        assert list(_statuses(mixed)) == [2, 3, 5]
