"""Common fixtures for the note store tests."""

from pathlib import Path

import pytest

from stamp.reader import NoteStore


@pytest.fixture
def stamp_store(tmp_path: Path) -> NoteStore:
    """A category store without a status column."""
    return NoteStore(tmp_path / "work")


@pytest.fixture
def memo_store(tmp_path: Path) -> NoteStore:
    """A classic store with U/D/P statuses."""
    return NoteStore(tmp_path / ".memo", with_status=True)


@pytest.fixture
def five_notes(stamp_store: NoteStore) -> NoteStore:
    for i in range(1, 6):
        stamp_store.add(f"note {i}", date=f"2024-01-0{i}")
    return stamp_store
