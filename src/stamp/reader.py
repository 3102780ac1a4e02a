"""Read and write note store files.

NoteStore is the public API:
    store = NoteStore("/home/me/.stamp/work")
    note = store.add("call the bank", date="2024-03-01")
    store.replace_field(note.id, "2024-03-02")
    store.delete(note.id)

Appends go straight to the end of the file. Every other mutation is a
rewrite: each line is streamed through a transform into <store>.tmp in the
same directory, and the temp file is renamed over the store only after the
whole pass succeeded. A failure before the rename leaves the store exactly
as it was.

No locking: two processes rewriting the same store concurrently can lose
one of the rewrites. Callers serialize access themselves.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

from stamp.errors import FormatError, NotFoundError, StoreIOError, ValidationError
from stamp.lines import EMPTY, LineStore, RecordCount
from stamp.models import (
    Note,
    Status,
    decode,
    encode,
    is_valid_date,
    strip_newlines,
    today,
    try_decode,
    validate_date,
)
from stamp.status import Mark, apply_mark, retag

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

logger = logging.getLogger("stamp.reader")

TEMP_SUFFIX = ".tmp"


@dataclass
class RewriteResult:
    """What a rewrite pass did to the store."""

    kept: int = 0
    modified: int = 0
    dropped: int = 0
    passed_through: int = 0     # malformed lines copied verbatim
    committed: bool = False     # temp file was swapped over the store

    @property
    def changed(self) -> bool:
        return bool(self.modified or self.dropped)


class NoteStore:
    """One store file: a category of the stamp layout, or the memo file."""

    def __init__(self, path: Path | str, *, with_status: bool = False) -> None:
        self.path = Path(path)
        self.with_status = with_status

    def __repr__(self) -> str:
        return f"NoteStore({str(self.path)!r}, with_status={self.with_status})"

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def temp_path(self) -> Path:
        return self.path.with_name(self.path.name + TEMP_SUFFIX)

    def exists(self) -> bool:
        return self.path.is_file()

    def lines(self) -> LineStore:
        """Open LineStore over the store file (use as a context manager)."""
        return LineStore(self.path).open()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def count(self) -> RecordCount:
        if not self.exists():
            return EMPTY
        with self.lines() as lines:
            return lines.count()

    def iter_notes(self) -> Iterator[Note]:
        """Yield every decodable note in file order. Missing store yields nothing."""
        if not self.exists():
            return
        with self.lines() as lines:
            for line in lines:
                note = try_decode(line, with_status=self.with_status)
                if note is None:
                    if line.strip():
                        logger.warning("%s: skipping malformed line %r", self.path, line)
                    continue
                yield note

    def get(self, note_id: int) -> Note | None:
        for note in self.iter_notes():
            if note.id == note_id:
                return note
        return None

    def next_id(self) -> int:
        """Id of the last line plus one; 1 for an empty or missing store.

        Only the final record is consulted: file order is trusted to be id
        order, so this is not a maximum over the whole file.
        """
        if not self.exists():
            return 1
        last: str | None = None
        with self.lines() as lines:
            for line in lines:
                if line.strip():
                    last = line
        if last is None:
            return 1
        return decode(last, with_status=self.with_status).id + 1

    # ------------------------------------------------------------------
    # Write: append
    # ------------------------------------------------------------------

    def add(self, content: str, date: str | None = None) -> Note:
        """Append a note. Newlines are stripped; date defaults to today."""
        content = strip_newlines(content)
        if not content:
            msg = "refusing to add an empty note"
            raise ValidationError(msg, value=content)
        note_date = validate_date(date) if date is not None else today()

        note = Note(
            id=self.next_id(),
            date=note_date,
            content=content,
            status=Status.UNDONE if self.with_status else None,
        )
        line = encode(note)
        try:
            if self._missing_final_newline():
                line = "\n" + line
            with self.path.open("a", encoding="utf-8", newline="") as f:
                f.write(line)
        except OSError as exc:
            msg = f"error appending to {self.path}: {exc.strerror or exc}"
            raise StoreIOError(msg, self.path) from exc
        logger.debug("%s: appended note %d", self.path, note.id)
        return note

    def add_many(self, lines: Iterable[str]) -> list[Note]:
        """Append one note per non-empty input line, dated today."""
        added: list[Note] = []
        for line in lines:
            content = strip_newlines(line)
            if not content:
                continue
            added.append(self.add(content))
        return added

    def _missing_final_newline(self) -> bool:
        if not self.exists():
            return False
        with self.path.open("rb") as f:
            f.seek(0, 2)
            if f.tell() == 0:
                return False
            f.seek(-1, 2)
            return f.read(1) != b"\n"

    # ------------------------------------------------------------------
    # Write: rewrite and swap
    # ------------------------------------------------------------------

    def rewrite(self, transform: Callable[[Note], Note | None]) -> RewriteResult:
        """Stream every note through transform into the temp file, then swap.

        transform returns the note unchanged (line kept verbatim), a new note
        (re-encoded) or None (dropped). Blank lines are not carried over;
        malformed lines are copied verbatim. When nothing was modified or
        dropped the temp file is discarded and the store is left byte-for-byte
        untouched.
        """
        result = RewriteResult()
        if not self.exists():
            logger.debug("%s: nothing to rewrite, store does not exist", self.path)
            return result

        tmp = self.temp_path
        try:
            with self.lines() as lines, tmp.open("w", encoding="utf-8", newline="") as out:
                for line in lines:
                    if not line.strip():
                        continue
                    try:
                        note = decode(line, with_status=self.with_status)
                    except FormatError:
                        logger.warning("%s: copying malformed line %r", self.path, line)
                        out.write(line + "\n")
                        result.passed_through += 1
                        continue
                    new = transform(note)
                    if new is None:
                        result.dropped += 1
                    elif new == note:
                        out.write(line + "\n")
                        result.kept += 1
                    else:
                        out.write(encode(new))
                        result.modified += 1
        except OSError as exc:
            logger.warning("%s: rewrite aborted, store left untouched", self.path)
            _discard(tmp)
            msg = f"failed writing {tmp}: {exc.strerror or exc}"
            raise StoreIOError(msg, tmp) from exc
        except BaseException:
            logger.warning("%s: rewrite aborted, store left untouched", self.path)
            _discard(tmp)
            raise

        if not result.changed:
            _discard(tmp)
            logger.debug("%s: rewrite changed nothing, store kept", self.path)
            return result

        try:
            tmp.replace(self.path)
        except OSError as exc:
            _discard(tmp)
            msg = f"could not rename {tmp} to {self.path}: {exc.strerror or exc}"
            raise StoreIOError(msg, self.path) from exc

        result.committed = True
        logger.debug(
            "%s: rewritten (kept=%d modified=%d dropped=%d)",
            self.path, result.kept, result.modified, result.dropped,
        )
        return result

    def delete(self, note_id: int) -> RewriteResult:
        """Remove the note with note_id. Raises NotFoundError if absent."""
        result = self.rewrite(lambda note: None if note.id == note_id else note)
        if not result.dropped:
            raise NotFoundError(note_id, self.path)
        return result

    def replace_field(self, note_id: int, value: str) -> Note:
        """Replace the date of a note if value is a valid date, else its content."""
        value = strip_newlines(value)
        if not value:
            msg = "replacement value is empty"
            raise ValidationError(msg, value=value)
        field = "date" if is_valid_date(value) else "content"
        updated: list[Note] = []

        def transform(note: Note) -> Note:
            if note.id != note_id:
                return note
            new = replace(note, **{field: value})
            updated.append(new)
            return new

        self.rewrite(transform)
        if not updated:
            raise NotFoundError(note_id, self.path)
        return updated[0]

    # ------------------------------------------------------------------
    # Write: statuses (classic store)
    # ------------------------------------------------------------------

    def _require_status(self) -> None:
        if not self.with_status:
            msg = f"{self.path} has no status field"
            raise ValidationError(msg, value=str(self.path))

    def mark(self, note_id: int, mark: Mark) -> Note:
        """Apply a status transition to one note and return it as stored."""
        self._require_status()
        matched: list[Note] = []

        def transform(note: Note) -> Note:
            if note.id != note_id:
                return note
            new = apply_mark(note, mark)
            matched.append(new)
            return new

        self.rewrite(transform)
        if not matched:
            raise NotFoundError(note_id, self.path)
        return matched[0]

    def mark_all(self, old: Status, new: Status) -> int:
        """Move every note with status old to new. Returns how many changed."""
        self._require_status()
        return self.rewrite(lambda note: retag(note, old, new)).modified

    def mark_all_done(self) -> int:
        return self.mark_all(Status.UNDONE, Status.DONE)

    def delete_where_status(self, status: Status) -> int:
        """Drop every note with the given status. Returns how many were dropped."""
        self._require_status()
        return self.rewrite(lambda note: None if note.status is status else note).dropped

    def delete_done(self) -> int:
        return self.delete_where_status(Status.DONE)

    # ------------------------------------------------------------------
    # Write: whole store
    # ------------------------------------------------------------------

    def remove(self) -> None:
        """Delete the store file itself."""
        try:
            self.path.unlink()
        except OSError as exc:
            msg = f"error removing {self.path}: {exc.strerror or exc}"
            raise StoreIOError(msg, self.path) from exc
        logger.debug("%s: removed", self.path)


def _discard(tmp: Path) -> None:
    with contextlib.suppress(OSError):
        tmp.unlink()


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def check_category(name: str) -> str:
    """Reject category names that would escape the base directory."""
    if name in (".", "..") or "/" in name or "\\" in name or "\0" in name:
        msg = f"invalid category name: {name!r}"
        raise ValidationError(msg, value=name)
    return name


class CategoryDir:
    """Base directory holding one store file per category."""

    def __init__(self, base_dir: Path | str) -> None:
        self.base_dir = Path(base_dir)

    def store(self, category: str) -> NoteStore:
        if not category:
            msg = "category name is required"
            raise ValidationError(msg, value=category)
        return NoteStore(self.base_dir / check_category(category))

    def list_categories(self) -> list[tuple[str, RecordCount]]:
        """Regular files in the base directory with their line counts, sorted by name."""
        try:
            entries = sorted(p for p in self.base_dir.iterdir() if p.is_file())
        except OSError as exc:
            msg = f"could not open {self.base_dir}: {exc.strerror or exc}"
            raise StoreIOError(msg, self.base_dir) from exc
        return [
            (p.name, NoteStore(p).count())
            for p in entries
            if not p.name.endswith(TEMP_SUFFIX)
        ]
