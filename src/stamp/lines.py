"""Sequential, rewindable line access to a store file.

    with LineStore(path) as lines:
        count = lines.count()       # RecordCount; rewinds afterwards
        for line in lines:          # raw lines, newline stripped
            ...
        lines.rewind()              # restart the sequence

A missing file is an I/O error here; callers that want "missing means empty"
check for existence before opening.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from stamp.errors import StoreIOError

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class RecordCount:
    """Line count of a store.

    last_index is the raw line count minus one (the trailing line is not
    counted), or None for an empty file.
    """

    last_index: int | None

    @property
    def empty(self) -> bool:
        return self.last_index is None

    @property
    def total(self) -> int:
        """Number of raw lines in the file."""
        return 0 if self.last_index is None else self.last_index + 1


EMPTY = RecordCount(None)


class LineStore:
    """Forward-only line reader over one open store file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._fh: TextIO | None = None

    def open(self) -> LineStore:
        try:
            # lines end at "\n" only; a bare "\r" stays inside the line
            self._fh = self.path.open(encoding="utf-8", newline="\n")
        except OSError as exc:
            msg = f"error opening {self.path}: {exc.strerror or exc}"
            raise StoreIOError(msg, self.path) from exc
        return self

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> LineStore:
        return self.open() if self._fh is None else self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def _file(self) -> TextIO:
        if self._fh is None:
            msg = f"{self.path} is not open"
            raise StoreIOError(msg, self.path)
        return self._fh

    def rewind(self) -> None:
        self._file.seek(0)

    def count(self) -> RecordCount:
        """Count raw lines in one pass, then rewind."""
        self.rewind()
        n = 0
        while self.next_line() is not None:
            n += 1
        self.rewind()
        return EMPTY if n == 0 else RecordCount(n - 1)

    def next_line(self) -> str | None:
        """Return the next raw line without its newline, or None at end of store."""
        try:
            line = self._file.readline()
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"error reading {self.path}: {exc}"
            raise StoreIOError(msg, self.path) from exc
        if not line:
            return None
        return line[:-1] if line.endswith("\n") else line

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line
