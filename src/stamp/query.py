"""Read-only scans over a NoteStore: listing, search, latest N, date tree.

Every scan re-reads the store from disk in file order. Search results carry
the error that cut a scan short (if any) next to the notes found before it.
"""

from __future__ import annotations

import logging
import re
import string
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stamp.errors import PatternError, StoreIOError
from stamp.models import Status

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from stamp.models import Note
    from stamp.reader import NoteStore

logger = logging.getLogger("stamp.query")


@dataclass
class SearchResult:
    notes: list[Note] = field(default_factory=list)
    error: str | None = None     # set when the scan stopped early

    @property
    def count(self) -> int:
        return len(self.notes)


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


def list_notes(store: NoteStore, *, include_postponed: bool = True) -> Iterator[Note]:
    for note in store.iter_notes():
        if not include_postponed and note.status is Status.POSTPONED:
            continue
        yield note


def list_by_status(store: NoteStore, status: Status) -> Iterator[Note]:
    return (note for note in store.iter_notes() if note.status is status)


def latest(store: NoteStore, n: int) -> list[Note]:
    """Last n notes in file order; all notes when n is negative or too large."""
    if n < 0:
        return list(store.iter_notes())
    return list(deque(store.iter_notes(), maxlen=n))


def tree(store: NoteStore) -> dict[str, list[Note]]:
    """Group notes by date, dates in order of first appearance."""
    groups: dict[str, list[Note]] = {}
    for note in store.iter_notes():
        groups.setdefault(note.date, []).append(note)
    return groups


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def _scan(store: NoteStore, match: Callable[[str], bool]) -> SearchResult:
    result = SearchResult()
    try:
        for note in store.iter_notes():
            if match(note.content):
                result.notes.append(note)
    except StoreIOError as exc:
        logger.warning("search of %s stopped after %d hits: %s", store.path, result.count, exc)
        result.error = str(exc)
    return result


def search(store: NoteStore, term: str) -> SearchResult:
    """Case-sensitive substring match on content."""
    return _scan(store, lambda content: term in content)


def search_regex(store: NoteStore, pattern: str) -> SearchResult:
    """Case-insensitive POSIX basic regular expression match on content."""
    regex = compile_bre(pattern)
    return _scan(store, lambda content: regex.search(content) is not None)


def compile_bre(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(bre_to_regex(pattern), re.IGNORECASE)
    except re.error as exc:
        msg = f"invalid regexp {pattern!r}: {exc}"
        raise PatternError(msg, value=pattern) from exc


# ---------------------------------------------------------------------------
# BRE -> Python re
# ---------------------------------------------------------------------------

_POSIX_CLASSES = {
    "alpha": "a-zA-Z",
    "digit": "0-9",
    "alnum": "a-zA-Z0-9",
    "upper": "A-Z",
    "lower": "a-z",
    "space": " \\t\\n\\r\\f\\v",
    "blank": " \\t",
    "xdigit": "0-9A-Fa-f",
    "punct": "".join("\\" + c for c in string.punctuation),
    "cntrl": "\\x00-\\x1f\\x7f",
    "print": "\\x20-\\x7e",
    "graph": "\\x21-\\x7e",
}

_BOUND_RE = re.compile(r"\d+(,\d*)?")


def bre_to_regex(pattern: str) -> str:
    """Translate POSIX basic regular expression syntax to Python re syntax.

    In a BRE, ( ) { } | + ? are literals and their backslashed forms are
    operators (\\| \\+ \\? and \\w \\s \\b \\< \\> as GNU extensions). * is
    literal at the start of an expression, ^ is an anchor only at the start
    and $ only at the end.
    """
    out: list[str] = []
    i, n = 0, len(pattern)
    at_start = True
    while i < n:
        c = pattern[i]

        if c == "\\":
            if i + 1 >= n:
                msg = f"trailing backslash in {pattern!r}"
                raise PatternError(msg, value=pattern)
            nxt = pattern[i + 1]
            i += 2
            if nxt == "(":
                out.append("(")
                at_start = True
                continue
            if nxt == "{":
                end = pattern.find("\\}", i)
                if end < 0 or not _BOUND_RE.fullmatch(pattern[i:end]):
                    msg = f"invalid interval in {pattern!r}"
                    raise PatternError(msg, value=pattern)
                out.append("{" + pattern[i:end] + "}")
                i = end + 2
            elif nxt in ")|+?":
                out.append(nxt)
            elif nxt in "123456789wWsSbB":
                out.append("\\" + nxt)
            elif nxt in "<>":
                out.append("\\b")
            else:
                out.append(re.escape(nxt))
            at_start = nxt == "|"
            continue

        if c == "[":
            i, cls = _bracket(pattern, i)
            out.append(cls)
        elif c == "^":
            if at_start:
                out.append("^")
                # a * right after a leading ^ is literal
                if pattern.startswith("*", i + 1):
                    out.append("\\*")
                    i += 1
            else:
                out.append("\\^")
            i += 1
        elif c == "$":
            rest = pattern[i + 1:]
            anchor = rest == "" or rest.startswith(("\\)", "\\|"))
            out.append("$" if anchor else "\\$")
            i += 1
        elif c == "*":
            out.append("\\*" if at_start else "*")
            i += 1
        elif c == ".":
            out.append(".")
            i += 1
        else:
            out.append(re.escape(c))
            i += 1
        at_start = False

    return "".join(out)


def _bracket(pattern: str, start: int) -> tuple[int, str]:
    """Translate the bracket expression at pattern[start]; return (next index, class)."""
    n = len(pattern)
    j = start + 1
    negate = j < n and pattern[j] == "^"
    if negate:
        j += 1
    items: list[str] = []
    if j < n and pattern[j] == "]":
        items.append("\\]")
        j += 1
    while j < n and pattern[j] != "]":
        if pattern.startswith("[:", j):
            end = pattern.find(":]", j + 2)
            name = pattern[j + 2:end] if end >= 0 else ""
            if name not in _POSIX_CLASSES:
                msg = f"invalid character class in {pattern!r}"
                raise PatternError(msg, value=pattern)
            items.append(_POSIX_CLASSES[name])
            j = end + 2
            continue
        ch = pattern[j]
        # backslash is literal inside POSIX brackets
        items.append("\\" + ch if ch in "\\[]^&~|" else ch)
        j += 1
    if j >= n:
        msg = f"unmatched [ in {pattern!r}"
        raise PatternError(msg, value=pattern)
    return j + 1, "[" + ("^" if negate else "") + "".join(items) + "]"
