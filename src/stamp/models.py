"""Note record, status codes, date rules and the line codec.

Store line layout (fields separated by a single tab, one note per line):

    <id>\t<date>\t<content>\n             # category stores (stamp)
    <id>\t<status>\t<date>\t<content>\n   # classic store (memo), status U | D | P

Content is everything after the date field. Tabs inside content are written
as-is and are not re-split on decode.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date as _date
from enum import Enum

from stamp.errors import FormatError, ValidationError

DATE_FORMAT = "%Y-%m-%d"
DATE_LEN = 10
_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


class Status(str, Enum):
    """Per-note status of the classic store."""

    UNDONE = "U"
    DONE = "D"
    POSTPONED = "P"

    @classmethod
    def from_code(cls, code: str) -> Status:
        try:
            return cls(code)
        except ValueError:
            msg = f"unknown status code: {code!r}"
            raise ValidationError(msg, value=code) from None


@dataclass
class Note:
    """A single store line."""

    id: int
    date: str                       # yyyy-mm-dd
    content: str
    status: Status | None = None    # classic store only

    @classmethod
    def from_line(cls, line: str, *, with_status: bool = False) -> Note:
        return decode(line, with_status=with_status)

    def to_line(self) -> str:
        return encode(self)

    def without_date(self) -> str:
        """Tree-view rendering: id, optional status, content."""
        if self.status is not None:
            return f"{self.id}\t{self.status.value}\t{self.content}"
        return f"{self.id}\t{self.content}"


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def is_valid_date(text: str) -> bool:
    """True for a yyyy-mm-dd string naming a real calendar day."""
    m = _DATE_RE.match(text)
    if m is None:
        return False
    year, month, day = (int(g) for g in m.groups())
    if not 1 <= month <= 12:
        return False
    days = 29 if month == 2 and calendar.isleap(year) else calendar.mdays[month]
    return 1 <= day <= days


def validate_date(text: str) -> str:
    """Return text unchanged, or raise ValidationError naming what is wrong."""
    if is_valid_date(text):
        return text
    m = _DATE_RE.match(text)
    if m is None:
        msg = f"invalid date format: {text} (expected yyyy-mm-dd)"
    elif not 1 <= int(m.group(2)) <= 12:
        msg = f"invalid month {int(m.group(2))} in {text}"
    else:
        msg = f"invalid day {int(m.group(3))} in {text}"
    raise ValidationError(msg, value=text)


def today() -> str:
    return _date.today().strftime(DATE_FORMAT)


def strip_newlines(content: str) -> str:
    """Collapse multi-line input into a single store line."""
    return content.replace("\n", "")


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def decode(line: str, *, with_status: bool = False) -> Note:
    """Parse one store line. Raises FormatError if it is not a note."""
    text = line[:-1] if line.endswith("\n") else line
    nfields = 4 if with_status else 3
    parts = text.split("\t", nfields - 1)

    raw_id = parts[0]
    if not raw_id:
        raise FormatError(line, "missing id")
    if not (raw_id.isascii() and raw_id.isdigit()) or int(raw_id) == 0:
        raise FormatError(line, "id is not a positive integer")
    if len(parts) < nfields:
        raise FormatError(line, "missing field")

    status: Status | None = None
    if with_status:
        try:
            status = Status.from_code(parts[1])
        except ValidationError:
            raise FormatError(line, "unknown status") from None

    date, content = parts[-2], parts[-1]
    if len(date) != DATE_LEN:
        raise FormatError(line, "date field is not yyyy-mm-dd")

    return Note(id=int(raw_id), date=date, content=content, status=status)


def try_decode(line: str, *, with_status: bool = False) -> Note | None:
    """decode() for scans: blank or malformed lines yield None."""
    if not line.strip():
        return None
    try:
        return decode(line, with_status=with_status)
    except FormatError:
        return None


def encode(note: Note) -> str:
    if note.status is not None:
        return f"{note.id}\t{note.status.value}\t{note.date}\t{note.content}\n"
    return f"{note.id}\t{note.date}\t{note.content}\n"
