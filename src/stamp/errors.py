"""Exception hierarchy for the note store.

Every failure an operation can surface derives from StampError, so the
command layer can turn any of them into a diagnostic and a non-zero exit.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class StampError(Exception):
    """Base class for all note store errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class StoreIOError(StampError):
    """Opening, reading, writing or renaming a store file failed."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message, {"path": str(path)} if path is not None else None)
        self.path = Path(path) if path is not None else None


class FormatError(StampError):
    """A store line does not decode into a well-formed note."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"malformed line ({reason}): {line!r}", {"reason": reason})
        self.line = line
        self.reason = reason


class ValidationError(StampError):
    """User input (a date, content, a category name) was rejected."""

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message, {"value": value})
        self.value = value


class PatternError(ValidationError):
    """A search pattern failed to compile."""


class NotFoundError(StampError):
    """The note targeted by a mutation is not in the store."""

    def __init__(self, note_id: int, path: Path | str | None = None) -> None:
        where = f" in {path}" if path is not None else ""
        super().__init__(f"note with ID {note_id} not found{where}", {"note_id": note_id})
        self.note_id = note_id
        self.path = Path(path) if path is not None else None


class ConfigError(StampError):
    """The store location could not be resolved."""
