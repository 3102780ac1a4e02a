"""HTML export of a store: one table row per note."""

from __future__ import annotations

import html as _html
from pathlib import Path
from typing import TYPE_CHECKING

from stamp.errors import StoreIOError
from stamp.query import list_notes

if TYPE_CHECKING:
    from stamp.models import Note
    from stamp.reader import NoteStore

_STYLE = "td{font-family: monospace; white-space: pre;}"


def render_html(notes: list[Note], title: str) -> str:
    esc = _html.escape
    rows = []
    for note in notes:
        cells = [str(note.id)]
        if note.status is not None:
            cells.append(note.status.value)
        cells += [note.date, note.content]
        rows.append("<tr>" + "".join(f"<td>{esc(c)}</td>" for c in cells) + "</tr>")
    body = "\n".join(rows)
    return f"""\
<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<title>{esc(title)}</title>
<style>{_STYLE}</style>
</head>
<body>
<h1>{esc(title)}</h1>
<table>
{body}
</table>
</body>
</html>
"""


def export_html(store: NoteStore, path: Path | str, title: str) -> Path | None:
    """Write every note of store to path as HTML. Returns None for an empty store."""
    notes = list(list_notes(store))
    if not notes:
        return None
    out = Path(path)
    try:
        out.write_text(render_html(notes, title), encoding="utf-8")
    except OSError as exc:
        msg = f"failed to open {out}: {exc.strerror or exc}"
        raise StoreIOError(msg, out) from exc
    return out
