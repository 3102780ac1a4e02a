"""stamp / memo CLI: notes kept in tab-separated text files.

stamp (one store file per category under ~/.stamp):
    stamp add CATEGORY CONTENT [DATE]   add a note, optionally dated yyyy-mm-dd
    stamp import CATEGORY               add one note per stdin line
    stamp show CATEGORY                 list notes
    stamp latest CATEGORY N             list the last N notes
    stamp tree CATEGORY                 list notes grouped by date
    stamp find CATEGORY TEXT            substring search
    stamp grep CATEGORY REGEX           case-insensitive BRE search
    stamp replace CATEGORY ID VALUE     replace the date (if VALUE is one) or content
    stamp delete CATEGORY ID            delete a note
    stamp drop CATEGORY                 delete the whole category
    stamp export CATEGORY PATH          write notes as HTML
    stamp categories                    list categories with note counts
    stamp path                          print the base directory
    stamp info                          show settings and note counts

memo (single ~/.memo file with U/D/P statuses):
    memo                                list notes except postponed
    memo done ID / undone ID / postpone ID
    memo done-all                       mark every undone note done
    memo purge                          delete all done notes
    ... plus add, import, show, latest, tree, find, grep, replace, delete,
    drop, export, path, info as above without CATEGORY.
"""

from __future__ import annotations

import contextlib
import logging
import sys
from typing import TYPE_CHECKING

import click

from stamp.config import MEMO, STAMP, Layout, StoreConfig, load_config
from stamp.errors import StampError
from stamp.export import export_html
from stamp.models import Status
from stamp.query import latest, list_by_status, list_notes, search, search_regex, tree
from stamp.status import Mark

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from stamp.models import Note
    from stamp.query import SearchResult
    from stamp.reader import NoteStore

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@contextlib.contextmanager
def _reported() -> Iterator[None]:
    """Turn store errors into a click error message and exit status 1."""
    try:
        yield
    except StampError as exc:
        raise click.ClickException(str(exc)) from exc


def _load_cfg(layout: Layout, verbose: bool) -> StoreConfig:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(message)s")
    with _reported():
        cfg = load_config(layout)
        cfg.ensure()
    return cfg


def _cfg() -> StoreConfig:
    return click.get_current_context().find_object(StoreConfig)


def _echo_notes(notes: Iterable[Note]) -> int:
    n = 0
    for note in notes:
        click.echo(note.to_line(), nl=False)
        n += 1
    return n


def _echo_tree(store: NoteStore) -> None:
    for date, notes in tree(store).items():
        click.echo(date)
        for note in notes:
            click.echo(f"\t{note.without_date()}")


def _echo_search(result: SearchResult) -> None:
    _echo_notes(result.notes)
    if result.error:
        click.echo(f"Error: {result.error}", err=True)
        raise SystemExit(1)
    if not result.count:
        raise SystemExit(2)


def _info_table(title: str, rows: list[tuple[str, str]]) -> None:
    from rich.console import Console
    from rich.table import Table

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Setting", style="dim", no_wrap=True)
    table.add_column("Value")

    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as _pkg_version
    try:
        _ver = _pkg_version("stamp")
    except PackageNotFoundError:
        _ver = "unknown"
    table.add_row("Version", _ver)
    for key, value in rows:
        table.add_row(key, value)
    Console().print(table)


def _confirm_remove(store: NoteStore, yes: bool) -> None:
    if _cfg().confirm_delete and not yes and not click.confirm("Really delete?", default=False):
        click.echo("Aborted.")
        return
    store.remove()
    click.echo(f"Removed {store.path}")


# ---------------------------------------------------------------------------
# stamp: category stores
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="stamp")
@click.option("--verbose", "-v", is_flag=True, help="Log store operations to stderr")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """stamp: Unix-style notes, one file per category."""
    ctx.obj = _load_cfg(STAMP, verbose)


def _store(category: str) -> NoteStore:
    return _cfg().store(category)


@cli.command()
@click.argument("category")
@click.argument("content")
@click.argument("date", required=False)
def add(category: str, content: str, date: str | None) -> None:
    """Add a note, dated today unless DATE (yyyy-mm-dd) is given."""
    with _reported():
        note = _store(category).add(content, date=date)
    click.echo(note.id)


@cli.command("import")
@click.argument("category")
def import_(category: str) -> None:
    """Add one note per line read from stdin until EOF."""
    with _reported():
        notes = _store(category).add_many(sys.stdin)
    click.echo(f"Added {len(notes)} notes to {category}")


@cli.command()
@click.argument("category")
def show(category: str) -> None:
    """Show all notes of a category."""
    with _reported():
        _echo_notes(list_notes(_store(category)))


@cli.command("latest")
@click.argument("category")
@click.argument("n", type=int)
def latest_cmd(category: str, n: int) -> None:
    """Show the last N notes (all of them if N is negative)."""
    with _reported():
        _echo_notes(latest(_store(category), n))


@cli.command("tree")
@click.argument("category")
def tree_cmd(category: str) -> None:
    """Show notes grouped by date.

    \b
    2014-11-01
        1   Do dishes
        2   Pay rent
    2014-11-02
        3   Go shopping
    """
    with _reported():
        _echo_tree(_store(category))


@cli.command()
@click.argument("category")
@click.argument("text")
def find(category: str, text: str) -> None:
    """Find notes containing TEXT (case-sensitive). Exits 2 when nothing matches."""
    with _reported():
        result = search(_store(category), text)
    _echo_search(result)


@cli.command()
@click.argument("category")
@click.argument("regex")
def grep(category: str, regex: str) -> None:
    """Find notes matching a POSIX basic REGEX, ignoring case. Exits 2 when nothing matches."""
    with _reported():
        result = search_regex(_store(category), regex)
    _echo_search(result)


@cli.command()
@click.argument("category")
@click.argument("note_id", type=int)
@click.argument("value")
def replace(category: str, note_id: int, value: str) -> None:
    """Replace the date of a note if VALUE is a valid date, otherwise its content."""
    with _reported():
        note = _store(category).replace_field(note_id, value)
    click.echo(note.to_line(), nl=False)


@cli.command()
@click.argument("category")
@click.argument("note_id", type=int)
def delete(category: str, note_id: int) -> None:
    """Delete a note by ID."""
    with _reported():
        _store(category).delete(note_id)
    click.echo(f"note {note_id} removed from category {category}")


@cli.command()
@click.argument("category")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def drop(category: str, yes: bool) -> None:
    """Delete all notes of a category (removes its file)."""
    with _reported():
        _confirm_remove(_store(category), yes)


@cli.command()
@click.argument("category")
@click.argument("path", type=click.Path(dir_okay=False))
def export(category: str, path: str) -> None:
    """Export a category as an HTML table."""
    with _reported():
        out = export_html(_store(category), path, title=f"Notes from Stamp, {category}")
    click.echo(f"Exported to {out}" if out else "Nothing to export.")


@cli.command()
def categories() -> None:
    """List categories with their note counts."""
    with _reported():
        found = _cfg().categories().list_categories()
    for name, count in found:
        if count.empty:
            click.echo(f"{name} (empty)")
        else:
            click.echo(f"{name} ({count.total} {'note' if count.total == 1 else 'notes'})")
    if not found:
        raise SystemExit(2)


@cli.command()
def path() -> None:
    """Print the base directory."""
    click.echo(_cfg().store_path(""))


@cli.command()
def info() -> None:
    """Show the base directory, settings and note counts per category."""
    cfg = _cfg()
    with _reported():
        found = cfg.categories().list_categories()
    rows = [
        ("Base directory", str(cfg.path)),
        ("Config", str(cfg.rc_path) if cfg.rc_path and cfg.rc_path.is_file() else "[dim]none[/dim]"),
        ("Confirm delete", "yes" if cfg.confirm_delete else "no"),
        ("Categories", str(len(found))),
    ]
    rows += [(f"  {name}", str(count.total)) for name, count in found]
    rows.append(("Notes", str(sum(count.total for _, count in found))))
    _info_table("stamp", rows)


# ---------------------------------------------------------------------------
# memo: classic single store with statuses
# ---------------------------------------------------------------------------


@click.group(invoke_without_command=True)
@click.version_option(package_name="stamp")
@click.option("--verbose", "-v", is_flag=True, help="Log store operations to stderr")
@click.pass_context
def memo(ctx: click.Context, verbose: bool) -> None:
    """memo: a single note file with done/undone/postponed statuses.

    Without a command, shows every note except postponed ones.
    """
    ctx.obj = _load_cfg(MEMO, verbose)
    if ctx.invoked_subcommand is None:
        with _reported():
            _echo_notes(list_notes(ctx.obj.store(), include_postponed=False))


def _memo_store() -> NoteStore:
    return _cfg().store()


@memo.command("add")
@click.argument("content")
@click.argument("date", required=False)
def memo_add(content: str, date: str | None) -> None:
    """Add a note. CONTENT "-" reads a single line from stdin."""
    if content == "-":
        content = sys.stdin.readline()
    with _reported():
        note = _memo_store().add(content, date=date)
    click.echo(note.id)


@memo.command("import")
def memo_import() -> None:
    """Add one note per line read from stdin until EOF."""
    with _reported():
        notes = _memo_store().add_many(sys.stdin)
    click.echo(f"Added {len(notes)} notes")


@memo.command("show")
@click.option("--undone", "-u", "only", flag_value="undone", help="Only undone notes")
@click.option("--postponed", "-P", "only", flag_value="postponed", help="Only postponed notes")
def memo_show(only: str | None) -> None:
    """Show notes (postponed ones only with --postponed)."""
    store = _memo_store()
    with _reported():
        if only == "undone":
            _echo_notes(list_by_status(store, Status.UNDONE))
        elif only == "postponed":
            _echo_notes(list_by_status(store, Status.POSTPONED))
        else:
            _echo_notes(list_notes(store, include_postponed=False))


@memo.command("latest")
@click.argument("n", type=int)
def memo_latest(n: int) -> None:
    """Show the last N notes (all of them if N is negative)."""
    with _reported():
        _echo_notes(latest(_memo_store(), n))


@memo.command("tree")
def memo_tree() -> None:
    """Show notes grouped by date."""
    with _reported():
        _echo_tree(_memo_store())


@memo.command("find")
@click.argument("text")
def memo_find(text: str) -> None:
    """Find notes containing TEXT (case-sensitive)."""
    with _reported():
        result = search(_memo_store(), text)
    _echo_search(result)


@memo.command("grep")
@click.argument("regex")
def memo_grep(regex: str) -> None:
    """Find notes matching a POSIX basic REGEX, ignoring case."""
    with _reported():
        result = search_regex(_memo_store(), regex)
    _echo_search(result)


@memo.command("replace")
@click.argument("note_id", type=int)
@click.argument("value")
def memo_replace(note_id: int, value: str) -> None:
    """Replace the date of a note if VALUE is a valid date, otherwise its content."""
    with _reported():
        note = _memo_store().replace_field(note_id, value)
    click.echo(note.to_line(), nl=False)


@memo.command("delete")
@click.argument("note_id", type=int)
def memo_delete(note_id: int) -> None:
    """Delete a note by ID."""
    with _reported():
        _memo_store().delete(note_id)
    click.echo(f"note {note_id} removed")


def _mark(note_id: int, mark: Mark) -> None:
    with _reported():
        note = _memo_store().mark(note_id, mark)
    click.echo(note.to_line(), nl=False)


@memo.command("done")
@click.argument("note_id", type=int)
def memo_done(note_id: int) -> None:
    """Mark a note as done."""
    _mark(note_id, Mark.DONE)


@memo.command("undone")
@click.argument("note_id", type=int)
def memo_undone(note_id: int) -> None:
    """Mark a note as undone."""
    _mark(note_id, Mark.UNDONE)


@memo.command("postpone")
@click.argument("note_id", type=int, required=False)
def memo_postpone(note_id: int | None) -> None:
    """Postpone an undone note; without ID, show postponed notes."""
    if note_id is None:
        with _reported():
            _echo_notes(list_by_status(_memo_store(), Status.POSTPONED))
        return
    _mark(note_id, Mark.POSTPONED)


@memo.command("done-all")
def memo_done_all() -> None:
    """Mark every undone note as done (postponed notes are left alone)."""
    with _reported():
        n = _memo_store().mark_all_done()
    click.echo(f"Marked {n} notes done")


@memo.command("purge")
def memo_purge() -> None:
    """Delete all notes marked as done."""
    with _reported():
        n = _memo_store().delete_done()
    click.echo(f"Deleted {n} done notes")


@memo.command("drop")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def memo_drop(yes: bool) -> None:
    """Delete all notes (removes the memo file)."""
    with _reported():
        _confirm_remove(_memo_store(), yes)


@memo.command("export")
@click.argument("path", type=click.Path(dir_okay=False))
def memo_export(path: str) -> None:
    """Export notes as an HTML table."""
    with _reported():
        out = export_html(_memo_store(), path, title="Notes from Memo")
    click.echo(f"Exported to {out}" if out else "Nothing to export.")


@memo.command("path")
def memo_path() -> None:
    """Print the memo file path."""
    click.echo(_cfg().store_path())


@memo.command("info")
def memo_info() -> None:
    """Show the memo file, settings and note counts per status."""
    cfg = _cfg()
    counts = dict.fromkeys(Status, 0)
    with _reported():
        for note in _memo_store().iter_notes():
            counts[note.status] += 1
    rows = [
        ("Memo file", str(cfg.path)),
        ("Config", str(cfg.rc_path) if cfg.rc_path and cfg.rc_path.is_file() else "[dim]none[/dim]"),
        ("Confirm delete", "yes" if cfg.confirm_delete else "no"),
        ("Notes", str(sum(counts.values()))),
        ("  Undone", str(counts[Status.UNDONE])),
        ("  Done", str(counts[Status.DONE])),
        ("  Postponed", str(counts[Status.POSTPONED])),
    ]
    _info_table("memo", rows)


if __name__ == "__main__":
    cli()
