"""StoreConfig: where notes live and whether deletes ask for confirmation.

Two layouts:

    ~/.stamp/             # stamp: base directory, one store file per category
        work
        shopping
    ~/.memo               # memo: a single store file with a status column

Each setting is resolved in order:

    1. environment variable (STAMP_PATH, STAMP_CONFIRM_DELETE, MEMO_PATH, ...)
    2. KEY=value line in ~/.stamprc or ~/.memorc
    3. default: ~/.stamp or ~/.memo, deletes confirmed

~/.stamprc example:

    STAMP_PATH=/home/me/notes
    STAMP_CONFIRM_DELETE=no

The resolved StoreConfig is passed explicitly to everything that opens a
store; nothing below the command layer reads the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from stamp.errors import ConfigError, StoreIOError
from stamp.reader import CategoryDir, NoteStore, check_category

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger("stamp.config")


@dataclass(frozen=True)
class Layout:
    prefix: str             # STAMP -> STAMP_PATH, STAMP_CONFIRM_DELETE, ~/.stamprc
    default_name: str       # under $HOME
    categorized: bool

    @property
    def rc_name(self) -> str:
        return f".{self.prefix.lower()}rc"


STAMP = Layout(prefix="STAMP", default_name=".stamp", categorized=True)
MEMO = Layout(prefix="MEMO", default_name=".memo", categorized=False)


@dataclass
class StoreConfig:
    """Resolved location and options for one layout."""

    path: Path                      # base directory (stamp) or store file (memo)
    categorized: bool = True
    confirm_delete: bool = True
    rc_path: Path | None = None

    @property
    def with_status(self) -> bool:
        return not self.categorized

    def store_path(self, category: str = "") -> Path:
        """Absolute path of a category's store; "" is the base directory itself."""
        if not self.categorized or not category:
            return self.path
        return self.path / check_category(category)

    def store(self, category: str = "") -> NoteStore:
        if self.categorized:
            return self.categories().store(category)
        return NoteStore(self.path, with_status=True)

    def categories(self) -> CategoryDir:
        return CategoryDir(self.path)

    def ensure(self) -> None:
        """Create the base directory (mode 0700) or the empty memo file."""
        try:
            if self.categorized:
                self.path.mkdir(parents=True, exist_ok=True, mode=0o700)
                self.path.chmod(0o700)
            else:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.touch(exist_ok=True)
        except OSError as exc:
            msg = f"failed to prepare {self.path}: {exc.strerror or exc}"
            raise StoreIOError(msg, self.path) from exc


def _load_rc(path: Path) -> dict[str, str]:
    """Parse a simple KEY=VALUE rc file (no external dependency)."""
    if not path.is_file():
        return {}
    values: dict[str, str] = {}
    try:
        text = path.read_text()
    except OSError as exc:
        logger.warning("could not read %s: %s", path, exc)
        return {}
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            k, _, v = line.partition("=")
            values[k.strip()] = v.strip().strip('"').strip("'")
    return values


def load_config(
    layout: Layout = STAMP,
    environ: Mapping[str, str] | None = None,
    home: Path | str | None = None,
) -> StoreConfig:
    """Resolve the store location for layout from environ, the rc file and defaults."""
    env = os.environ if environ is None else environ
    home_dir = Path(home) if home else (Path(env["HOME"]) if env.get("HOME") else None)

    rc_path = home_dir / layout.rc_name if home_dir else None
    rc = _load_rc(rc_path) if rc_path else {}

    def setting(name: str) -> str | None:
        key = f"{layout.prefix}_{name}"
        return env.get(key) or rc.get(key) or None

    raw_path = setting("PATH")
    if raw_path:
        path = Path(raw_path).expanduser()
    elif home_dir is not None:
        path = home_dir / layout.default_name
    else:
        msg = f"HOME is not set and {layout.prefix}_PATH is not configured"
        raise ConfigError(msg)

    confirm = setting("CONFIRM_DELETE")
    return StoreConfig(
        path=path.absolute(),
        categorized=layout.categorized,
        confirm_delete=(confirm or "").strip().lower() != "no",
        rc_path=rc_path,
    )
