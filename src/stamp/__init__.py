"""Note store backed by plain tab-separated text files.

Layout:
    ~/.stamp/
        <category>      # one store file per category:   <id>\t<date>\t<content>
    ~/.memo             # classic single store:           <id>\t<U|D|P>\t<date>\t<content>

Appends write to the end of the file. Every other mutation streams the store
through a transform into <store>.tmp and renames it over the original, so a
failed or interrupted mutation leaves the store untouched.
"""

from stamp.config import MEMO, STAMP, StoreConfig, load_config
from stamp.errors import (
    ConfigError,
    FormatError,
    NotFoundError,
    PatternError,
    StampError,
    StoreIOError,
    ValidationError,
)
from stamp.lines import LineStore, RecordCount
from stamp.models import Note, Status, decode, encode
from stamp.reader import CategoryDir, NoteStore, RewriteResult
from stamp.status import Mark

__all__ = [
    "MEMO",
    "STAMP",
    "CategoryDir",
    "ConfigError",
    "FormatError",
    "LineStore",
    "Mark",
    "Note",
    "NoteStore",
    "NotFoundError",
    "PatternError",
    "RecordCount",
    "RewriteResult",
    "StampError",
    "Status",
    "StoreConfig",
    "StoreIOError",
    "ValidationError",
    "decode",
    "encode",
    "load_config",
]
