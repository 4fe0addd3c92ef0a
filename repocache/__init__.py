"""repocache package initialization."""

from __future__ import annotations

from .cache import (
    CACHE_DB_VERSION,
    CacheIdentity,
    CacheState,
    ReconcileResult,
    commit,
    db_filename,
    probe,
    reconcile,
    remove_cache,
)
from .encoding import DirectoryGroup, decode, encode
from .errors import (
    CacheError,
    CommitError,
    ErrorKind,
    OpenError,
    ReadError,
    SchemaError,
    WriteError,
)
from .models import ChangelogEntry, Dependency, FileEntry, FileKind, Package

__all__ = [
    "__version__",
    "CACHE_DB_VERSION",
    "CacheError",
    "CacheIdentity",
    "CacheState",
    "ChangelogEntry",
    "CommitError",
    "Dependency",
    "DirectoryGroup",
    "ErrorKind",
    "FileEntry",
    "FileKind",
    "OpenError",
    "Package",
    "ReadError",
    "ReconcileResult",
    "SchemaError",
    "WriteError",
    "commit",
    "db_filename",
    "decode",
    "encode",
    "get_version",
    "probe",
    "reconcile",
    "remove_cache",
]

__version__ = "0.1.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
