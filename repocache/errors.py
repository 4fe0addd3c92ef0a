"""Error types raised by the repocache store layer."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    OPEN = "open"
    SCHEMA = "schema"
    READ = "read"
    WRITE = "write"


class CacheError(RuntimeError):
    """Base class for cache failures; ``kind`` tells callers which step failed."""

    kind: ErrorKind = ErrorKind.WRITE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class OpenError(CacheError):
    """The cache file could not be opened, even after recreating it."""

    kind = ErrorKind.OPEN


class SchemaError(CacheError):
    """A table, index or trigger could not be created."""

    kind = ErrorKind.SCHEMA


class ReadError(CacheError):
    """Rows could not be read back from an existing cache."""

    kind = ErrorKind.READ


class WriteError(CacheError):
    kind = ErrorKind.WRITE


class CommitError(WriteError):
    """The identity row could not be written, so the cache is not fresh."""
