"""Utility helpers for filesystem access and path handling."""

from __future__ import annotations

import hashlib
from pathlib import Path

from .cache import db_filename

_READ_CHUNK_SIZE = 1024 * 1024


def resolve_file(path: Path | str) -> Path:
    """Resolve and validate a user supplied file path."""
    file_path = Path(path).expanduser().resolve()
    if not file_path.exists():
        raise FileNotFoundError(f"File does not exist: {file_path}")
    if not file_path.is_file():
        raise IsADirectoryError(f"Path is not a file: {file_path}")
    return file_path


def file_checksum(path: Path | str, checksum_type: str = "sha256") -> str:
    """Return the hex digest of the file at *path*."""

    try:
        digest = hashlib.new(checksum_type)
    except ValueError as exc:
        raise ValueError(f"Unsupported checksum type: {checksum_type}") from exc
    with open(path, "rb") as handle:
        for block in iter(lambda: handle.read(_READ_CHUNK_SIZE), b""):
            digest.update(block)
    return digest.hexdigest()


def resolve_cache_path(prefix: Path | str, cache_dir: Path) -> Path:
    """Return the cache file for *prefix*, relative prefixes living in *cache_dir*."""

    prefix_path = Path(prefix).expanduser()
    if not prefix_path.is_absolute():
        prefix_path = cache_dir / prefix_path
    return db_filename(prefix_path)
