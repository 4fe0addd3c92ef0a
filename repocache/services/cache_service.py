"""Shared helpers for inspecting and removing cache files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..cache import (
    CACHE_DB_VERSION,
    DB_SUFFIX,
    CacheIdentity,
    CacheState,
    probe,
    read_identity,
    remove_cache,
)


@dataclass(slots=True)
class CacheStatus:
    path: Path
    exists: bool
    identity: CacheIdentity | None = None
    state: CacheState | None = None


def inspect_cache(
    path: Path,
    checksum: str | None = None,
    *,
    version: int = CACHE_DB_VERSION,
) -> CacheStatus:
    """Describe the cache at *path*; classify it when a checksum is given."""

    if not path.exists():
        state = CacheState.ABSENT if checksum is not None else None
        return CacheStatus(path=path, exists=False, state=state)
    status = CacheStatus(path=path, exists=True, identity=read_identity(path))
    if checksum is not None:
        status.state = probe(path, CacheIdentity(checksum=checksum, version=version))
    return status


def clear_cache_dir(cache_dir: Path) -> int:
    """Remove every cache file directly inside *cache_dir*."""

    if not cache_dir.is_dir():
        return 0
    removed = 0
    for db_path in sorted(cache_dir.glob(f"*{DB_SUFFIX}")):
        if remove_cache(db_path):
            removed += 1
    return removed
