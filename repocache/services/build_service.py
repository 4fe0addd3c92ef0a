"""Logic helpers for the `repocache build` command."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

from ..cache import (
    CACHE_DB_VERSION,
    CacheIdentity,
    CacheState,
    commit,
    reconcile,
)
from ..kinds import CacheKind, get_kind
from ..log import logger
from ..models import Package, package_from_mapping
from ..store import delete_packages, read_package_ids
from ..text import Messages


class BuildStatus(str, Enum):
    UP_TO_DATE = "up_to_date"
    CREATED = "created"
    UPDATED = "updated"


@dataclass(slots=True)
class BuildResult:
    status: BuildStatus
    state: CacheState
    path: Path
    written: int = 0
    skipped: int = 0
    removed: int = 0
    failed: int = 0


def build_cache(
    path: Path | str,
    kind: CacheKind | str,
    checksum: str,
    packages: Iterable[Package],
    *,
    version: int = CACHE_DB_VERSION,
) -> BuildResult:
    """Bring the cache at *path* in line with *packages* and *checksum*.

    A cache that only differs in checksum is updated in place: packages whose
    pkgId is already stored are kept, missing ones are written and stale ones
    removed. Anything else is rebuilt from scratch. A pkgId repeated in *packages* is written once.
    """

    cache_kind = get_kind(kind) if isinstance(kind, str) else kind
    identity = CacheIdentity(checksum=checksum, version=version)
    prepared = reconcile(path, identity, cache_kind.create_tables)
    if prepared.conn is None:
        return BuildResult(
            status=BuildStatus.UP_TO_DATE,
            state=prepared.state,
            path=prepared.path,
        )

    conn = prepared.conn
    incremental = prepared.state is CacheState.STALE_CHECKSUM
    result = BuildResult(
        status=BuildStatus.UPDATED if incremental else BuildStatus.CREATED,
        state=prepared.state,
        path=prepared.path,
    )
    try:
        existing = read_package_ids(conn) if incremental else {}
        sink = cache_kind.sink(conn)
        seen: set[str] = set()
        for package in packages:
            if package.pkgId in seen:
                logger.debug("Skipping duplicate package %s", package.pkgId)
                result.skipped += 1
                continue
            seen.add(package.pkgId)
            if existing.pop(package.pkgId, None) is not None:
                result.skipped += 1
                continue
            if sink.write(package):
                result.written += 1
        result.removed = delete_packages(conn, existing.values())
        result.failed = sink.failed
        commit(conn, identity)
    finally:
        conn.close()
    logger.info(
        "Cache %s %s: %d written, %d kept, %d removed, %d failed rows",
        result.path,
        result.status.value,
        result.written,
        result.skipped,
        result.removed,
        result.failed,
    )
    return result


def load_packages(path: Path | str) -> Iterator[Package]:
    """Yield packages from a JSON-lines file, skipping malformed records."""

    with open(path, "rb") as handle:
        for line_no, line in enumerate(handle, start=1):
            try:
                text = line.decode("utf-8").strip()
                if not text:
                    continue
                raw = json.loads(text)
                if not isinstance(raw, dict):
                    raise ValueError("record is not a JSON object")
                package, rejected = package_from_mapping(raw)
            except ValueError as exc:
                logger.warning(
                    Messages.ERROR_RECORD_INVALID.format(line=line_no, reason=exc)
                )
                continue
            if rejected:
                logger.warning(
                    Messages.WARNING_FILES_REJECTED.format(
                        pkg_id=package.pkgId,
                        count=len(rejected),
                        plural="ies" if len(rejected) > 1 else "y",
                    )
                )
            yield package
