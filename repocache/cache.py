"""Versioned SQLite cache files and the freshness protocol that guards them.

Every cache file carries a single identity row in ``db_info`` holding the
schema version and the checksum of the metadata it was built from. The row is
written last (see :func:`commit`), so a file whose build was interrupted never
looks fresh.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable
from urllib.parse import quote

from .errors import CommitError, OpenError, SchemaError
from .log import logger

CACHE_DB_VERSION = 10
DB_SUFFIX = ".sqlite"
IDENTITY_TABLE = "db_info"
_SIDECAR_SUFFIXES = ("-journal", "-wal", "-shm")

CreateTablesFn = Callable[[sqlite3.Connection], None]


@dataclass(frozen=True, slots=True)
class CacheIdentity:
    checksum: str
    version: int = CACHE_DB_VERSION


class CacheState(str, Enum):
    ABSENT = "absent"
    FRESH = "fresh"
    STALE_CHECKSUM = "stale_checksum"
    STALE_VERSION = "stale_version"


@dataclass(slots=True)
class ReconcileResult:
    state: CacheState
    path: Path
    conn: sqlite3.Connection | None = None

    @property
    def needs_write(self) -> bool:
        return self.state is not CacheState.FRESH


def db_filename(prefix: Path | str) -> Path:
    """Return the cache file path for a caller supplied *prefix*."""
    return Path(f"{prefix}{DB_SUFFIX}")


def remove_cache(path: Path | str) -> bool:
    """Delete a cache file and any journal sidecars; return True if it existed."""

    db_path = Path(path)
    existed = db_path.exists()
    if existed:
        db_path.unlink()
    for suffix in _SIDECAR_SUFFIXES:
        sidecar = Path(f"{db_path}{suffix}")
        if sidecar.exists():
            sidecar.unlink()
    return existed


def _connect(db_path: Path, *, readonly: bool = False) -> sqlite3.Connection:
    if readonly:
        db_uri = f"file:{quote(db_path.as_posix())}?mode=ro"
        conn = sqlite3.connect(db_uri, uri=True)
    else:
        conn = sqlite3.connect(db_path)
    try:
        # sqlite3.connect is lazy; a corrupt file only fails on first read.
        conn.execute("SELECT COUNT(*) FROM sqlite_master").fetchone()
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def _enable_fast_writes(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA synchronous = OFF;")


def _read_identity(conn: sqlite3.Connection) -> tuple[int, str] | None:
    try:
        row = conn.execute(
            f"SELECT dbversion, checksum FROM {IDENTITY_TABLE}"
        ).fetchone()
    except sqlite3.Error as exc:
        logger.debug("Unable to read cache identity: %s", exc)
        return None
    if row is None:
        return None
    try:
        version = int(row[0])
    except (TypeError, ValueError):
        return None
    checksum = row[1]
    if not isinstance(checksum, str):
        return None
    return version, checksum


def _classify(stored: tuple[int, str] | None, identity: CacheIdentity) -> CacheState:
    if stored is None:
        return CacheState.STALE_VERSION
    version, checksum = stored
    if version != identity.version:
        return CacheState.STALE_VERSION
    if checksum != identity.checksum:
        return CacheState.STALE_CHECKSUM
    return CacheState.FRESH


def probe(path: Path | str, identity: CacheIdentity) -> CacheState:
    """Classify the cache at *path* against *identity* without modifying it."""

    db_path = Path(path)
    if not db_path.exists():
        return CacheState.ABSENT
    try:
        conn = _connect(db_path, readonly=True)
    except sqlite3.Error:
        # reconcile discards a container it cannot open
        return CacheState.ABSENT
    try:
        return _classify(_read_identity(conn), identity)
    finally:
        conn.close()


def _discard(db_path: Path) -> None:
    try:
        remove_cache(db_path)
    except OSError as exc:
        raise OpenError(f"Can not remove SQL database {db_path}: {exc}") from exc


def _open_fresh(db_path: Path) -> sqlite3.Connection:
    try:
        return _connect(db_path)
    except sqlite3.Error as exc:
        raise OpenError(f"Can not open SQL database {db_path}: {exc}") from exc


def _create_identity_table(conn: sqlite3.Connection) -> None:
    try:
        conn.execute(
            f"CREATE TABLE {IDENTITY_TABLE} (dbversion INTEGER, checksum TEXT)"
        )
    except sqlite3.Error as exc:
        raise SchemaError(f"Can not create {IDENTITY_TABLE} table: {exc}") from exc


def reconcile(
    path: Path | str,
    identity: CacheIdentity,
    create_tables: CreateTablesFn,
) -> ReconcileResult:
    """Prepare the cache at *path* for writing content matching *identity*.

    Returns a result whose ``conn`` is None only when the cache is already
    fresh. Otherwise the caller owns the connection, writes its content and
    finishes with :func:`commit` (or closes it to abandon the build).
    """

    db_path = Path(path)
    existed = db_path.exists()
    state = CacheState.ABSENT
    conn: sqlite3.Connection | None = None

    try:
        conn = _connect(db_path)
    except sqlite3.Error as exc:
        logger.warning("Cache %s could not be opened (%s); recreating it", db_path, exc)
        _discard(db_path)
        existed = False

    if conn is not None and existed:
        stored = _read_identity(conn)
        state = _classify(stored, identity)
        if state is CacheState.FRESH:
            logger.debug("Cache %s is up to date", db_path)
            conn.close()
            return ReconcileResult(state=state, path=db_path)
        if state is CacheState.STALE_CHECKSUM:
            logger.info("Cache %s needs updating, reading in metadata", db_path)
            try:
                _enable_fast_writes(conn)
                conn.execute(f"DELETE FROM {IDENTITY_TABLE}")
            except sqlite3.Error as exc:
                conn.close()
                raise SchemaError(f"Can not reset {IDENTITY_TABLE}: {exc}") from exc
            return ReconcileResult(state=state, path=db_path, conn=conn)
        if stored is not None:
            logger.info(
                "Cache %s is version %d, we need %d, will regenerate",
                db_path,
                stored[0],
                identity.version,
            )
        else:
            logger.info("Cache %s has no readable identity, will regenerate", db_path)
        conn.close()
        conn = None
        _discard(db_path)

    if conn is None:
        conn = _open_fresh(db_path)

    try:
        _create_identity_table(conn)
        try:
            create_tables(conn)
        except SchemaError:
            raise
        except sqlite3.Error as exc:
            raise SchemaError(f"Can not create cache tables: {exc}") from exc
        _enable_fast_writes(conn)
    except Exception:
        conn.close()
        raise
    return ReconcileResult(state=state, path=db_path, conn=conn)


def commit(conn: sqlite3.Connection, identity: CacheIdentity) -> None:
    """Write the identity row and commit; call once, after all content writes."""

    try:
        conn.execute(
            f"INSERT INTO {IDENTITY_TABLE} (dbversion, checksum) VALUES (?, ?)",
            (identity.version, identity.checksum),
        )
        conn.commit()
    except sqlite3.Error as exc:
        raise CommitError(f"Can not update {IDENTITY_TABLE} table: {exc}") from exc


def read_identity(path: Path | str) -> CacheIdentity | None:
    """Return the stored identity of the cache at *path*, if readable."""

    db_path = Path(path)
    if not db_path.exists():
        return None
    try:
        conn = _connect(db_path, readonly=True)
    except sqlite3.Error:
        return None
    try:
        stored = _read_identity(conn)
    finally:
        conn.close()
    if stored is None:
        return None
    return CacheIdentity(checksum=stored[1], version=stored[0])
