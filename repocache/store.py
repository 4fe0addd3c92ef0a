"""Row writers for cache content tables.

Each writer owns one insert statement. Statements are compiled up front so a
broken schema fails fast with :class:`WriteError`; once writing starts, a
failing row is logged and counted but never stops the run.
"""

from __future__ import annotations

import sqlite3
from typing import Iterable, Sequence

from .encoding import encode
from .errors import ReadError, WriteError
from .log import logger
from .models import (
    DEPENDENCY_TABLES,
    PACKAGE_COLUMNS,
    ChangelogEntry,
    Dependency,
    FileEntry,
    Package,
)

_DELETE_CHUNK_SIZE = 500


class RowWriter:
    label = "row"
    sql = ""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.failed = 0
        self._prepare()

    @property
    def _placeholder_count(self) -> int:
        return self.sql.count("?")

    def _prepare(self) -> None:
        try:
            self.conn.execute(f"EXPLAIN {self.sql}", (None,) * self._placeholder_count)
        except sqlite3.Error as exc:
            raise WriteError(f"Can not prepare {self.label} insertion: {exc}") from exc

    def _insert(self, params: Sequence[object]) -> int | None:
        try:
            cursor = self.conn.execute(self.sql, params)
        except sqlite3.Error as exc:
            self.failed += 1
            logger.error("Error adding %s to SQL: %s", self.label, exc)
            return None
        return cursor.lastrowid


class PackageWriter(RowWriter):
    label = "package"
    sql = (
        f"INSERT INTO packages ({', '.join(PACKAGE_COLUMNS)}) "
        f"VALUES ({', '.join('?' for _ in PACKAGE_COLUMNS)})"
    )

    def write(self, package: Package) -> int | None:
        key = self._insert([getattr(package, column) for column in PACKAGE_COLUMNS])
        if key is not None:
            package.pkgKey = key
        return key


class PackageIdWriter(RowWriter):
    label = "package id"
    sql = "INSERT INTO packages (pkgId) VALUES (?)"

    def write(self, package: Package) -> int | None:
        key = self._insert((package.pkgId,))
        if key is not None:
            package.pkgKey = key
        return key


class DependencyWriter(RowWriter):
    label = "dependency"

    def __init__(self, conn: sqlite3.Connection, table: str) -> None:
        if table not in DEPENDENCY_TABLES:
            raise ValueError(f"Unknown dependency table: {table}")
        self.table = table
        self.sql = (
            f"INSERT INTO {table} (name, flags, epoch, version, release, pkgKey) "
            "VALUES (?, ?, ?, ?, ?, ?)"
        )
        super().__init__(conn)

    def write(self, pkg_key: int, dep: Dependency) -> None:
        self._insert(
            (dep.name, dep.flags, dep.epoch, dep.version, dep.release, pkg_key)
        )


class FileWriter(RowWriter):
    label = "package file"
    sql = "INSERT INTO files (name, type, pkgKey) VALUES (?, ?, ?)"

    def write(self, pkg_key: int, file: FileEntry) -> None:
        self._insert((file.path, file.kind.value, pkg_key))


class FilelistWriter(RowWriter):
    label = "file"
    sql = (
        "INSERT INTO filelist (pkgKey, dirname, filenames, filetypes) "
        "VALUES (?, ?, ?, ?)"
    )

    def write(self, pkg_key: int, files: Iterable[FileEntry]) -> None:
        for dirname, group in encode(files).items():
            self._insert((pkg_key, dirname, group.filenames, group.filetypes))


class ChangelogWriter(RowWriter):
    label = "changelog"
    sql = (
        "INSERT INTO changelog (pkgKey, author, date, changelog) "
        "VALUES (?, ?, ?, ?)"
    )

    def write(self, pkg_key: int, entries: Iterable[ChangelogEntry]) -> None:
        for entry in entries:
            self._insert((pkg_key, entry.author, entry.date, entry.changelog))


def read_package_ids(conn: sqlite3.Connection) -> dict[str, int]:
    """Return a mapping of pkgId to pkgKey for every stored package."""

    try:
        rows = conn.execute("SELECT pkgId, pkgKey FROM packages").fetchall()
    except sqlite3.Error as exc:
        raise ReadError(f"Error reading from SQL: {exc}") from exc
    return {row[0]: int(row[1]) for row in rows}


def delete_packages(conn: sqlite3.Connection, keys: Iterable[int]) -> int:
    """Delete packages by pkgKey; triggers remove their dependent rows."""

    values = list(keys)
    removed = 0
    for idx in range(0, len(values), _DELETE_CHUNK_SIZE):
        chunk = values[idx : idx + _DELETE_CHUNK_SIZE]
        placeholders = ", ".join("?" for _ in chunk)
        try:
            cursor = conn.execute(
                f"DELETE FROM packages WHERE pkgKey IN ({placeholders})",
                chunk,
            )
        except sqlite3.Error as exc:
            raise WriteError(f"Can not remove packages: {exc}") from exc
        removed += cursor.rowcount
    return removed
