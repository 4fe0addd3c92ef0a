"""Content tables for the three cache kinds."""

from __future__ import annotations

import sqlite3
from typing import Sequence

from .errors import SchemaError
from .models import DEPENDENCY_TABLES

_PRIMARY_PACKAGES = """
CREATE TABLE packages (
    pkgKey INTEGER PRIMARY KEY,
    pkgId TEXT,
    name TEXT,
    arch TEXT,
    version TEXT,
    epoch TEXT,
    release TEXT,
    summary TEXT,
    description TEXT,
    url TEXT,
    time_file TEXT,
    time_build TEXT,
    rpm_license TEXT,
    rpm_vendor TEXT,
    rpm_group TEXT,
    rpm_buildhost TEXT,
    rpm_sourcerpm TEXT,
    rpm_header_start TEXT,
    rpm_header_end TEXT,
    rpm_packager TEXT,
    size_package TEXT,
    size_installed TEXT,
    size_archive TEXT,
    location_href TEXT,
    location_base TEXT,
    checksum_type TEXT,
    checksum_value TEXT
)
"""

_DEPENDENCY_TABLE = """
CREATE TABLE {table} (
    name TEXT,
    flags TEXT,
    epoch TEXT,
    version TEXT,
    release TEXT,
    pkgKey INTEGER
)
"""

_KEY_ONLY_PACKAGES = """
CREATE TABLE packages (
    pkgKey INTEGER PRIMARY KEY,
    pkgId TEXT
)
"""


def _run(conn: sqlite3.Connection, statements: Sequence[tuple[str, str]]) -> None:
    for label, sql in statements:
        try:
            conn.execute(sql)
        except sqlite3.Error as exc:
            raise SchemaError(f"Can not create {label}: {exc}") from exc


def _cascade_trigger(name: str, tables: Sequence[str]) -> str:
    deletes = "\n".join(
        f"    DELETE FROM {table} WHERE pkgKey = old.pkgKey;" for table in tables
    )
    return (
        f"CREATE TRIGGER {name} AFTER DELETE ON packages\n"
        f"  BEGIN\n{deletes}\n  END;"
    )


def create_primary_tables(conn: sqlite3.Connection) -> None:
    statements: list[tuple[str, str]] = [
        ("packages table", _PRIMARY_PACKAGES),
        ("packagename index", "CREATE INDEX packagename ON packages (name)"),
        ("packageId index", "CREATE INDEX packageId ON packages (pkgId)"),
        (
            "files table",
            "CREATE TABLE files (name TEXT, type TEXT, pkgKey INTEGER)",
        ),
    ]
    for table in DEPENDENCY_TABLES:
        statements.append((f"{table} table", _DEPENDENCY_TABLE.format(table=table)))
    statements.append(
        ("providesname index", "CREATE INDEX providesname ON provides (name)")
    )
    statements.append(
        (
            "removals trigger",
            _cascade_trigger("removals", ("files",) + DEPENDENCY_TABLES),
        )
    )
    _run(conn, statements)


def create_filelist_tables(conn: sqlite3.Connection) -> None:
    _run(
        conn,
        (
            ("packages table", _KEY_ONLY_PACKAGES),
            (
                "filelist table",
                "CREATE TABLE filelist ("
                " pkgKey INTEGER, dirname TEXT, filenames TEXT, filetypes TEXT)",
            ),
            ("keyfile index", "CREATE INDEX keyfile ON filelist (pkgKey)"),
            ("pkgId index", "CREATE INDEX pkgId ON packages (pkgId)"),
            (
                "remove_filelist trigger",
                _cascade_trigger("remove_filelist", ("filelist",)),
            ),
        ),
    )


def create_other_tables(conn: sqlite3.Connection) -> None:
    _run(
        conn,
        (
            ("packages table", _KEY_ONLY_PACKAGES),
            (
                "changelog table",
                "CREATE TABLE changelog ("
                " pkgKey INTEGER, author TEXT, date TEXT, changelog TEXT)",
            ),
            ("keychange index", "CREATE INDEX keychange ON changelog (pkgKey)"),
            ("pkgId index", "CREATE INDEX pkgId ON packages (pkgId)"),
            (
                "remove_changelogs trigger",
                _cascade_trigger("remove_changelogs", ("changelog",)),
            ),
        ),
    )
