"""Cache kind registry: which tables a cache holds and how packages land in it."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Callable, Dict, Protocol

from .models import DEPENDENCY_TABLES, Package
from .schema import create_filelist_tables, create_other_tables, create_primary_tables
from .store import (
    ChangelogWriter,
    DependencyWriter,
    FilelistWriter,
    FileWriter,
    PackageIdWriter,
    PackageWriter,
    RowWriter,
)


class PackageSink(Protocol):
    def write(self, package: Package) -> bool:
        raise NotImplementedError

    @property
    def failed(self) -> int:
        raise NotImplementedError


class _CompositeSink:
    def __init__(self, *writers: RowWriter) -> None:
        self._writers = writers

    @property
    def failed(self) -> int:
        return sum(writer.failed for writer in self._writers)


class PrimarySink(_CompositeSink):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.packages = PackageWriter(conn)
        self.dependencies = {
            table: DependencyWriter(conn, table) for table in DEPENDENCY_TABLES
        }
        self.files = FileWriter(conn)
        super().__init__(self.packages, *self.dependencies.values(), self.files)

    def write(self, package: Package) -> bool:
        key = self.packages.write(package)
        if key is None:
            return False
        for table, writer in self.dependencies.items():
            for dep in package.dependencies(table):
                writer.write(key, dep)
        for file in package.files:
            self.files.write(key, file)
        return True


class FilelistSink(_CompositeSink):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.packages = PackageIdWriter(conn)
        self.filelists = FilelistWriter(conn)
        super().__init__(self.packages, self.filelists)

    def write(self, package: Package) -> bool:
        key = self.packages.write(package)
        if key is None:
            return False
        self.filelists.write(key, package.files)
        return True


class OtherSink(_CompositeSink):
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.packages = PackageIdWriter(conn)
        self.changelogs = ChangelogWriter(conn)
        super().__init__(self.packages, self.changelogs)

    def write(self, package: Package) -> bool:
        key = self.packages.write(package)
        if key is None:
            return False
        self.changelogs.write(key, package.changelogs)
        return True


@dataclass(frozen=True, slots=True)
class CacheKind:
    name: str
    create_tables: Callable[[sqlite3.Connection], None]
    sink: Callable[[sqlite3.Connection], PackageSink]


_KINDS: Dict[str, CacheKind] = {
    "primary": CacheKind("primary", create_primary_tables, PrimarySink),
    "filelists": CacheKind("filelists", create_filelist_tables, FilelistSink),
    "other": CacheKind("other", create_other_tables, OtherSink),
}


def get_kind(name: str) -> CacheKind:
    try:
        return _KINDS[name]
    except KeyError as exc:
        raise ValueError(f"Unsupported cache kind: {name}") from exc


def available_kinds() -> list[str]:
    return sorted(_KINDS.keys())
