"""Package record types consumed by the cache writers."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Mapping


class FileKind(str, Enum):
    DIRECTORY = "dir"
    REGULAR = "file"
    GHOST = "ghost"

    @property
    def code(self) -> str:
        return _KIND_CODES[self]

    @classmethod
    def parse(cls, raw: object) -> "FileKind":
        """Map a raw kind string to a FileKind, raising ValueError if unknown."""

        if isinstance(raw, FileKind):
            return raw
        if isinstance(raw, str):
            token = raw.strip().lower()
            kind = _KIND_ALIASES.get(token)
            if kind is not None:
                return kind
        raise ValueError(f"Unknown file kind: {raw!r}")

    @classmethod
    def from_code(cls, code: str) -> "FileKind":
        for kind, value in _KIND_CODES.items():
            if value == code:
                return kind
        raise ValueError(f"Unknown file kind code: {code!r}")


_KIND_CODES = {
    FileKind.DIRECTORY: "d",
    FileKind.REGULAR: "f",
    FileKind.GHOST: "g",
}

_KIND_ALIASES = {
    "dir": FileKind.DIRECTORY,
    "directory": FileKind.DIRECTORY,
    "file": FileKind.REGULAR,
    "regular": FileKind.REGULAR,
    "ghost": FileKind.GHOST,
}


@dataclass(frozen=True, slots=True)
class FileEntry:
    path: str
    kind: FileKind = FileKind.REGULAR


@dataclass(frozen=True, slots=True)
class Dependency:
    name: str
    flags: str | None = None
    epoch: str | None = None
    version: str | None = None
    release: str | None = None


@dataclass(frozen=True, slots=True)
class ChangelogEntry:
    author: str | None = None
    date: str | None = None
    changelog: str | None = None


DEPENDENCY_TABLES: tuple[str, ...] = ("requires", "provides", "conflicts", "obsoletes")


@dataclass(slots=True)
class Package:
    pkgId: str
    name: str | None = None
    arch: str | None = None
    version: str | None = None
    epoch: str | None = None
    release: str | None = None
    summary: str | None = None
    description: str | None = None
    url: str | None = None
    time_file: str | None = None
    time_build: str | None = None
    rpm_license: str | None = None
    rpm_vendor: str | None = None
    rpm_group: str | None = None
    rpm_buildhost: str | None = None
    rpm_sourcerpm: str | None = None
    rpm_header_start: str | None = None
    rpm_header_end: str | None = None
    rpm_packager: str | None = None
    size_package: str | None = None
    size_installed: str | None = None
    size_archive: str | None = None
    location_href: str | None = None
    location_base: str | None = None
    checksum_type: str | None = None
    checksum_value: str | None = None
    requires: list[Dependency] = field(default_factory=list)
    provides: list[Dependency] = field(default_factory=list)
    conflicts: list[Dependency] = field(default_factory=list)
    obsoletes: list[Dependency] = field(default_factory=list)
    files: list[FileEntry] = field(default_factory=list)
    changelogs: list[ChangelogEntry] = field(default_factory=list)
    pkgKey: int | None = None

    def dependencies(self, table: str) -> list[Dependency]:
        if table not in DEPENDENCY_TABLES:
            raise ValueError(f"Unknown dependency table: {table}")
        return getattr(self, table)


PACKAGE_COLUMNS: tuple[str, ...] = tuple(
    f.name
    for f in fields(Package)
    if f.name not in DEPENDENCY_TABLES + ("files", "changelogs", "pkgKey")
)


def _text(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


def _section(data: Mapping[str, object], key: str, pkg_id: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"Invalid {key} section in package {pkg_id}")
    return value


def package_from_mapping(data: Mapping[str, object]) -> tuple[Package, list[str]]:
    """Build a Package from a parsed JSON record.

    Returns the package and the list of file entries that were dropped because
    their kind is not one of dir/file/ghost.
    """

    pkg_id = data.get("pkgId")
    if not isinstance(pkg_id, str) or not pkg_id.strip():
        raise ValueError("Package record is missing 'pkgId'")
    package = Package(pkgId=pkg_id.strip())
    for column in PACKAGE_COLUMNS[1:]:
        if column in data:
            setattr(package, column, _text(data[column]))
    for table in DEPENDENCY_TABLES:
        for raw in _section(data, table, pkg_id):
            if not isinstance(raw, Mapping) or not raw.get("name"):
                raise ValueError(f"Invalid {table} entry in package {pkg_id}")
            package.dependencies(table).append(
                Dependency(
                    name=str(raw["name"]),
                    flags=_text(raw.get("flags")),
                    epoch=_text(raw.get("epoch")),
                    version=_text(raw.get("version")),
                    release=_text(raw.get("release")),
                )
            )
    rejected: list[str] = []
    for raw in _section(data, "files", pkg_id):
        if isinstance(raw, str):
            package.files.append(FileEntry(path=raw))
            continue
        if not isinstance(raw, Mapping) or not raw.get("path"):
            raise ValueError(f"Invalid file entry in package {pkg_id}")
        path = str(raw["path"])
        try:
            kind = FileKind.parse(raw.get("type", FileKind.REGULAR.value))
        except ValueError:
            rejected.append(path)
            continue
        package.files.append(FileEntry(path=path, kind=kind))
    for raw in _section(data, "changelogs", pkg_id):
        if not isinstance(raw, Mapping):
            raise ValueError(f"Invalid changelog entry in package {pkg_id}")
        package.changelogs.append(
            ChangelogEntry(
                author=_text(raw.get("author")),
                date=_text(raw.get("date")),
                changelog=_text(raw.get("changelog")),
            )
        )
    return package, rejected
