"""Compact per-directory encoding of package file lists.

A package's flat file list is grouped by containing directory. Each group is
stored as one row: the directory, the basenames joined with ``/`` and one kind
code per basename (``d``, ``f`` or ``g``).
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Iterable

from .models import FileEntry, FileKind

NAME_SEPARATOR = "/"


@dataclass(slots=True)
class DirectoryGroup:
    names: list[str] = field(default_factory=list)
    kinds: list[str] = field(default_factory=list)

    def add(self, name: str, kind: FileKind) -> None:
        self.names.append(name)
        self.kinds.append(kind.code)

    @property
    def filenames(self) -> str:
        return NAME_SEPARATOR.join(self.names)

    @property
    def filetypes(self) -> str:
        return "".join(self.kinds)


def split_path(path: str) -> tuple[str, str]:
    return posixpath.dirname(path), posixpath.basename(path)


def encode(entries: Iterable[FileEntry]) -> dict[str, DirectoryGroup]:
    """Group *entries* by dirname, keeping input order within each group."""

    groups: dict[str, DirectoryGroup] = {}
    for entry in entries:
        dirname, basename = split_path(entry.path)
        group = groups.get(dirname)
        if group is None:
            group = groups[dirname] = DirectoryGroup()
        group.add(basename, entry.kind)
    return groups


def decode(dirname: str, filenames: str, filetypes: str) -> list[FileEntry]:
    """Expand one stored filelist row back into file entries."""

    if not filenames and not filetypes:
        return []
    names = filenames.split(NAME_SEPARATOR)
    if len(names) != len(filetypes):
        raise ValueError(
            f"Row for {dirname!r} has {len(names)} names but {len(filetypes)} kind codes"
        )
    return [
        FileEntry(path=posixpath.join(dirname, name), kind=FileKind.from_code(code))
        for name, code in zip(names, filetypes)
    ]
