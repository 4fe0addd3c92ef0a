from __future__ import annotations

import hashlib

import pytest

from repocache.utils import file_checksum, resolve_cache_path, resolve_file


def test_resolve_file_validates_path(tmp_path):
    sample = tmp_path / "records.jsonl"
    sample.write_text("{}")

    assert resolve_file(sample) == sample.resolve()
    with pytest.raises(FileNotFoundError):
        resolve_file(tmp_path / "missing.jsonl")
    with pytest.raises(IsADirectoryError):
        resolve_file(tmp_path)


def test_file_checksum_matches_hashlib(tmp_path):
    sample = tmp_path / "primary.xml.gz"
    payload = b"metadata" * 10000
    sample.write_bytes(payload)

    assert file_checksum(sample) == hashlib.sha256(payload).hexdigest()
    assert file_checksum(sample, "md5") == hashlib.md5(payload).hexdigest()


def test_file_checksum_rejects_unknown_algorithm(tmp_path):
    sample = tmp_path / "x"
    sample.write_bytes(b"x")

    with pytest.raises(ValueError):
        file_checksum(sample, "not-a-hash")


def test_resolve_cache_path(tmp_path):
    assert resolve_cache_path("primary", tmp_path) == tmp_path / "primary.sqlite"
    assert resolve_cache_path("repo/other", tmp_path) == tmp_path / "repo" / "other.sqlite"
    absolute = tmp_path / "elsewhere" / "filelists"
    assert resolve_cache_path(absolute, tmp_path / "ignored") == tmp_path / "elsewhere" / "filelists.sqlite"
