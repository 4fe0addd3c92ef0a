from __future__ import annotations

from repocache.cache import CacheIdentity, CacheState
from repocache.services.build_service import build_cache
from repocache.services.cache_service import clear_cache_dir, inspect_cache


def test_inspect_missing_cache(tmp_path):
    path = tmp_path / "primary.sqlite"

    report = inspect_cache(path)
    assert report.exists is False
    assert report.state is None

    report = inspect_cache(path, "abc")
    assert report.state is CacheState.ABSENT


def test_inspect_built_cache(tmp_path):
    path = tmp_path / "primary.sqlite"
    build_cache(path, "primary", "abc", [])

    report = inspect_cache(path)
    assert report.exists is True
    assert report.identity == CacheIdentity("abc")
    assert report.state is None

    assert inspect_cache(path, "abc").state is CacheState.FRESH
    assert inspect_cache(path, "other").state is CacheState.STALE_CHECKSUM
    assert inspect_cache(path, "abc", version=1).state is CacheState.STALE_VERSION


def test_inspect_unreadable_cache(tmp_path):
    path = tmp_path / "primary.sqlite"
    path.write_bytes(b"junk" * 500)

    report = inspect_cache(path, "abc")

    assert report.exists is True
    assert report.identity is None
    assert report.state is CacheState.ABSENT
    assert path.read_bytes() == b"junk" * 500


def test_clear_cache_dir_only_removes_cache_files(tmp_path):
    build_cache(tmp_path / "primary.sqlite", "primary", "abc", [])
    build_cache(tmp_path / "other.sqlite", "other", "abc", [])
    keep = tmp_path / "notes.txt"
    keep.write_text("keep me")

    assert clear_cache_dir(tmp_path) == 2
    assert sorted(p.name for p in tmp_path.iterdir()) == ["notes.txt"]
    assert clear_cache_dir(tmp_path / "missing") == 0
