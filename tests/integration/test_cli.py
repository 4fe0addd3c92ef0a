import json
import re
import sqlite3

import pytest
from typer.testing import CliRunner

from repocache import __version__
from repocache.cache import CacheIdentity, read_identity
from repocache.cli import app
from repocache.utils import file_checksum


ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    return ANSI_RE.sub("", text)


@pytest.fixture(autouse=True)
def temp_config_home(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    config_file = config_dir / "config.json"
    monkeypatch.setattr("repocache.config.CONFIG_DIR", config_dir)
    monkeypatch.setattr("repocache.config.CONFIG_FILE", config_file)
    monkeypatch.delenv("REPOCACHE_CACHE_DIR", raising=False)
    return config_file


@pytest.fixture
def cache_dir(tmp_path, monkeypatch):
    path = tmp_path / "caches"
    monkeypatch.setenv("REPOCACHE_CACHE_DIR", str(path))
    return path


def _write_records(path, records):
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def records(tmp_path):
    return _write_records(
        tmp_path / "records.jsonl",
        [
            {
                "pkgId": "aaa",
                "name": "alpha",
                "files": [
                    "/usr/bin/alpha",
                    {"path": "/usr/share/alpha", "type": "dir"},
                ],
            },
            {
                "pkgId": "bbb",
                "name": "beta",
                "files": ["/usr/bin/beta", "/usr/bin/beta-helper"],
            },
        ],
    )


def test_version_flag():
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"repocache v{__version__}" in result.stdout


def test_build_then_rebuild_is_up_to_date(records, cache_dir):
    runner = CliRunner()

    first = runner.invoke(app, ["build", str(records), "--kind", "filelists"])
    assert first.exit_code == 0
    assert "written" in strip_ansi(first.stdout)

    cache_file = cache_dir / "filelists.sqlite"
    assert cache_file.exists()
    assert read_identity(cache_file) == CacheIdentity(file_checksum(records))

    second = runner.invoke(app, ["build", str(records), "--kind", "filelists"])
    assert second.exit_code == 0
    assert "nothing" in strip_ansi(second.stdout)


def test_build_with_explicit_checksum_and_prefix(records, tmp_path):
    runner = CliRunner()
    prefix = tmp_path / "out" / "repo-primary"

    result = runner.invoke(
        app,
        ["build", str(records), "--prefix", str(prefix), "--checksum", "deadbeef"],
    )

    assert result.exit_code == 0
    cache_file = tmp_path / "out" / "repo-primary.sqlite"
    assert read_identity(cache_file) == CacheIdentity("deadbeef")
    conn = sqlite3.connect(cache_file)
    try:
        assert conn.execute("SELECT COUNT(*) FROM files").fetchone()[0] == 4
    finally:
        conn.close()


def test_build_with_source_checksum(records, tmp_path, cache_dir):
    runner = CliRunner()
    source = tmp_path / "primary.xml"
    source.write_text("<metadata/>")

    result = runner.invoke(app, ["build", str(records), "--source", str(source)])

    assert result.exit_code == 0
    identity = read_identity(cache_dir / "primary.sqlite")
    assert identity.checksum == file_checksum(source)


def test_build_rejects_checksum_and_source(records, tmp_path, cache_dir):
    runner = CliRunner()
    source = tmp_path / "primary.xml"
    source.write_text("<metadata/>")

    result = runner.invoke(
        app,
        ["build", str(records), "--checksum", "abc", "--source", str(source)],
    )

    assert result.exit_code != 0
    assert not (cache_dir / "primary.sqlite").exists()


def test_build_rejects_unknown_kind(records, cache_dir):
    runner = CliRunner()

    result = runner.invoke(app, ["build", str(records), "--kind", "updateinfo"])

    assert result.exit_code != 0


def test_build_rejects_missing_records(tmp_path, cache_dir):
    runner = CliRunner()

    result = runner.invoke(app, ["build", str(tmp_path / "missing.jsonl")])

    assert result.exit_code != 0


def test_build_reports_cache_errors(records, cache_dir, monkeypatch):
    from repocache.errors import OpenError

    def failing_build(*args, **kwargs):
        raise OpenError("Can not open SQL database")

    monkeypatch.setattr("repocache.cli.build_cache", failing_build)
    runner = CliRunner()

    result = runner.invoke(app, ["build", str(records)])

    assert result.exit_code == 1
    assert "Can not open" in strip_ansi(result.stdout)


def test_status_reports_identity_and_state(records, cache_dir):
    runner = CliRunner()
    runner.invoke(app, ["build", str(records), "--checksum", "abc123"])

    missing = runner.invoke(app, ["status", "--kind", "other"])
    assert missing.exit_code == 0
    assert "No cache found" in strip_ansi(missing.stdout)

    summary = runner.invoke(app, ["status", "--checksum", "abc123"])
    output = strip_ansi(summary.stdout)
    assert summary.exit_code == 0
    assert "Checksum: abc123" in output
    assert "State: fresh" in output

    stale = runner.invoke(app, ["status", "--checksum", "other"])
    assert "State: stale_checksum" in strip_ansi(stale.stdout)
    assert read_identity(cache_dir / "primary.sqlite") == CacheIdentity("abc123")


def test_status_flags_unreadable_cache(cache_dir):
    cache_dir.mkdir(parents=True)
    (cache_dir / "primary.sqlite").write_bytes(b"junk" * 100)
    runner = CliRunner()

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "readable" in strip_ansi(result.stdout)


def test_clear_single_and_all(records, cache_dir):
    runner = CliRunner()
    runner.invoke(app, ["build", str(records), "--kind", "primary"])
    runner.invoke(app, ["build", str(records), "--kind", "other"])
    runner.invoke(app, ["build", str(records), "--kind", "filelists"])

    single = runner.invoke(app, ["clear", "--kind", "other"])
    assert single.exit_code == 0
    assert "Removed 1 cache file." in strip_ansi(single.stdout)
    assert not (cache_dir / "other.sqlite").exists()

    again = runner.invoke(app, ["clear", "--kind", "other"])
    assert "No cache found" in strip_ansi(again.stdout)

    everything = runner.invoke(app, ["clear", "--all"])
    assert "Removed 2 cache files." in strip_ansi(everything.stdout)
    assert list(cache_dir.glob("*.sqlite")) == []


def test_encode_prints_groups(records):
    runner = CliRunner()

    result = runner.invoke(app, ["encode", str(records), "--check"])

    output = strip_ansi(result.stdout)
    assert result.exit_code == 0
    assert "/usr/bin" in output
    assert "beta/beta-helper" in output
    assert "ff" in output
    assert "decode back" in output


def test_encode_check_reports_mismatch(records, monkeypatch):
    from repocache.models import FileEntry, FileKind

    def broken_decode(dirname, filenames, filetypes):
        return [FileEntry(f"{dirname}/wrong", FileKind.GHOST)]

    monkeypatch.setattr("repocache.cli.decode", broken_decode)
    runner = CliRunner()

    result = runner.invoke(app, ["encode", str(records), "--check"])

    assert result.exit_code == 1
    assert "aaa" in strip_ansi(result.stdout)


def test_config_updates_and_show(tmp_path, temp_config_home):
    runner = CliRunner()
    target = tmp_path / "custom-cache"

    result = runner.invoke(
        app,
        ["config", "--set-cache-dir", str(target), "--set-checksum-type", "SHA512"],
    )
    assert result.exit_code == 0
    stored = json.loads(temp_config_home.read_text())
    assert stored["cache_dir"] == str(target.resolve())
    assert stored["checksum_type"] == "sha512"

    shown = runner.invoke(app, ["config", "--show"])
    assert shown.exit_code == 0
    assert "sha512" in strip_ansi(shown.stdout)

    cleared = runner.invoke(app, ["config", "--clear-cache-dir"])
    assert cleared.exit_code == 0
    assert "cache_dir" not in json.loads(temp_config_home.read_text())


def test_config_rejects_bad_checksum_type(temp_config_home):
    runner = CliRunner()

    result = runner.invoke(app, ["config", "--set-checksum-type", "crc32"])

    assert result.exit_code != 0
    assert not temp_config_home.exists()


def test_config_log_file_is_used_for_logging(records, tmp_path, cache_dir):
    runner = CliRunner()
    log_file = tmp_path / "logs" / "repocache.log"

    runner.invoke(app, ["config", "--set-log-file", str(log_file)])
    result = runner.invoke(app, ["build", str(records)])

    assert result.exit_code == 0
    assert "written" in log_file.read_text(encoding="utf-8")

    runner.invoke(app, ["config", "--clear-log-file"])
    assert "log_file" not in json.loads((tmp_path / "config" / "config.json").read_text())


def test_invalid_config_file_exits(records, temp_config_home):
    temp_config_home.parent.mkdir(parents=True)
    temp_config_home.write_text("{oops")
    runner = CliRunner()

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 1
