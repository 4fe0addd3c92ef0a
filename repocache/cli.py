"""Command line interface for repocache."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .cache import CACHE_DB_VERSION, remove_cache
from .config import (
    SUPPORTED_CHECKSUM_TYPES,
    Config,
    load_config,
    normalize_checksum_type,
    resolve_cache_dir,
)
from .encoding import decode, encode
from .errors import CacheError
from .kinds import available_kinds, get_kind
from .log import setup_logging
from .models import FileEntry
from .services.build_service import BuildStatus, build_cache, load_packages
from .services.cache_service import clear_cache_dir, inspect_cache
from .services.config_service import apply_config_updates, get_config_snapshot
from .text import Messages, Styles
from .utils import file_checksum, resolve_cache_path, resolve_file

console = Console()

app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"repocache v{__version__}")
        raise typer.Exit()


def _load_config_or_exit() -> Config:
    try:
        return load_config()
    except ValueError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)


def _validate_kind(kind: str) -> str:
    normalized = kind.strip().lower()
    try:
        get_kind(normalized)
    except ValueError as exc:
        allowed = ", ".join(available_kinds())
        raise typer.BadParameter(
            Messages.ERROR_KIND_INVALID.format(value=kind, allowed=allowed)
        ) from exc
    return normalized


def _cache_path(config: Config, prefix: str | None, kind: str) -> Path:
    return resolve_cache_path(prefix or kind, resolve_cache_dir(config))


def _resolve_checksum(
    config: Config,
    checksum: str | None,
    source: Path | None,
    fallback: Path | None = None,
) -> str | None:
    if checksum is not None and source is not None:
        raise typer.BadParameter(Messages.ERROR_CHECKSUM_CONFLICT)
    if checksum is not None:
        return checksum.strip()
    target = source or fallback
    if target is None:
        return None
    return file_checksum(resolve_file(target), config.checksum_type)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help=Messages.HELP_VERBOSE,
    ),
) -> None:
    """Global Typer callback for shared options."""
    config = _load_config_or_exit()
    setup_logging(verbose=verbose, log_file=config.log_file)


@app.command()
def build(
    records: Path = typer.Argument(..., help=Messages.HELP_RECORDS),
    kind: str = typer.Option(
        "primary",
        "--kind",
        "-k",
        help=Messages.HELP_KIND.format(allowed=", ".join(available_kinds())),
    ),
    prefix: str | None = typer.Option(None, "--prefix", "-p", help=Messages.HELP_PREFIX),
    checksum: str | None = typer.Option(None, "--checksum", "-c", help=Messages.HELP_CHECKSUM),
    source: Path | None = typer.Option(None, "--source", "-s", help=Messages.HELP_SOURCE),
) -> None:
    """Create or refresh a cache file from parsed package records."""
    config = _load_config_or_exit()
    kind_value = _validate_kind(kind)
    try:
        records_path = resolve_file(records)
    except (FileNotFoundError, IsADirectoryError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    try:
        checksum_value = _resolve_checksum(config, checksum, source, records_path)
    except (FileNotFoundError, IsADirectoryError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    cache_path = _cache_path(config, prefix, kind_value)
    cache_path.parent.mkdir(parents=True, exist_ok=True)

    console.print(
        _styled(
            Messages.INFO_BUILD_RUNNING.format(kind=kind_value, path=cache_path),
            Styles.INFO,
        )
    )
    try:
        result = build_cache(
            cache_path,
            kind_value,
            checksum_value,
            load_packages(records_path),
        )
    except CacheError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)
    if result.status == BuildStatus.UP_TO_DATE:
        console.print(
            _styled(
                Messages.INFO_BUILD_UP_TO_DATE.format(
                    path=result.path, checksum=checksum_value
                ),
                Styles.INFO,
            )
        )
        return
    console.print(
        _styled(
            Messages.INFO_BUILD_SAVED.format(
                path=result.path,
                state=result.state.value,
                written=result.written,
                skipped=result.skipped,
                removed=result.removed,
            ),
            Styles.SUCCESS,
        )
    )
    if result.failed:
        console.print(
            _styled(
                Messages.WARNING_BUILD_FAILED_ROWS.format(failed=result.failed),
                Styles.WARNING,
            )
        )


@app.command()
def status(
    kind: str = typer.Option(
        "primary",
        "--kind",
        "-k",
        help=Messages.HELP_KIND.format(allowed=", ".join(available_kinds())),
    ),
    prefix: str | None = typer.Option(None, "--prefix", "-p", help=Messages.HELP_PREFIX),
    checksum: str | None = typer.Option(None, "--checksum", "-c", help=Messages.HELP_CHECKSUM),
    source: Path | None = typer.Option(None, "--source", "-s", help=Messages.HELP_SOURCE),
) -> None:
    """Show the stored identity of a cache file without modifying it."""
    config = _load_config_or_exit()
    kind_value = _validate_kind(kind)
    try:
        checksum_value = _resolve_checksum(config, checksum, source)
    except (FileNotFoundError, IsADirectoryError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    cache_path = _cache_path(config, prefix, kind_value)
    report = inspect_cache(cache_path, checksum_value, version=CACHE_DB_VERSION)
    if not report.exists:
        console.print(
            _styled(Messages.INFO_STATUS_MISSING.format(path=cache_path), Styles.INFO)
        )
    elif report.identity is None:
        console.print(
            _styled(
                Messages.INFO_STATUS_UNREADABLE.format(path=cache_path), Styles.WARNING
            )
        )
    else:
        console.print(
            _styled(
                Messages.INFO_STATUS_SUMMARY.format(
                    path=cache_path,
                    version=report.identity.version,
                    checksum=report.identity.checksum,
                ),
                Styles.INFO,
            )
        )
    if report.state is not None:
        console.print(Messages.INFO_STATUS_STATE.format(state=report.state.value))


@app.command()
def clear(
    kind: str = typer.Option(
        "primary",
        "--kind",
        "-k",
        help=Messages.HELP_KIND.format(allowed=", ".join(available_kinds())),
    ),
    prefix: str | None = typer.Option(None, "--prefix", "-p", help=Messages.HELP_PREFIX),
    clear_all: bool = typer.Option(False, "--all", help=Messages.HELP_CLEAR_ALL),
) -> None:
    """Remove cache files."""
    config = _load_config_or_exit()
    if clear_all:
        removed = clear_cache_dir(resolve_cache_dir(config))
    else:
        kind_value = _validate_kind(kind)
        cache_path = _cache_path(config, prefix, kind_value)
        if not cache_path.exists():
            console.print(
                _styled(Messages.INFO_CLEAR_NONE.format(path=cache_path), Styles.INFO)
            )
            return
        removed = 1 if remove_cache(cache_path) else 0
    console.print(
        _styled(
            Messages.INFO_CLEARED.format(count=removed, plural="" if removed == 1 else "s"),
            Styles.SUCCESS,
        )
    )


@app.command("encode")
def encode_command(
    records: Path = typer.Argument(..., help=Messages.HELP_RECORDS),
    check: bool = typer.Option(False, "--check", help=Messages.HELP_ENCODE_CHECK),
) -> None:
    """Print the per-directory encoding of each package's file list."""
    try:
        records_path = resolve_file(records)
    except (FileNotFoundError, IsADirectoryError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    table = Table(
        title=_styled(Messages.TABLE_ENCODE_TITLE, Styles.TITLE),
        header_style=Styles.TABLE_HEADER,
    )
    table.add_column(Messages.TABLE_HEADER_PACKAGE)
    table.add_column(Messages.TABLE_HEADER_DIRNAME)
    table.add_column(Messages.TABLE_HEADER_FILENAMES, overflow="fold")
    table.add_column(Messages.TABLE_HEADER_FILETYPES)
    mismatched: list[str] = []
    for package in load_packages(records_path):
        groups = encode(package.files)
        decoded = []
        for dirname, group in groups.items():
            table.add_row(package.pkgId, dirname, group.filenames, group.filetypes)
            decoded.extend(decode(dirname, group.filenames, group.filetypes))
        if check and sorted(decoded, key=_entry_key) != sorted(package.files, key=_entry_key):
            mismatched.append(package.pkgId)
    console.print(table)
    if not check:
        return
    if mismatched:
        for pkg_id in mismatched:
            console.print(
                _styled(Messages.ERROR_ENCODE_MISMATCH.format(pkg_id=pkg_id), Styles.ERROR)
            )
        raise typer.Exit(code=1)
    console.print(_styled(Messages.INFO_ENCODE_OK, Styles.SUCCESS))


def _entry_key(entry: FileEntry) -> tuple[str, str]:
    return entry.path, entry.kind.value


@app.command()
def config(
    set_cache_dir_option: str | None = typer.Option(
        None,
        "--set-cache-dir",
        help=Messages.HELP_SET_CACHE_DIR,
    ),
    clear_cache_dir_option: bool = typer.Option(
        False,
        "--clear-cache-dir",
        help=Messages.HELP_CLEAR_CACHE_DIR,
    ),
    set_checksum_type_option: str | None = typer.Option(
        None,
        "--set-checksum-type",
        help=Messages.HELP_SET_CHECKSUM_TYPE.format(
            allowed=", ".join(SUPPORTED_CHECKSUM_TYPES)
        ),
    ),
    set_log_file_option: str | None = typer.Option(
        None,
        "--set-log-file",
        help=Messages.HELP_SET_LOG_FILE,
    ),
    clear_log_file_option: bool = typer.Option(
        False,
        "--clear-log-file",
        help=Messages.HELP_CLEAR_LOG_FILE,
    ),
    show: bool = typer.Option(
        False,
        "--show",
        help=Messages.HELP_SHOW_CONFIG,
    ),
) -> None:
    """Manage repocache configuration stored in ~/.repocache/config.json."""
    if set_checksum_type_option is not None:
        try:
            set_checksum_type_option = normalize_checksum_type(set_checksum_type_option)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc

    updates = apply_config_updates(
        cache_dir=set_cache_dir_option,
        clear_cache_dir=clear_cache_dir_option,
        checksum_type=set_checksum_type_option,
        log_file=set_log_file_option,
        clear_log_file=clear_log_file_option,
    )
    if updates.cache_dir_set:
        console.print(
            _styled(
                Messages.INFO_CACHE_DIR_SET.format(value=set_cache_dir_option),
                Styles.SUCCESS,
            )
        )
    if updates.cache_dir_cleared:
        console.print(_styled(Messages.INFO_CACHE_DIR_CLEARED, Styles.SUCCESS))
    if updates.checksum_type_set:
        console.print(
            _styled(
                Messages.INFO_CHECKSUM_TYPE_SET.format(value=set_checksum_type_option),
                Styles.SUCCESS,
            )
        )
    if updates.log_file_set:
        console.print(
            _styled(
                Messages.INFO_LOG_FILE_SET.format(value=set_log_file_option),
                Styles.SUCCESS,
            )
        )
    if updates.log_file_cleared:
        console.print(_styled(Messages.INFO_LOG_FILE_CLEARED, Styles.SUCCESS))

    if show or not updates.changed:
        cfg = get_config_snapshot()
        console.print(
            _styled(
                Messages.INFO_CONFIG_SUMMARY.format(
                    cache_dir=resolve_cache_dir(cfg),
                    checksum_type=cfg.checksum_type,
                    log_file=cfg.log_file or "-",
                ),
                Styles.INFO,
            )
        )


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    if argv is None:
        app()
    else:
        app(args=list(argv))
