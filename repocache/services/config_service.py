"""Logic helpers for the `repocache config` command."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import (
    Config,
    load_config,
    set_cache_dir,
    set_checksum_type,
    set_log_file,
)


@dataclass(slots=True)
class ConfigUpdateResult:
    cache_dir_set: bool = False
    cache_dir_cleared: bool = False
    checksum_type_set: bool = False
    log_file_set: bool = False
    log_file_cleared: bool = False

    @property
    def changed(self) -> bool:
        return any(
            (
                self.cache_dir_set,
                self.cache_dir_cleared,
                self.checksum_type_set,
                self.log_file_set,
                self.log_file_cleared,
            )
        )


def apply_config_updates(
    *,
    cache_dir: str | None = None,
    clear_cache_dir: bool = False,
    checksum_type: str | None = None,
    log_file: str | None = None,
    clear_log_file: bool = False,
) -> ConfigUpdateResult:
    """Apply config mutations and report which fields were updated."""

    result = ConfigUpdateResult()
    if cache_dir is not None:
        set_cache_dir(cache_dir)
        result.cache_dir_set = True
    if clear_cache_dir:
        set_cache_dir(None)
        result.cache_dir_cleared = True
    if checksum_type is not None:
        set_checksum_type(checksum_type)
        result.checksum_type_set = True
    if log_file is not None:
        set_log_file(log_file)
        result.log_file_set = True
    if clear_log_file:
        set_log_file(None)
        result.log_file_cleared = True
    return result


def get_config_snapshot() -> Config:
    """Return the current configuration dataclass."""

    return load_config()
