"""Global configuration management for repocache."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict

from .text import Messages

DEFAULT_CONFIG_DIR = Path(os.path.expanduser("~")) / ".repocache"
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
_CONFIG_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "repocache_config_dir_override",
    default=None,
)
DEFAULT_CHECKSUM_TYPE = "sha256"
SUPPORTED_CHECKSUM_TYPES: tuple[str, ...] = ("md5", "sha1", DEFAULT_CHECKSUM_TYPE, "sha512")
ENV_CACHE_DIR = "REPOCACHE_CACHE_DIR"


@dataclass
class Config:
    cache_dir: str | None = None
    checksum_type: str = DEFAULT_CHECKSUM_TYPE
    log_file: str | None = None


def _resolve_config_dir() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    return override if override is not None else CONFIG_DIR


def _resolve_config_file() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    if override is not None:
        return override / "config.json"
    return CONFIG_FILE


@contextmanager
def config_dir_context(path: Path | str | None):
    """Temporarily override the config directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CONFIG_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CONFIG_DIR_OVERRIDE.reset(token)


def set_config_dir(path: Path | str | None) -> None:
    global CONFIG_DIR, CONFIG_FILE
    if path is None:
        CONFIG_DIR = DEFAULT_CONFIG_DIR
    else:
        dir_path = Path(path).expanduser().resolve()
        if dir_path.exists() and not dir_path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {dir_path}")
        CONFIG_DIR = dir_path
    CONFIG_FILE = CONFIG_DIR / "config.json"


def load_config() -> Config:
    config_file = _resolve_config_file()
    if not config_file.exists():
        return Config()
    try:
        raw = json.loads(config_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID) from exc
    if not isinstance(raw, dict):
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    return Config(
        cache_dir=_coerce_optional_str(raw.get("cache_dir"), "cache_dir"),
        checksum_type=_coerce_checksum_type(raw.get("checksum_type")),
        log_file=_coerce_optional_str(raw.get("log_file"), "log_file"),
    )


def save_config(config: Config) -> None:
    config_dir = _resolve_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {}
    if config.cache_dir:
        data["cache_dir"] = config.cache_dir
    data["checksum_type"] = config.checksum_type
    if config.log_file:
        data["log_file"] = config.log_file
    config_file = _resolve_config_file()
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def set_cache_dir(value: Path | str | None) -> None:
    config = load_config()
    config.cache_dir = str(Path(value).expanduser().resolve()) if value else None
    save_config(config)


def set_checksum_type(value: str) -> None:
    config = load_config()
    config.checksum_type = normalize_checksum_type(value)
    save_config(config)


def set_log_file(value: Path | str | None) -> None:
    config = load_config()
    config.log_file = str(Path(value).expanduser().resolve()) if value else None
    save_config(config)


def resolve_cache_dir(config: Config | None = None) -> Path:
    """Return the directory that relative cache prefixes are resolved against."""

    env_value = os.getenv(ENV_CACHE_DIR)
    if env_value:
        return Path(env_value).expanduser().resolve()
    if config is not None and config.cache_dir:
        return Path(config.cache_dir).expanduser().resolve()
    return _resolve_config_dir() / "cache"


def normalize_checksum_type(value: object) -> str:
    if value is None:
        return DEFAULT_CHECKSUM_TYPE
    if isinstance(value, str):
        normalized = value.strip().lower() or DEFAULT_CHECKSUM_TYPE
        if normalized in SUPPORTED_CHECKSUM_TYPES:
            return normalized
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field="checksum_type"))


def _coerce_checksum_type(value: object) -> str:
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in SUPPORTED_CHECKSUM_TYPES:
            return normalized
    return DEFAULT_CHECKSUM_TYPE


def _coerce_optional_str(value: object, field: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned or None
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
