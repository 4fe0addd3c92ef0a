"""Centralized user-facing text for the repocache CLI."""

from __future__ import annotations


class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TITLE = "bold cyan"
    TABLE_HEADER = "bold magenta"


class Messages:
    APP_HELP = "repocache - versioned SQLite caches for repository metadata."
    HELP_RECORDS = "JSON-lines file with one parsed package record per line."
    HELP_KIND = "Cache kind to build ({allowed})."
    HELP_PREFIX = (
        "Cache file prefix; '.sqlite' is appended and relative prefixes live in the cache directory."
    )
    HELP_CHECKSUM = "Checksum identifying the source metadata."
    HELP_SOURCE = "Source metadata file whose checksum identifies the cache."
    HELP_CLEAR_ALL = "Remove every cache file in the cache directory."
    HELP_ENCODE_CHECK = "Decode each encoded row again and verify it matches the input."
    HELP_VERBOSE = "Show debug logging."
    HELP_SET_CACHE_DIR = "Set the directory used for relative cache prefixes."
    HELP_CLEAR_CACHE_DIR = "Reset the cache directory to the default."
    HELP_SET_CHECKSUM_TYPE = "Set the checksum algorithm used for --source files ({allowed})."
    HELP_SET_LOG_FILE = "Write debug logs to this file."
    HELP_CLEAR_LOG_FILE = "Stop writing debug logs to a file."
    HELP_SHOW_CONFIG = "Show current configuration."

    ERROR_KIND_INVALID = "Unsupported cache kind '{value}'. Allowed: {allowed}."
    ERROR_CHECKSUM_CONFLICT = "Use either --checksum or --source, not both."
    ERROR_CONFIG_JSON_INVALID = "Config file must contain a JSON object."
    ERROR_CONFIG_VALUE_INVALID = "Invalid config value for {field}."
    ERROR_RECORD_INVALID = "Skipping record on line {line}: {reason}"
    WARNING_FILES_REJECTED = "Package {pkg_id}: dropped {count} file entr{plural} with unknown kind."
    ERROR_ENCODE_MISMATCH = "Encoded rows for {pkg_id} do not decode back to the input."

    INFO_BUILD_RUNNING = "Building {kind} cache at {path}..."
    INFO_BUILD_UP_TO_DATE = "Cache {path} already matches checksum {checksum}; nothing to do."
    INFO_BUILD_SAVED = (
        "Cache saved to {path} ({state}): {written} written, {skipped} kept, "
        "{removed} removed."
    )
    WARNING_BUILD_FAILED_ROWS = "{failed} row(s) could not be written; see the log for details."
    INFO_STATUS_MISSING = "No cache found at {path}."
    INFO_STATUS_SUMMARY = "Cache: {path}\nVersion: {version}\nChecksum: {checksum}"
    INFO_STATUS_UNREADABLE = "Cache {path} exists but has no readable identity."
    INFO_STATUS_STATE = "State: {state}"
    INFO_CLEARED = "Removed {count} cache file{plural}."
    INFO_CLEAR_NONE = "No cache found at {path}."
    INFO_CONFIG_SUMMARY = (
        "Cache directory: {cache_dir}\n"
        "Checksum type: {checksum_type}\n"
        "Log file: {log_file}"
    )
    INFO_CACHE_DIR_SET = "Cache directory set to {value}."
    INFO_CACHE_DIR_CLEARED = "Cache directory reset to default."
    INFO_CHECKSUM_TYPE_SET = "Checksum type set to {value}."
    INFO_LOG_FILE_SET = "Log file set to {value}."
    INFO_LOG_FILE_CLEARED = "Log file cleared."
    INFO_ENCODE_OK = "All encoded rows decode back to their input."

    TABLE_ENCODE_TITLE = "Encoded file lists"
    TABLE_HEADER_PACKAGE = "Package"
    TABLE_HEADER_DIRNAME = "Directory"
    TABLE_HEADER_FILENAMES = "Names"
    TABLE_HEADER_FILETYPES = "Kinds"
