"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from divi_sync.common.errors import ConfigError

SOURCE_KEYS = {"base_url", "archive_path", "results_table_id", "next_page_label", "current_status_url"}
HTTP_KEYS = {"connect_timeout", "read_timeout", "max_attempts"}
LEDGER_KEYS = {"index_filename", "run_meta_dirname"}


def _assert_mapping(obj: object, ctx: str) -> dict:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    return obj


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_section(cfg: dict, name: str, keys: set[str], allow_unknown: bool) -> dict:
    section = _assert_mapping(cfg[name], name)
    _assert_required_keys(section, keys, name)
    _assert_no_unknown_keys(section, keys, name, allow_unknown)
    return section


def validate_sync_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"source", "http", "ledger"}
    _assert_mapping(cfg, "sync config")
    _assert_required_keys(cfg, top_required, "sync config")
    _assert_no_unknown_keys(cfg, top_required, "sync config", allow_unknown)

    source = _assert_section(cfg, "source", SOURCE_KEYS, allow_unknown)
    for key in sorted(SOURCE_KEYS):
        if not isinstance(source[key], str) or not source[key].strip():
            raise ConfigError(f"source.{key} must be a non-empty string")
    if not source["base_url"].startswith(("http://", "https://")):
        raise ConfigError("source.base_url must be an http(s) URL")

    http = _assert_section(cfg, "http", HTTP_KEYS, allow_unknown)
    for key in ("connect_timeout", "read_timeout"):
        if not isinstance(http[key], (int, float)) or http[key] <= 0:
            raise ConfigError(f"http.{key} must be a positive number")
    if not isinstance(http["max_attempts"], int) or http["max_attempts"] < 1:
        raise ConfigError("http.max_attempts must be an integer >= 1")

    ledger = _assert_section(cfg, "ledger", LEDGER_KEYS, allow_unknown)
    for key in sorted(LEDGER_KEYS):
        if not isinstance(ledger[key], str) or not ledger[key].strip():
            raise ConfigError(f"ledger.{key} must be a non-empty string")

    return cfg
