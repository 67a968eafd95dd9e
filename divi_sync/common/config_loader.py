"""Configuration loading and validation."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urljoin

from divi_sync.common.constants import DEFAULT_CONFIG, DEFAULT_CONFIG_FILENAME
from divi_sync.common.errors import ConfigError
from divi_sync.common.fs import read_yaml
from divi_sync.common.http import RetryConfig, TimeoutConfig
from divi_sync.common.schema import validate_sync_config


@dataclass(frozen=True)
class SourceConfig:
    base_url: str
    archive_path: str
    results_table_id: str
    next_page_label: str
    current_status_url: str

    @property
    def archive_url(self) -> str:
        return urljoin(self.base_url, self.archive_path)


@dataclass(frozen=True)
class SyncConfig:
    source: SourceConfig
    timeout: TimeoutConfig
    retry: RetryConfig
    index_filename: str
    run_meta_dirname: str


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _read_optional_yaml(path: Path | None) -> dict:
    if path is None or not path.exists():
        return {}
    try:
        payload = read_yaml(path)
    except Exception as exc:
        raise ConfigError(f"Unreadable config file {path}: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return payload


def load_raw_config(config_dir: Path | None, *, overlay_config_dir: Path | None = None) -> dict:
    merged = copy.deepcopy(DEFAULT_CONFIG)
    if config_dir is not None:
        merged = _deep_merge(merged, _read_optional_yaml(config_dir / DEFAULT_CONFIG_FILENAME))
    if overlay_config_dir is not None:
        merged = _deep_merge(merged, _read_optional_yaml(overlay_config_dir / DEFAULT_CONFIG_FILENAME))
    return merged


def load_config(
    config_dir: Path | None,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> SyncConfig:
    cfg = validate_sync_config(
        load_raw_config(config_dir, overlay_config_dir=overlay_config_dir),
        allow_unknown=allow_unknown,
    )
    source = cfg["source"]
    http = cfg["http"]
    return SyncConfig(
        source=SourceConfig(
            base_url=source["base_url"],
            archive_path=source["archive_path"],
            results_table_id=source["results_table_id"],
            next_page_label=source["next_page_label"],
            current_status_url=source["current_status_url"],
        ),
        timeout=TimeoutConfig(connect=float(http["connect_timeout"]), read=float(http["read_timeout"])),
        retry=RetryConfig(max_attempts=int(http["max_attempts"])),
        index_filename=cfg["ledger"]["index_filename"],
        run_meta_dirname=cfg["ledger"]["run_meta_dirname"],
    )
