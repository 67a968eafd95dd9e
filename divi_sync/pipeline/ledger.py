"""Persisted record of ingested reports.

The ledger directory holds one ``YYYY-MM-DD.json`` file per report date plus an
index file listing every source URL already ingested. A dataset file is always
written before its URL enters the index, so a crash in between leaves a
dataset that is fetched again on the next run rather than a URL that is marked
known without its data.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

from divi_sync.common.constants import DEFAULT_CONFIG
from divi_sync.common.errors import DecodeError, PersistenceError, ValidationError
from divi_sync.common.fs import ensure_dir, read_json, write_json
from divi_sync.common.models import DataSet
from divi_sync.common.time_utils import format_dataset_date, parse_dataset_date

DEFAULT_INDEX_FILENAME = DEFAULT_CONFIG["ledger"]["index_filename"]


def _load_known_urls(index_path: Path) -> set[str]:
    if not index_path.exists():
        return set()
    try:
        payload = read_json(index_path)
    except (OSError, ValueError) as exc:
        raise PersistenceError(f"Unreadable ledger index {index_path}: {exc}") from exc
    urls = payload.get("urls_synced") if isinstance(payload, dict) else None
    if not isinstance(urls, list) or not all(isinstance(url, str) for url in urls):
        raise PersistenceError(f"Ledger index {index_path} has no urls_synced list")
    return set(urls)


class SyncLedger:
    def __init__(self, path: Path, known_urls: set[str], *, index_filename: str = DEFAULT_INDEX_FILENAME) -> None:
        self.path = path
        self.index_filename = index_filename
        self._known_urls = set(known_urls)

    @classmethod
    def open(cls, path: Path, *, index_filename: str = DEFAULT_INDEX_FILENAME) -> "SyncLedger":
        try:
            ensure_dir(path)
        except OSError as exc:
            raise PersistenceError(f"Cannot create ledger directory {path}: {exc}") from exc
        known_urls = _load_known_urls(path / index_filename)
        return cls(path, known_urls, index_filename=index_filename)

    @property
    def index_path(self) -> Path:
        return self.path / self.index_filename

    @property
    def known_urls(self) -> frozenset[str]:
        return frozenset(self._known_urls)

    def __contains__(self, url: object) -> bool:
        return url in self._known_urls

    def __len__(self) -> int:
        return len(self._known_urls)

    def contains(self, url: str) -> bool:
        return url in self._known_urls

    def dataset_path(self, day: date) -> Path:
        return self.path / f"{format_dataset_date(day)}.json"

    def stored_dates(self) -> list[date]:
        dates = []
        for candidate in self.path.glob("*.json"):
            try:
                dates.append(parse_dataset_date(candidate.stem))
            except ValueError:
                continue
        return sorted(dates)

    def put(self, dataset: DataSet) -> Path:
        dataset_path = self.dataset_path(dataset.date)
        try:
            write_json(dataset_path, dataset.to_dict())
        except OSError as exc:
            raise PersistenceError(f"Cannot write dataset {dataset_path}: {exc}") from exc

        newly_known = dataset.source_url not in self._known_urls
        self._known_urls.add(dataset.source_url)
        try:
            self._save_index()
        except OSError as exc:
            if newly_known:
                self._known_urls.discard(dataset.source_url)
            raise PersistenceError(f"Cannot write ledger index {self.index_path}: {exc}") from exc
        return dataset_path

    def get(self, day: date) -> DataSet:
        dataset_path = self.dataset_path(day)
        try:
            payload = read_json(dataset_path)
        except FileNotFoundError as exc:
            raise PersistenceError(f"No dataset stored for {format_dataset_date(day)}") from exc
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Unreadable dataset {dataset_path}: {exc}") from exc
        try:
            return DataSet.from_dict(payload)
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            raise DecodeError(f"Invalid dataset document {dataset_path}: {exc}") from exc

    def _save_index(self) -> None:
        write_json(self.index_path, {"urls_synced": sorted(self._known_urls)})
