"""Timestamp helpers for run metadata and report parsing."""

from __future__ import annotations

from datetime import date, datetime, timezone

from divi_sync.common.constants import DATASET_DATE_FORMAT


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")


def parse_utc_timestamp(value: str) -> datetime:
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on.
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_dataset_date(value: date) -> str:
    return value.strftime(DATASET_DATE_FORMAT)


def parse_dataset_date(value: str) -> date:
    return datetime.strptime(value, DATASET_DATE_FORMAT).date()
