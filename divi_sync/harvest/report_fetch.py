"""Download one archived report and normalise it into a DataSet."""

from __future__ import annotations

import csv
import io
import logging
import re
from datetime import datetime
from typing import Protocol
from urllib.parse import urlparse

from divi_sync.common.errors import DecodeError, ValidationError
from divi_sync.common.logging import get_logger, log_event
from divi_sync.common.models import DataSet, Row
from divi_sync.pipeline.normalise import normalise_row

_URL_TIMESTAMP_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})-(\d{2})-(\d{2})")


class BytesClient(Protocol):
    def get_bytes(self, url: str) -> bytes: ...


def timestamp_hint_from_url(url: str) -> datetime | None:
    match = _URL_TIMESTAMP_RE.search(urlparse(url).path)
    if match is None:
        return None
    year, month, day, hour, minute = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        return None


def decode_report(payload: bytes, source_url: str) -> list[dict[str, str]]:
    try:
        text = payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Report {source_url} is not valid UTF-8") from exc
    try:
        return list(csv.DictReader(io.StringIO(text, newline="")))
    except csv.Error as exc:
        raise DecodeError(f"Malformed CSV in {source_url}: {exc}") from exc


def normalise_report(records: list[dict[str, str]], source_url: str, timestamp_hint: datetime | None) -> DataSet:
    rows: list[Row] = []
    for line_no, record in enumerate(records, start=2):
        try:
            rows.append(normalise_row(record, timestamp_hint))
        except ValidationError as exc:
            raise type(exc)(f"{source_url} line {line_no}: {exc}") from exc
    return DataSet.from_rows(source_url, rows)


class ReportFetcher:
    def __init__(self, client: BytesClient, logger: logging.Logger | None = None) -> None:
        self.client = client
        self.logger = logger or get_logger("harvest.report_fetch")

    def fetch(self, url: str) -> DataSet:
        payload = self.client.get_bytes(url)
        timestamp_hint = timestamp_hint_from_url(url)
        dataset = normalise_report(decode_report(payload, url), url, timestamp_hint)
        log_event(
            self.logger,
            f"Fetched report for {dataset.date.isoformat()}",
            stage="fetch",
            source=url,
            event="REPORT_FETCHED",
            status="ok",
            rows_out=len(dataset.rows),
        )
        return dataset
