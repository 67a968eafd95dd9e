"""Normalise raw report rows from every archive era onto the canonical Row.

The CSV layout drifted over the lifetime of the register:

* early files carry no ``daten_stand`` column, the report time only exists in
  the file name and is passed in as ``timestamp_hint``;
* early files name the district column ``kreis`` instead of
  ``gemeindeschluessel`` and have no ``bundesland`` column;
* ventilated cases moved from ``faelle_covid_aktuell_beatmet`` to
  ``faelle_covid_aktuell_invasiv_beatmet``;
* bed counts are published as decimals (``"12.0"``).
"""

from __future__ import annotations

import math
import re
from datetime import datetime

from divi_sync.common.constants import REPORT_TIMESTAMP_FORMAT
from divi_sync.common.errors import (
    IntegerParseError,
    InvalidRow,
    MissingTimestamp,
    TimestampParseError,
)
from divi_sync.common.lookup import first_present, is_blank, lookup_first
from divi_sync.common.models import RawRecord, Row

REGION_KEY_COLUMNS = ("gemeindeschluessel", "kreis")
VENTILATED_COLUMNS = ("faelle_covid_aktuell_invasiv_beatmet", "faelle_covid_aktuell_beatmet")

_DECIMAL_RE = re.compile(r"^(\d+)(?:\.(\d*))?$", re.ASCII)
_INTEGER_RE = re.compile(r"^\d+$", re.ASCII)
_STATE_PREFIX_RE = re.compile(r"^\d{2}$", re.ASCII)


def parse_decimal_to_int(value: object, *, column: str = "value") -> int:
    """Truncate a decimal-formatted count (``"12.0"``) to a non-negative int."""
    if isinstance(value, bool) or is_blank(value):
        raise InvalidRow(f"Missing {column}")
    if isinstance(value, int):
        if value < 0:
            raise InvalidRow(f"Negative {column}: {value}")
        return value
    if isinstance(value, float):
        if not math.isfinite(value) or value < 0:
            raise InvalidRow(f"Invalid {column}: {value}")
        return int(value)

    text = str(value).strip()
    match = _DECIMAL_RE.match(text)
    if match is None:
        raise InvalidRow(f"Tried to parse integer with decimal point, but failed: {column}={text!r}")
    return int(match.group(1))


def _parse_int(value: object, column: str) -> int:
    if isinstance(value, bool):
        raise InvalidRow(f"Invalid integer for {column}: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise InvalidRow(f"Negative {column}: {value}")
        return value
    text = str(value).strip()
    if not _INTEGER_RE.match(text):
        raise InvalidRow(f"Invalid integer for {column}: {text!r}")
    return int(text)


def _optional_int(raw: RawRecord, column: str) -> int | None:
    value = raw.get(column)
    if is_blank(value):
        return None
    return _parse_int(value, column)


def _required_int(raw: RawRecord, column: str) -> int:
    value = raw.get(column)
    if is_blank(value):
        raise InvalidRow(f"Missing {column}")
    return _parse_int(value, column)


def _parse_report_timestamp(value: object) -> datetime:
    try:
        return datetime.strptime(str(value).strip(), REPORT_TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise TimestampParseError(f"Invalid daten_stand: {value!r}") from exc


def resolve_timestamp(raw: RawRecord, timestamp_hint: datetime | None) -> datetime:
    explicit = raw.get("daten_stand")
    timestamp = first_present(
        _parse_report_timestamp(explicit) if not is_blank(explicit) else None,
        timestamp_hint,
    )
    if timestamp is None:
        raise MissingTimestamp("Row has no daten_stand and no timestamp hint was given")
    return timestamp


def resolve_region_key(raw: RawRecord) -> str:
    ags = lookup_first(raw, REGION_KEY_COLUMNS)
    if ags is None:
        raise InvalidRow("Missing gemeindeschluessel")
    return str(ags).strip()


def resolve_state(raw: RawRecord, ags: str) -> int:
    bundesland = raw.get("bundesland")
    if not is_blank(bundesland):
        try:
            return _parse_int(bundesland, "bundesland")
        except InvalidRow as exc:
            raise IntegerParseError(str(exc)) from exc

    prefix = ags[:2]
    if not _STATE_PREFIX_RE.match(prefix):
        raise IntegerParseError(f"Cannot parse state from gemeindeschluessel {ags!r}")
    return int(prefix)


def normalise_row(raw: RawRecord, timestamp_hint: datetime | None = None) -> Row:
    ags = resolve_region_key(raw)
    timestamp = resolve_timestamp(raw, timestamp_hint)
    ventilated = lookup_first(raw, VENTILATED_COLUMNS)

    return Row(
        state=resolve_state(raw, ags),
        ags=ags,
        num_report_areas=_optional_int(raw, "anzahl_meldebereiche"),
        cases_current=_optional_int(raw, "faelle_covid_aktuell"),
        cases_ventilated=_parse_int(ventilated, "faelle_covid_aktuell_beatmet") if ventilated is not None else None,
        num_locations=_required_int(raw, "anzahl_standorte"),
        beds_available=parse_decimal_to_int(raw.get("betten_frei"), column="betten_frei"),
        beds_occupied=parse_decimal_to_int(raw.get("betten_belegt"), column="betten_belegt"),
        timestamp=timestamp,
        beds_occupied_adults=_optional_int(raw, "betten_belegt_nur_erwachsen"),
        beds_available_adults=_optional_int(raw, "betten_frei_nur_erwachsen"),
    )
