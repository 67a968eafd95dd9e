"""Data models used across the sync."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import date, datetime
from typing import Any, Iterable, Mapping

from divi_sync.common.errors import DecodeError, EmptyDataSet
from divi_sync.common.time_utils import format_dataset_date, parse_dataset_date, parse_utc_timestamp

RawRecord = Mapping[str, Any]

OPTIONAL_ROW_FIELDS = (
    "num_report_areas",
    "cases_current",
    "cases_ventilated",
    "beds_occupied_adults",
    "beds_available_adults",
)


@dataclass(frozen=True)
class Row:
    """One region's bed occupancy at one report timestamp.

    ``state`` is the two-digit federal state prefix of ``ags`` (the
    Amtlicher Gemeindeschluessel of the reporting district).
    """

    state: int
    ags: str
    num_locations: int
    beds_available: int
    beds_occupied: int
    timestamp: datetime
    num_report_areas: int | None = None
    cases_current: int | None = None
    cases_ventilated: int | None = None
    beds_occupied_adults: int | None = None
    beds_available_adults: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for field in fields(self):
            value = getattr(self, field.name)
            if value is None and field.name in OPTIONAL_ROW_FIELDS:
                continue
            out[field.name] = value
        out["timestamp"] = self.timestamp.isoformat(timespec="seconds")
        return out

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Row":
        return cls(
            state=int(payload["state"]),
            ags=str(payload["ags"]),
            num_locations=int(payload["num_locations"]),
            beds_available=int(payload["beds_available"]),
            beds_occupied=int(payload["beds_occupied"]),
            timestamp=datetime.fromisoformat(payload["timestamp"]),
            **{name: _optional_int(payload.get(name)) for name in OPTIONAL_ROW_FIELDS},
        )


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)


@dataclass(frozen=True)
class DataSet:
    date: date
    source_url: str
    rows: tuple[Row, ...]

    def __post_init__(self) -> None:
        if not self.rows:
            raise EmptyDataSet(f"Dataset from {self.source_url} has no rows")
        first_date = self.rows[0].timestamp.date()
        if self.date != first_date:
            raise ValueError(f"Dataset date {self.date} does not match first row date {first_date}")

    @classmethod
    def from_rows(cls, source_url: str, rows: Iterable[Row]) -> "DataSet":
        rows = tuple(rows)
        if not rows:
            raise EmptyDataSet(f"Dataset from {source_url} has no rows")
        return cls(date=rows[0].timestamp.date(), source_url=source_url, rows=rows)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": format_dataset_date(self.date),
            "source_url": self.source_url,
            "rows": [row.to_dict() for row in self.rows],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DataSet":
        return cls(
            date=parse_dataset_date(payload["date"]),
            source_url=str(payload["source_url"]),
            rows=tuple(Row.from_dict(row) for row in payload["rows"]),
        )


@dataclass(frozen=True)
class PageListing:
    resource_urls: tuple[str, ...]
    next_page_url: str | None


# Live register status. Field names follow the JSON document of the public
# intensivregister API.


def _require(payload: Mapping[str, Any], key: str, ctx: str) -> Any:
    if not isinstance(payload, Mapping) or key not in payload:
        raise DecodeError(f"Missing '{key}' in {ctx}")
    return payload[key]


def _timestamp(payload: Mapping[str, Any], key: str, ctx: str) -> datetime:
    raw = _require(payload, key, ctx)
    try:
        return parse_utc_timestamp(str(raw))
    except ValueError as exc:
        raise DecodeError(f"Invalid timestamp '{raw}' for '{key}' in {ctx}") from exc


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


@dataclass(frozen=True)
class GeoPosition:
    latitude: float
    longitude: float

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GeoPosition":
        return cls(
            latitude=float(_require(payload, "latitude", "position")),
            longitude=float(_require(payload, "longitude", "position")),
        )


@dataclass(frozen=True)
class HospitalLocation:
    id: str
    name: str
    address_street: str
    address_house_number: str
    address_postcode: str
    address_city: str
    state: str
    ik_number: str
    position: GeoPosition
    community_key: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "HospitalLocation":
        ctx = "krankenhausStandort"
        return cls(
            id=str(_require(payload, "id", ctx)),
            name=str(_require(payload, "bezeichnung", ctx)),
            address_street=str(_require(payload, "strasse", ctx)),
            address_house_number=str(_require(payload, "hausnummer", ctx)),
            address_postcode=str(_require(payload, "plz", ctx)),
            address_city=str(_require(payload, "ort", ctx)),
            state=str(_require(payload, "bundesland", ctx)),
            ik_number=str(_require(payload, "ikNummer", ctx)),
            position=GeoPosition.from_payload(_require(payload, "position", ctx)),
            community_key=str(_require(payload, "gemeindeschluessel", ctx)),
        )


@dataclass(frozen=True)
class ReportArea:
    id: str
    ards_network_member: str
    name: str
    treatment_focus_l1: str | None
    treatment_focus_l2: str | None
    treatment_focus_l3: str | None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ReportArea":
        ctx = "meldebereiche"
        return cls(
            id=str(_require(payload, "meldebereichId", ctx)),
            ards_network_member=str(_require(payload, "ardsNetzwerkMitglied", ctx)),
            name=str(_require(payload, "meldebereichBezeichnung", ctx)),
            treatment_focus_l1=payload.get("behandlungsSchwerpunktL1"),
            treatment_focus_l2=payload.get("behandlungsSchwerpunktL2"),
            treatment_focus_l3=payload.get("behandlungsSchwerpunktL3"),
        )


@dataclass(frozen=True)
class StatusSum:
    last_report_time: datetime
    oldest_report_time: datetime
    max_beds_status_estimate_ecmo: str
    max_beds_status_estimate_high_care: str
    max_beds_status_estimate_low_care: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], ctx: str = "sum") -> "StatusSum":
        return cls(**_status_fields(payload, ctx))


def _status_fields(payload: Mapping[str, Any], ctx: str) -> dict[str, Any]:
    return {
        "last_report_time": _timestamp(payload, "letzteMeldezeitpunkt", ctx),
        "oldest_report_time": _timestamp(payload, "oldestMeldezeitpunkt", ctx),
        "max_beds_status_estimate_ecmo": str(_require(payload, "maxBettenStatusEinschaetzungEcmo", ctx)),
        "max_beds_status_estimate_high_care": str(_require(payload, "maxBettenStatusEinschaetzungHighCare", ctx)),
        "max_beds_status_estimate_low_care": str(_require(payload, "maxBettenStatusEinschaetzungLowCare", ctx)),
    }


@dataclass(frozen=True)
class StatusEntry:
    hospital_location: HospitalLocation
    report_areas: tuple[ReportArea, ...]
    last_report_time: datetime
    oldest_report_time: datetime
    max_beds_status_estimate_ecmo: str
    max_beds_status_estimate_high_care: str
    max_beds_status_estimate_low_care: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "StatusEntry":
        ctx = "data entry"
        return cls(
            hospital_location=HospitalLocation.from_payload(_require(payload, "krankenhausStandort", ctx)),
            report_areas=tuple(ReportArea.from_payload(area) for area in _require(payload, "meldebereiche", ctx)),
            **_status_fields(payload, ctx),
        )


@dataclass(frozen=True)
class CurrentStatus:
    row_count: int
    data: tuple[StatusEntry, ...]
    sum: StatusSum

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CurrentStatus":
        ctx = "current status"
        entries = _require(payload, "data", ctx)
        if not isinstance(entries, list):
            raise DecodeError("'data' in current status must be a list")
        try:
            row_count = int(_require(payload, "rowCount", ctx))
        except (TypeError, ValueError) as exc:
            raise DecodeError("'rowCount' in current status must be an integer") from exc
        return cls(
            row_count=row_count,
            data=tuple(StatusEntry.from_payload(entry) for entry in entries),
            sum=StatusSum.from_payload(_require(payload, "sum", ctx)),
        )

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))
