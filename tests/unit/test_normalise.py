from datetime import datetime

import pytest

from divi_sync.common.errors import (
    IntegerParseError,
    InvalidRow,
    MissingTimestamp,
    TimestampParseError,
)
from divi_sync.pipeline.normalise import normalise_row, parse_decimal_to_int

CURRENT_ERA = {
    "": "0",
    "bundesland": "1",
    "gemeindeschluessel": "01001",
    "anzahl_meldebereiche": "2",
    "faelle_covid_aktuell": "3",
    "faelle_covid_aktuell_invasiv_beatmet": "1",
    "anzahl_standorte": "2",
    "betten_frei": "12.0",
    "betten_belegt": "30.0",
    "betten_belegt_nur_erwachsen": "28",
    "betten_frei_nur_erwachsen": "10",
    "daten_stand": "2021-01-05 12:15:00",
}

LEGACY_ERA = {
    "kreis": "09162",
    "faelle_covid_aktuell": "40",
    "faelle_covid_aktuell_beatmet": "25",
    "anzahl_standorte": "11",
    "betten_frei": "95",
    "betten_belegt": "410",
}


def test_current_era_row_maps_every_column():
    row = normalise_row(CURRENT_ERA)

    assert row.state == 1
    assert row.ags == "01001"
    assert row.num_report_areas == 2
    assert row.cases_current == 3
    assert row.cases_ventilated == 1
    assert row.num_locations == 2
    assert row.beds_available == 12
    assert row.beds_occupied == 30
    assert row.beds_occupied_adults == 28
    assert row.beds_available_adults == 10
    assert row.timestamp == datetime(2021, 1, 5, 12, 15)


def test_legacy_era_row_uses_fallback_columns_and_hint():
    hint = datetime(2020, 4, 24, 9, 15)
    row = normalise_row(LEGACY_ERA, hint)

    assert row.ags == "09162"
    assert row.state == 9
    assert row.cases_ventilated == 25
    assert row.num_report_areas is None
    assert row.beds_occupied_adults is None
    assert row.timestamp == hint


def test_explicit_timestamp_wins_over_hint():
    row = normalise_row(CURRENT_ERA, datetime(2000, 1, 1, 0, 0))
    assert row.timestamp == datetime(2021, 1, 5, 12, 15)


def test_invasive_ventilation_column_preferred_over_plain():
    raw = dict(LEGACY_ERA, faelle_covid_aktuell_invasiv_beatmet="7")
    assert normalise_row(raw, datetime(2020, 5, 1)).cases_ventilated == 7


def test_missing_ventilation_columns_leave_field_absent():
    raw = {k: v for k, v in LEGACY_ERA.items() if k != "faelle_covid_aktuell_beatmet"}
    row = normalise_row(raw, datetime(2020, 5, 1))
    assert row.cases_ventilated is None
    assert "cases_ventilated" not in row.to_dict()


@pytest.mark.parametrize(
    ("value", "expected"),
    [("12.0", 12), ("12", 12), ("12.5", 12), ("0.0", 0), (7, 7), (3.0, 3)],
)
def test_parse_decimal_to_int_truncates(value, expected):
    assert parse_decimal_to_int(value) == expected


@pytest.mark.parametrize("value", ["12.5garbage", "abc", "-1", ".5", "", None])
def test_parse_decimal_to_int_rejects_non_numeric(value):
    with pytest.raises(InvalidRow):
        parse_decimal_to_int(value)


def test_missing_region_key_is_invalid_regardless_of_other_fields():
    raw = {k: v for k, v in CURRENT_ERA.items() if k != "gemeindeschluessel"}
    with pytest.raises(InvalidRow):
        normalise_row(raw)

    raw.pop("daten_stand")
    with pytest.raises(InvalidRow):
        normalise_row(raw)


def test_missing_timestamp_without_hint():
    with pytest.raises(MissingTimestamp):
        normalise_row(LEGACY_ERA)


def test_unparsable_timestamp_raises():
    with pytest.raises(TimestampParseError):
        normalise_row(dict(CURRENT_ERA, daten_stand="05.01.2021 12:15"))


def test_state_prefix_must_be_numeric():
    raw = dict(LEGACY_ERA, kreis="X9162")
    with pytest.raises(IntegerParseError):
        normalise_row(raw, datetime(2020, 5, 1))


def test_explicit_state_column_wins_over_prefix():
    row = normalise_row(dict(CURRENT_ERA, bundesland="3", gemeindeschluessel="01001"))
    assert row.state == 3


def test_missing_location_count_is_invalid():
    raw = dict(CURRENT_ERA, anzahl_standorte="")
    with pytest.raises(InvalidRow):
        normalise_row(raw)


def test_invalid_bed_count_is_invalid_row():
    with pytest.raises(InvalidRow):
        normalise_row(dict(CURRENT_ERA, betten_frei="n/a"))


def test_normalise_is_deterministic():
    assert normalise_row(CURRENT_ERA) == normalise_row(CURRENT_ERA)
    hint = datetime(2020, 4, 24, 9, 15)
    assert normalise_row(LEGACY_ERA, hint) == normalise_row(LEGACY_ERA, hint)
