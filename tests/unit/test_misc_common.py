import json
from datetime import date, datetime, timezone

from divi_sync.common.ids import generate_run_id
from divi_sync.common.logging import build_logger, log_event
from divi_sync.common.lookup import first_present, lookup_first
from divi_sync.common.time_utils import format_dataset_date, parse_dataset_date, parse_utc_timestamp


def test_first_present_skips_none_and_blank():
    assert first_present(None, "", "  ", "a", "b") == "a"
    assert first_present(None, None) is None
    assert first_present(0, 1) == 0


def test_lookup_first_follows_key_order():
    record = {"gemeindeschluessel": "", "kreis": "09162"}
    assert lookup_first(record, ("gemeindeschluessel", "kreis")) == "09162"
    assert lookup_first(record, ("missing",)) is None


def test_generate_run_id_prefix():
    assert generate_run_id().startswith("sync-")


def test_dataset_date_formatting():
    assert format_dataset_date(date(2021, 1, 5)) == "2021-01-05"
    assert parse_dataset_date("2021-01-05") == date(2021, 1, 5)


def test_parse_utc_timestamp_accepts_zulu_suffix():
    assert parse_utc_timestamp("2021-01-05T11:30:00Z") == datetime(2021, 1, 5, 11, 30, tzinfo=timezone.utc)
    assert parse_utc_timestamp("2021-01-05T11:30:00").tzinfo == timezone.utc


def test_build_logger_writes_json_lines(tmp_path):
    logger = build_logger("run-log", log_dir=tmp_path / "meta")
    log_event(logger, "hello", run_id="run-log", stage="sync", event="SYNC_START", status="ok")
    for handler in logger.handlers:
        handler.flush()

    lines = (tmp_path / "meta" / "run-log.log.jsonl").read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[-1])
    assert record["message"] == "hello"
    assert record["event"] == "SYNC_START"
    assert record["error_code"] is None
