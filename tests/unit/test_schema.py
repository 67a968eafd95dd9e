import copy

import pytest

from divi_sync.common.constants import DEFAULT_CONFIG
from divi_sync.common.errors import ConfigError
from divi_sync.common.schema import validate_sync_config


def _config() -> dict:
    return copy.deepcopy(DEFAULT_CONFIG)


def test_validate_sync_config_accepts_defaults():
    validated = validate_sync_config(_config())
    assert validated["source"]["next_page_label"] == "Weiter"


def test_validate_sync_config_rejects_unknown_key_by_default():
    bad = _config()
    bad["unexpected"] = True
    with pytest.raises(ConfigError):
        validate_sync_config(bad)


def test_validate_sync_config_allows_unknown_when_enabled():
    okay = _config()
    okay["extra"] = 1
    okay["http"]["proxy"] = "http://proxy"
    validate_sync_config(okay, allow_unknown=True)


def test_validate_sync_config_rejects_missing_section_key():
    bad = _config()
    del bad["source"]["results_table_id"]
    with pytest.raises(ConfigError):
        validate_sync_config(bad)


@pytest.mark.parametrize(
    ("section", "key", "value"),
    [
        ("http", "max_attempts", 0),
        ("http", "read_timeout", -1),
        ("source", "base_url", "ftp://divi.de"),
        ("source", "next_page_label", ""),
        ("ledger", "index_filename", None),
    ],
)
def test_validate_sync_config_rejects_bad_values(section, key, value):
    bad = _config()
    bad[section][key] = value
    with pytest.raises(ConfigError):
        validate_sync_config(bad)
