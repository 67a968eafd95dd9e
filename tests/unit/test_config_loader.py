from pathlib import Path

import pytest

from divi_sync.common.config_loader import load_config
from divi_sync.common.errors import ConfigError


def test_load_config_from_repo_config_dir():
    config = load_config(Path("config"))

    assert config.source.base_url == "https://www.divi.de"
    assert config.source.archive_url == "https://www.divi.de/divi-intensivregister-tagesreport-archiv-csv"
    assert config.source.next_page_label == "Weiter"
    assert config.retry.max_attempts == 1
    assert config.index_filename == "info.json"


def test_load_config_without_file_uses_defaults(tmp_path: Path):
    config = load_config(tmp_path / "missing")
    assert config.source.results_table_id == "table-document"
    assert config.timeout.read == 120.0


def test_load_config_applies_overlay_values(tmp_path: Path):
    base = tmp_path / "base"
    overlay = tmp_path / "overlay"
    base.mkdir()
    overlay.mkdir()

    (base / "divi_sync.yml").write_text(
        """source:
  base_url: "https://mirror.example"
http:
  read_timeout: 60
""",
        encoding="utf-8",
    )
    (overlay / "divi_sync.yml").write_text(
        """http:
  max_attempts: 4
ledger:
  index_filename: synced.json
""",
        encoding="utf-8",
    )

    config = load_config(base, overlay_config_dir=overlay)

    assert config.source.base_url == "https://mirror.example"
    assert config.source.archive_url == "https://mirror.example/divi-intensivregister-tagesreport-archiv-csv"
    assert config.timeout.read == 60.0
    assert config.retry.max_attempts == 4
    assert config.index_filename == "synced.json"


def test_load_config_rejects_unknown_keys(tmp_path: Path):
    (tmp_path / "divi_sync.yml").write_text("source:\n  proxy: x\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)

    config = load_config(tmp_path, allow_unknown=True)
    assert config.source.base_url == "https://www.divi.de"


def test_load_config_rejects_non_mapping_file(tmp_path: Path):
    (tmp_path / "divi_sync.yml").write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)
