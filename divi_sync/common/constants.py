"""Application constants."""

USER_AGENT = "divi-sync/0.1 (+archive mirror)"
COMMANDS = ("sync", "current")
EXIT_SUCCESS = 0
EXIT_HARD_FAIL = 20

REPORT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DATASET_DATE_FORMAT = "%Y-%m-%d"

DEFAULT_CONFIG_FILENAME = "divi_sync.yml"
DEFAULT_CONFIG = {
    "source": {
        "base_url": "https://www.divi.de",
        "archive_path": "divi-intensivregister-tagesreport-archiv-csv",
        "results_table_id": "table-document",
        "next_page_label": "Weiter",
        "current_status_url": "https://www.intensivregister.de/api/public/intensivregister",
    },
    "http": {
        "connect_timeout": 20,
        "read_timeout": 120,
        "max_attempts": 1,
    },
    "ledger": {
        "index_filename": "info.json",
        "run_meta_dirname": "run_meta",
    },
}

JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "source",
    "event",
    "status",
    "rows_out",
    "error_code",
    "message",
)
