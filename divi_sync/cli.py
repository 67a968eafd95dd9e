"""CLI entrypoint for syncing the DIVI intensive care register archive.

``sync`` crawls the archived daily reports, downloads the CSV files and stores
them normalised as JSON, one file per report date. ``current`` prints the live
register status.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from divi_sync.common.config_loader import SyncConfig, load_config
from divi_sync.common.constants import COMMANDS, EXIT_HARD_FAIL, EXIT_SUCCESS
from divi_sync.common.errors import SyncError
from divi_sync.common.http import HttpClient
from divi_sync.common.ids import generate_run_id
from divi_sync.common.logging import build_logger, log_event
from divi_sync.harvest.current_status import fetch_current_status
from divi_sync.harvest.listing import build_archive_lister
from divi_sync.harvest.report_fetch import ReportFetcher
from divi_sync.pipeline.ledger import SyncLedger
from divi_sync.pipeline.reports import write_run_summary
from divi_sync.pipeline.sync import SyncResult, resolve_policy, run_sync


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("-d", "--data-dir", default="./data", help="Directory holding the normalised reports.")
    parser.add_argument(
        "-a",
        "--check-all",
        action="store_true",
        help="Don't stop at the first already synced report, check every listed report.",
    )
    parser.add_argument(
        "-A",
        "--resync-all",
        action="store_true",
        help="Ignore already synced reports and download everything.",
    )
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--run-id", default=None)
    return parser.parse_args(argv)


def build_http_client(config: SyncConfig) -> HttpClient:
    return HttpClient(timeout=config.timeout, retry=config.retry)


def run_sync_command(args: argparse.Namespace, config: SyncConfig, run_id: str) -> int:
    data_dir = Path(args.data_dir)
    run_meta_dir = data_dir / config.run_meta_dirname
    logger = build_logger(run_id, log_dir=run_meta_dir, level=args.log_level)
    policy = resolve_policy(check_all=args.check_all, resync_all=args.resync_all)

    log_event(logger, f"sync start ({policy.value})", run_id=run_id, stage="sync", event="SYNC_START", status="ok")
    ledger = SyncLedger.open(data_dir, index_filename=config.index_filename)

    result: SyncResult | None = None
    try:
        with build_http_client(config) as client:
            lister = build_archive_lister(client, config.source, logger=logger)
            fetcher = ReportFetcher(client, logger=logger)
            result = run_sync(lister, ledger, fetcher, policy=policy, logger=logger, run_id=run_id)
    except SyncError as exc:
        log_event(
            logger,
            f"sync failed: {exc}",
            run_id=run_id,
            stage="sync",
            event="SYNC_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        write_run_summary(
            run_meta_dir,
            run_id=run_id,
            result=None,
            known_url_count=len(ledger),
            error_code=exc.error_code,
        )
        raise

    write_run_summary(run_meta_dir, run_id=run_id, result=result, known_url_count=len(ledger))
    log_event(
        logger,
        f"sync end: {len(result.fetched)} fetched, {len(result.skipped)} skipped",
        run_id=run_id,
        stage="sync",
        event="SYNC_END",
        status="ok",
        rows_out=len(result.fetched),
    )
    return EXIT_SUCCESS


def run_current_command(config: SyncConfig) -> int:
    with build_http_client(config) as client:
        status = fetch_current_status(client, config.source.current_status_url)
    print(json.dumps(status.to_dict(), ensure_ascii=False, indent=2))
    return EXIT_SUCCESS


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    config = load_config(config_dir, overlay_config_dir=overlay_config_dir)

    if args.command == "sync":
        return run_sync_command(args, config, run_id)
    if args.command == "current":
        return run_current_command(config)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        return run_command(args)
    except SyncError as exc:
        print(f"error [{exc.error_code}]: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL
    except Exception as exc:
        print(f"error [UNEXPECTED_ERROR]: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
