"""Run summary reporting."""

from __future__ import annotations

from pathlib import Path

from divi_sync.common.fs import write_json
from divi_sync.pipeline.sync import SyncResult


def write_run_summary(
    run_meta_dir: Path,
    *,
    run_id: str,
    result: SyncResult | None,
    known_url_count: int,
    error_code: str | None = None,
) -> Path:
    status = "success" if error_code is None else "error"
    payload = {
        "run_id": run_id,
        "status": status,
        "error_code": error_code,
        "known_url_count": known_url_count,
    }
    if result is not None:
        payload.update(result.to_dict())

    summary_path = run_meta_dir / f"{run_id}.summary.json"
    write_json(summary_path, payload)
    return summary_path
