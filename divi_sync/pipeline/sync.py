"""Drive listing, ledger checks, fetching and storing for one sync run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Protocol

from divi_sync.common.logging import get_logger, log_event
from divi_sync.common.models import DataSet


class ResumePolicy(str, Enum):
    # The archive lists newest reports first, so the first known URL marks
    # the point where everything older is known too.
    STOP_AT_FIRST_KNOWN = "stop-at-first-known"
    CHECK_ALL = "check-all"
    RESYNC_ALL = "resync-all"


def resolve_policy(*, check_all: bool = False, resync_all: bool = False) -> ResumePolicy:
    if resync_all:
        return ResumePolicy.RESYNC_ALL
    if check_all:
        return ResumePolicy.CHECK_ALL
    return ResumePolicy.STOP_AT_FIRST_KNOWN


class Ledger(Protocol):
    def contains(self, url: str) -> bool: ...

    def put(self, dataset: DataSet) -> object: ...


class Fetcher(Protocol):
    def fetch(self, url: str) -> DataSet: ...


@dataclass
class SyncResult:
    policy: ResumePolicy
    fetched: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    stored_dates: list[date] = field(default_factory=list)
    stopped_at: str | None = None

    def to_dict(self) -> dict:
        return {
            "policy": self.policy.value,
            "fetched_count": len(self.fetched),
            "skipped_count": len(self.skipped),
            "fetched": list(self.fetched),
            "skipped": list(self.skipped),
            "stored_dates": [day.isoformat() for day in self.stored_dates],
            "stopped_at": self.stopped_at,
        }


def run_sync(
    urls: Iterable[str],
    ledger: Ledger,
    fetcher: Fetcher,
    *,
    policy: ResumePolicy = ResumePolicy.STOP_AT_FIRST_KNOWN,
    logger: logging.Logger | None = None,
    run_id: str | None = None,
) -> SyncResult:
    """Ingest every listed report the ledger does not know yet.

    Listing, fetch and store failures propagate and end the run; reports stored
    before the failure stay in the ledger.
    """
    logger = logger or get_logger("pipeline.sync")
    result = SyncResult(policy=policy)

    for url in urls:
        if policy is not ResumePolicy.RESYNC_ALL and ledger.contains(url):
            if policy is ResumePolicy.CHECK_ALL:
                result.skipped.append(url)
                log_event(logger, f"Skipping {url}", run_id=run_id, stage="sync", source=url, event="SKIP_KNOWN")
                continue
            result.stopped_at = url
            log_event(
                logger,
                f"Stopping, already known: {url}",
                run_id=run_id,
                stage="sync",
                source=url,
                event="STOP_KNOWN",
            )
            break

        log_event(logger, f"Downloading {url}", run_id=run_id, stage="sync", source=url, event="FETCH_START")
        dataset = fetcher.fetch(url)
        ledger.put(dataset)
        result.fetched.append(url)
        result.stored_dates.append(dataset.date)
        log_event(
            logger,
            f"Stored {dataset.date.isoformat()}",
            run_id=run_id,
            stage="sync",
            source=url,
            event="STORED",
            status="ok",
            rows_out=len(dataset.rows),
        )

    return result
