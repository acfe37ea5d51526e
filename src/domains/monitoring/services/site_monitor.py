"""Site monitoring run: fetch, extract, compare, deliver and persist per page."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from src.domains.monitoring.core.change_detection import detect_changes
from src.domains.monitoring.core.checksum import compute_snapshot_checksum
from src.domains.monitoring.core.page_features import extract_page_snapshot
from src.models.change_event import ChangeEvent, ChangeKind, ReportedChange, Significance
from src.models.run_summary import RunSummary
from src.services.event_sink import SinkDeliveryError
from src.services.page_fetcher import FetchError
from src.utils.progress import ProgressTracker
from src.utils.rate_limit import RateLimiter

if TYPE_CHECKING:
    from collections.abc import Sequence

    from src.models.competitor import CompetitorPage, CompetitorTarget
    from src.services.protocols import (
        EventSinkProtocol,
        PageFetcherProtocol,
        SnapshotStoreProtocol,
    )

logger = structlog.get_logger(__name__)


@dataclass
class PageCheckResult:
    """Outcome of checking a single competitor page."""

    competitor: CompetitorTarget
    page: CompetitorPage
    changes: list[ReportedChange] = field(default_factory=list)
    error: str | None = None


def is_baseline_only(events: Sequence[ChangeEvent]) -> bool:
    """True when the only event is the first snapshot of a page."""
    return len(events) == 1 and events[0].kind == ChangeKind.NEW_BASELINE


def today_utc() -> str:
    """Run date in YYYY-MM-DD format."""
    return datetime.now(UTC).date().isoformat()


class SiteMonitor:
    """Runs the change-detection pipeline over every configured competitor page.

    A failure on one page is recorded as a FETCH_ERROR change and never
    stops the remaining pages. Fetches are spaced by ``page_limiter`` and
    deliveries by ``delivery_limiter``, independent of ``max_workers``.
    """

    def __init__(
        self,
        fetcher: PageFetcherProtocol,
        snapshot_repo: SnapshotStoreProtocol,
        sink: EventSinkProtocol,
        page_limiter: RateLimiter | None = None,
        delivery_limiter: RateLimiter | None = None,
        max_workers: int = 1,
    ) -> None:
        if max_workers < 1:
            msg = "max_workers must be at least 1"
            raise ValueError(msg)
        self.fetcher = fetcher
        self.snapshot_repo = snapshot_repo
        self.sink = sink
        self.page_limiter = page_limiter or RateLimiter(2.0)
        self.delivery_limiter = delivery_limiter or RateLimiter(0.5)
        self.max_workers = max_workers
        self._key_locks: dict[tuple[str, str], threading.Lock] = {}
        self._key_locks_guard = threading.Lock()

    def _lock_for(self, competitor_id: str, page_name: str) -> threading.Lock:
        with self._key_locks_guard:
            return self._key_locks.setdefault((competitor_id, page_name), threading.Lock())

    def run(
        self,
        competitors: Sequence[CompetitorTarget],
        run_date: str | None = None,
    ) -> RunSummary:
        """Check every page of every competitor and return the run summary.

        Changes in the summary follow configuration order, whatever order
        the pages completed in.
        """
        run_date = run_date or today_utc()
        jobs = [(competitor, page) for competitor in competitors for page in competitor.pages]
        tracker = ProgressTracker(total=len(jobs))

        def process(job: tuple[CompetitorTarget, CompetitorPage]) -> PageCheckResult:
            competitor, page = job
            result = self.check_page(competitor, page, run_date)
            if result.error is None:
                tracker.record_success(sum(1 for c in result.changes if c.event.is_real_change))
            else:
                tracker.record_failure(f"{competitor.name} / {page.name}: {result.error}")
            tracker.log_progress(every_n=10)
            return result

        if self.max_workers == 1:
            results = [process(job) for job in jobs]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(process, jobs))

        changes = [change for result in results for change in result.changes]
        summary = RunSummary(
            run_date=run_date,
            changes=changes,
            pages_checked=tracker.processed,
            pages_failed=tracker.failed,
            duration_seconds=round(tracker.elapsed_seconds, 2),
            errors=tracker.errors,
        )
        logger.info(
            "site_check_complete",
            pages_checked=summary.pages_checked,
            pages_failed=summary.pages_failed,
            real_changes=summary.real_change_count,
        )
        return summary

    def check_page(
        self,
        competitor: CompetitorTarget,
        page: CompetitorPage,
        run_date: str,
    ) -> PageCheckResult:
        """Fetch, extract, compare, deliver and persist a single page."""
        url = str(page.url)
        log = logger.bind(competitor=competitor.name, page=page.name, url=url)
        result = PageCheckResult(competitor=competitor, page=page)

        self.page_limiter.wait()
        try:
            markup = self.fetcher.fetch(url)
            current = extract_page_snapshot(markup)

            with self._lock_for(competitor.id, page.name):
                previous = self.snapshot_repo.get_snapshot(competitor.id, page.name)
                events = detect_changes(previous, current)
                result.changes = [
                    ReportedChange(
                        competitor_name=competitor.name,
                        page_name=page.name,
                        run_date=run_date,
                        event=event,
                    )
                    for event in events
                ]

                if events and not is_baseline_only(events):
                    log.info("changes_detected", count=len(events))
                    self._deliver_all(result.changes)
                elif events:
                    log.info("baseline_created")
                elif previous is not None and compute_snapshot_checksum(
                    previous
                ) == compute_snapshot_checksum(current):
                    log.info("page_unchanged")
                else:
                    log.info("no_significant_changes")

                # Always persist the latest observed state, changed or not.
                self.snapshot_repo.save_snapshot(competitor.id, page.name, current)
        except FetchError as exc:
            log.error("page_fetch_failed", attempts=exc.attempts, error=str(exc.cause))
            result.error = str(exc)
            result.changes.append(self._error_change(competitor, page, run_date, str(exc)))
        except Exception as exc:
            log.error("page_check_failed", error_type=type(exc).__name__, error=str(exc))
            description = f"{type(exc).__name__}: {exc}"
            result.error = description
            # changes already delivered stay in the summary
            result.changes.append(self._error_change(competitor, page, run_date, description))

        return result

    def _deliver_all(self, changes: Sequence[ReportedChange]) -> None:
        for change in changes:
            self.delivery_limiter.wait()
            try:
                self.sink.deliver(change)
            except SinkDeliveryError as exc:
                logger.error(
                    "change_delivery_failed",
                    competitor=change.competitor_name,
                    page=change.page_name,
                    change_type=change.event.kind.value,
                    error=str(exc),
                )

    @staticmethod
    def _error_change(
        competitor: CompetitorTarget,
        page: CompetitorPage,
        run_date: str,
        description: str,
    ) -> ReportedChange:
        return ReportedChange(
            competitor_name=competitor.name,
            page_name=page.name,
            run_date=run_date,
            event=ChangeEvent(
                kind=ChangeKind.FETCH_ERROR,
                description=description,
                significance=Significance.LOW,
            ),
        )
