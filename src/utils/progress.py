"""Progress tracking utilities for site-check runs."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field

from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ProgressTracker:
    """Track pages checked during one run. Safe to share between workers."""

    total: int
    processed: int = 0
    successful: int = 0
    failed: int = 0
    changes_detected: int = 0
    errors: list[str] = field(default_factory=list)
    start_time: float = field(default_factory=time.monotonic)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_success(self, changes: int = 0) -> None:
        """Record a page checked end to end and how many real changes it had."""
        with self._lock:
            self.processed += 1
            self.successful += 1
            self.changes_detected += changes

    def record_failure(self, error: str) -> None:
        """Record a page whose check failed; ``error`` names the page and cause."""
        with self._lock:
            self.processed += 1
            self.failed += 1
            self.errors.append(error)

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self.start_time

    @property
    def progress_percentage(self) -> float:
        if self.total == 0:
            return 100.0
        return (self.processed / self.total) * 100.0

    def log_progress(self, every_n: int = 10) -> None:
        """Log progress every N pages and once the last page is done."""
        with self._lock:
            due = self.processed % every_n == 0 or self.processed == self.total
            if not due:
                return
            logger.info(
                "run_progress",
                processed=self.processed,
                total=self.total,
                failed=self.failed,
                changes_detected=self.changes_detected,
                percentage=f"{self.progress_percentage:.1f}%",
                elapsed=f"{self.elapsed_seconds:.1f}s",
            )
