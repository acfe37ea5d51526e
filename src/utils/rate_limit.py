"""Minimum-interval rate limiter for outbound network calls."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class RateLimiter:
    """Enforce a minimum spacing between successive calls to ``wait()``.

    Thread-safe: concurrent callers are queued behind a lock, so the spacing
    holds regardless of how many workers share the limiter. The first call
    never waits.
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_interval < 0:
            msg = "min_interval must not be negative"
            raise ValueError(msg)
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_call: float | None = None

    def wait(self) -> float:
        """Block until the next call is allowed. Returns seconds slept."""
        with self._lock:
            slept = 0.0
            if self._last_call is not None:
                remaining = self.min_interval - (self._clock() - self._last_call)
                if remaining > 0:
                    self._sleep(remaining)
                    slept = remaining
            self._last_call = self._clock()
            return slept
