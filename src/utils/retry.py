"""Retry policy with structured logging using tenacity."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import requests
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
)

from src.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger(__name__)

# Exception types that trigger retries:
# - requests transport errors and HTTPError raised for non-2xx responses
# - standard Python network errors (ConnectionError, TimeoutError)
_RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    requests.RequestException,
    ConnectionError,
    TimeoutError,
)


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempt with structured context."""
    logger.warning(
        "retrying_operation",
        attempt=retry_state.attempt_number,
        function=getattr(retry_state.fn, "__name__", "unknown"),
        wait_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else "unknown",
    )


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with exponential backoff.

    The wait after failed attempt ``n`` is ``backoff_multiplier * 2 ** (n - 1)``
    seconds, capped at ``backoff_max``.
    """

    max_attempts: int = 3
    backoff_multiplier: float = 2.0
    backoff_max: float = 30.0
    retry_on: tuple[type[BaseException], ...] = _RETRYABLE_EXCEPTIONS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            msg = "max_attempts must be at least 1"
            raise ValueError(msg)
        if self.backoff_multiplier < 0 or self.backoff_max < 0:
            msg = "backoff values must not be negative"
            raise ValueError(msg)

    def wait_seconds(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        return min(self.backoff_multiplier * 2 ** (attempt - 1), self.backoff_max)

    def build_retrying(self, sleep: Callable[[float], None] = time.sleep) -> Retrying:
        """Return a tenacity Retrying controller for this policy.

        ``sleep`` is injectable so the policy can be exercised without waiting.
        """
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=lambda state: self.wait_seconds(state.attempt_number),
            retry=retry_if_exception_type(self.retry_on),
            before_sleep=_log_retry,
            sleep=sleep,
            reraise=True,
        )
