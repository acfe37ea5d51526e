"""HTTP page fetcher with bounded retries."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import requests
import structlog

from src.models.config import DEFAULT_USER_AGENT
from src.utils.retry import RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Callable

logger = structlog.get_logger(__name__)


class FetchError(Exception):
    """Raised when a page could not be fetched after all attempts."""

    def __init__(self, url: str, attempts: int, cause: BaseException) -> None:
        self.url = url
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Failed to fetch {url} after {attempts} attempt(s): {cause}")


class PageFetcher:
    """Fetches raw page markup, retrying failed attempts with exponential backoff.

    Any non-2xx response or transport error counts as a failed attempt.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        policy: RetryPolicy | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.session = session or requests.Session()
        self.policy = policy or RetryPolicy()
        self.timeout = timeout
        self._sleep = sleep
        self.session.headers.update({"User-Agent": user_agent})

    def _get(self, url: str) -> str:
        response = self.session.get(url, timeout=self.timeout)
        if not 200 <= response.status_code < 300:
            msg = f"HTTP {response.status_code}"
            raise requests.HTTPError(msg, response=response)
        return response.text

    def fetch(self, url: str) -> str:
        """Fetch a URL and return its markup.

        Raises FetchError carrying the last underlying exception once
        ``policy.max_attempts`` attempts have failed.
        """
        attempts = 0
        try:
            for attempt in self.policy.build_retrying(sleep=self._sleep):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    markup = self._get(url)
        except self.policy.retry_on as exc:
            logger.error("page_fetch_failed", url=url, attempts=attempts, error=str(exc))
            raise FetchError(url, attempts, exc) from exc

        logger.debug("page_fetched", url=url, attempts=attempts, length=len(markup))
        return markup
