"""Delivery of reported changes to the external change log."""

from __future__ import annotations

import requests
import structlog

from src.models.change_event import ReportedChange

logger = structlog.get_logger(__name__)


class SinkDeliveryError(Exception):
    """Raised when a change could not be delivered to the sink."""


class WebhookEventSink:
    """Posts each change as one JSON object to a webhook (e.g. an Apps Script URL).

    Delivery is at-most-once: a single POST per change, no retries.
    """

    def __init__(
        self,
        webhook_url: str,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.webhook_url = webhook_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def deliver(self, change: ReportedChange) -> None:
        """POST one change. Raises SinkDeliveryError on transport or HTTP failure."""
        try:
            response = self.session.post(
                self.webhook_url,
                json=change.to_webhook_payload(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            msg = f"Webhook request failed: {exc}"
            raise SinkDeliveryError(msg) from exc

        if not 200 <= response.status_code < 300:
            msg = f"Webhook returned {response.status_code}"
            raise SinkDeliveryError(msg)

        logger.info(
            "change_delivered",
            competitor=change.competitor_name,
            page=change.page_name,
            change_type=change.event.kind.value,
        )


class LoggingEventSink:
    """Fallback sink used when no webhook is configured: changes are only logged."""

    def __init__(self) -> None:
        self._warned = False

    def deliver(self, change: ReportedChange) -> None:
        if not self._warned:
            logger.warning(
                "webhook_not_configured",
                detail="WEBHOOK_URL not set; changes will not be logged externally",
            )
            self._warned = True
        logger.info(
            "change_not_delivered",
            competitor=change.competitor_name,
            page=change.page_name,
            change_type=change.event.kind.value,
            significance=change.event.significance.value,
            description=change.event.description,
        )


def build_event_sink(
    webhook_url: str | None,
    session: requests.Session | None = None,
    timeout: float = 30.0,
) -> WebhookEventSink | LoggingEventSink:
    """Return a webhook sink if a URL is configured, otherwise a logging sink."""
    if webhook_url:
        return WebhookEventSink(webhook_url, session=session, timeout=timeout)
    return LoggingEventSink()
