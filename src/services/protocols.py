"""Service protocols defining interfaces for dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from src.models.change_event import ReportedChange
    from src.models.snapshot import PageSnapshot


class PageFetcherProtocol(Protocol):
    """Protocol for services that return raw markup for a URL."""

    def fetch(self, url: str) -> str: ...


class EventSinkProtocol(Protocol):
    """Protocol for change delivery destinations."""

    def deliver(self, change: ReportedChange) -> None: ...


class SnapshotStoreProtocol(Protocol):
    """Protocol for keyed storage of the latest snapshot per page."""

    def get_snapshot(self, competitor_id: str, page_name: str) -> PageSnapshot | None: ...

    def save_snapshot(self, competitor_id: str, page_name: str, snapshot: PageSnapshot) -> str: ...
