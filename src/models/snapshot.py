"""Snapshot model for structural page captures."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class PageLink(BaseModel):
    """An anchor with both an href and visible text."""

    model_config = ConfigDict(strict=True, frozen=True)

    href: str
    text: str

    @field_validator("href", "text")
    @classmethod
    def validate_not_empty(cls, value: str) -> str:
        """Link href and text must be non-empty."""
        if not value:
            msg = "link href and text must not be empty"
            raise ValueError(msg)
        return value


class PageSnapshot(BaseModel):
    """Structural fingerprint of a page at a point in time.

    Only ``text``, ``links`` and ``headings`` take part in comparisons;
    ``captured_at`` is bookkeeping.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    captured_at: datetime = Field(default_factory=_utc_now)
    text: str = ""
    links: list[PageLink] = []
    headings: list[str] = []

    @field_validator("captured_at")
    @classmethod
    def validate_captured_at(cls, value: datetime) -> datetime:
        """Naive timestamps are treated as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def body(self) -> dict[str, Any]:
        """Return the comparable fields without the capture timestamp."""
        return self.model_dump(mode="json", exclude={"captured_at"})
