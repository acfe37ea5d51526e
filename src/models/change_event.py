"""Change event models for detected page differences."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

EXCERPT_MAX_LENGTH = 300


class ChangeKind(StrEnum):
    """Type of change detected between two snapshots."""

    NEW_BASELINE = "new_baseline"
    NEW_SECTIONS = "new_sections"
    REMOVED_SECTIONS = "removed_sections"
    CONTENT_CHANGE = "content_change"
    NEW_LINKS = "new_links"
    FETCH_ERROR = "fetch_error"


_SIGNIFICANCE_RANK = {"Low": 0, "Medium": 1, "High": 2}


class Significance(StrEnum):
    """Ordinal severity of a change event (Low < Medium < High)."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def rank(self) -> int:
        return _SIGNIFICANCE_RANK[self.value]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Significance):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Significance):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Significance):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Significance):
            return NotImplemented
        return self.rank >= other.rank


class ChangeEvent(BaseModel):
    """One detected difference between two page snapshots."""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    description: str
    significance: Significance = Significance.LOW
    before_excerpt: str | None = None
    after_excerpt: str | None = None

    @field_validator("before_excerpt", "after_excerpt")
    @classmethod
    def validate_excerpt(cls, value: str | None) -> str | None:
        """Excerpts must not exceed 300 characters."""
        if value is not None and len(value) > EXCERPT_MAX_LENGTH:
            msg = f"excerpts must not exceed {EXCERPT_MAX_LENGTH} characters"
            raise ValueError(msg)
        return value

    @property
    def is_real_change(self) -> bool:
        """Baselines and fetch errors are not changes to the page itself."""
        return self.kind not in (ChangeKind.NEW_BASELINE, ChangeKind.FETCH_ERROR)


class ReportedChange(BaseModel):
    """A change event tagged with where and when it was observed."""

    model_config = ConfigDict(frozen=True)

    competitor_name: str
    page_name: str
    run_date: str
    event: ChangeEvent

    def to_webhook_payload(self) -> dict[str, Any]:
        """Render the JSON object posted to the change-log webhook."""
        return {
            "type": "website_change",
            "date": self.run_date,
            "competitor": self.competitor_name,
            "page": self.page_name,
            "changeType": self.event.kind.value,
            "oldContent": self.event.before_excerpt or "",
            "newContent": self.event.after_excerpt or self.event.description,
            "significance": self.event.significance.value,
        }
