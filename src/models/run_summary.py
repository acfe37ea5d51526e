"""Run summary model for a full site-check run."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, computed_field

from src.models.change_event import ChangeKind, ReportedChange


class RunSummary(BaseModel):
    """Every change event produced during one run plus batch statistics."""

    run_date: str
    changes: list[ReportedChange] = []
    pages_checked: int = 0
    pages_failed: int = 0
    duration_seconds: float = 0.0
    errors: list[str] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def real_change_count(self) -> int:
        """Number of changes excluding baselines and fetch errors."""
        return sum(1 for change in self.changes if change.event.is_real_change)

    def changes_of_kind(self, kind: ChangeKind) -> list[ReportedChange]:
        """Return changes of a single kind, in run order."""
        return [change for change in self.changes if change.event.kind == kind]

    def write_json(self, path: str | Path) -> Path:
        """Write the summary as an indented JSON artifact. Returns the path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target
