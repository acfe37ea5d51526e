"""Pydantic data models for the Competitor Site Watch system."""

from src.models.change_event import (
    ChangeEvent,
    ChangeKind,
    ReportedChange,
    Significance,
)
from src.models.competitor import CompetitorPage, CompetitorTarget
from src.models.config import Config
from src.models.run_summary import RunSummary
from src.models.snapshot import PageLink, PageSnapshot

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "CompetitorPage",
    "CompetitorTarget",
    "Config",
    "PageLink",
    "PageSnapshot",
    "ReportedChange",
    "RunSummary",
    "Significance",
]
