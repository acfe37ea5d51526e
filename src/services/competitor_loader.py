"""Load the watched competitors from a JSON config file.

Expected shape::

    {"competitors": [
        {"id": "acme", "name": "Acme", "pages": [{"name": "Pricing", "url": "https://..."}]}
    ]}
"""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import BaseModel, ValidationError, field_validator

from src.models.competitor import CompetitorTarget

logger = structlog.get_logger(__name__)


class CompetitorConfigError(Exception):
    """Raised when the competitor config file is missing or invalid."""


class _CompetitorConfigFile(BaseModel):
    competitors: list[CompetitorTarget]

    @field_validator("competitors")
    @classmethod
    def validate_unique_ids(cls, value: list[CompetitorTarget]) -> list[CompetitorTarget]:
        """Competitor IDs key the snapshot store, so they must be unique."""
        ids = [competitor.id for competitor in value]
        if len(ids) != len(set(ids)):
            msg = "competitor ids must be unique"
            raise ValueError(msg)
        return value


def parse_competitors(raw: str) -> list[CompetitorTarget]:
    """Parse competitor config JSON text, preserving file order."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Competitor config is not valid JSON: {exc}"
        raise CompetitorConfigError(msg) from exc

    try:
        config = _CompetitorConfigFile.model_validate(data)
    except ValidationError as exc:
        msg = f"Competitor config is invalid: {exc}"
        raise CompetitorConfigError(msg) from exc
    return config.competitors


def load_competitors(path: str | Path) -> list[CompetitorTarget]:
    """Load competitor targets from a JSON file."""
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read competitor config {config_path}: {exc}"
        raise CompetitorConfigError(msg) from exc

    competitors = parse_competitors(raw)
    logger.info(
        "competitors_loaded",
        path=str(config_path),
        competitors=len(competitors),
        pages=sum(len(competitor.pages) for competitor in competitors),
    )
    return competitors
