"""Competitor target models loaded from the competitor config file."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, HttpUrl, field_validator


class CompetitorPage(BaseModel):
    """A single page of a competitor site to watch."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    url: HttpUrl

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        """Strip whitespace and reject empty page names."""
        stripped = value.strip()
        if not stripped:
            msg = "Page name must not be empty"
            raise ValueError(msg)
        return stripped


class CompetitorTarget(BaseModel):
    """A competitor and the ordered list of pages watched for it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str
    pages: list[CompetitorPage] = []

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        """Competitor IDs are lowercase slugs."""
        if not re.fullmatch(r"[a-z0-9][a-z0-9_-]*", value):
            msg = "id must be a lowercase slug (letters, digits, '-' or '_')"
            raise ValueError(msg)
        return value

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        """Strip whitespace and collapse internal spaces."""
        stripped = value.strip()
        if not stripped:
            msg = "Name must not be empty"
            raise ValueError(msg)
        return re.sub(r"\s+", " ", stripped)

    @field_validator("pages")
    @classmethod
    def validate_unique_page_names(cls, value: list[CompetitorPage]) -> list[CompetitorPage]:
        """Page names key the snapshot store, so they must be unique per competitor."""
        names = [page.name for page in value]
        if len(names) != len(set(names)):
            msg = "page names must be unique per competitor"
            raise ValueError(msg)
        return value
