"""Shared test fixtures for the Competitor Site Watch system."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
import structlog

from src.models.competitor import CompetitorPage, CompetitorTarget
from src.models.snapshot import PageLink, PageSnapshot
from src.services.database import Database

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


@pytest.fixture
def tmp_db_path(tmp_path: Path) -> str:
    """Provide a temporary database file path."""
    return str(tmp_path / "test.db")


@pytest.fixture
def db(tmp_db_path: str) -> Database:
    """Provide an initialized temporary database."""
    database = Database(db_path=tmp_db_path)
    database.init_db()
    return database


@pytest.fixture
def base_snapshot() -> PageSnapshot:
    """A stored snapshot with headings, text and links."""
    return PageSnapshot(
        captured_at=datetime(2026, 1, 1, tzinfo=UTC),
        text="Welcome to Acme. We build things for teams.",
        links=[
            PageLink(href="/about", text="About us"),
            PageLink(href="/features", text="Features"),
        ],
        headings=["Home", "About"],
    )


@pytest.fixture
def acme() -> CompetitorTarget:
    """A competitor with two watched pages."""
    return CompetitorTarget(
        id="acme",
        name="Acme Corp",
        pages=[
            CompetitorPage(name="Home", url="https://acme.example/"),
            CompetitorPage(name="Pricing", url="https://acme.example/pricing"),
        ],
    )


@pytest.fixture
def sample_html() -> str:
    """A page with content, chrome, scripts and hidden markup."""
    return """<!DOCTYPE html>
<html>
<head>
    <title>Acme Corp</title>
    <style>body { color: red; }</style>
    <script src="/app.v123.js"></script>
</head>
<body>
    <header>
        <nav>
            <a href="/">Home</a>
            <a href="/pricing">Pricing</a>
        </nav>
    </header>
    <main>
        <h1>Welcome to Acme</h1>
        <p>We build
            things   for teams.</p>
        <h2>  Features  </h2>
        <p>Check our <a href="/features/new">New   Feature</a> today.</p>
        <h4>Fine print</h4>
        <a href="/contact">Contact us</a>
        <a href="">Empty href</a>
        <a href="/icon"><img src="icon.png"></a>
        <h3>Customers</h3>
        <script>window.tracking = 42;</script>
        <noscript>Enable JavaScript</noscript>
        <div hidden><h2>Hidden heading</h2>Secret text</div>
    </main>
    <footer>
        <h2>Footer heading</h2>
        <a href="/terms">Terms</a>
        Copyright 2026 Acme Corp.
    </footer>
</body>
</html>"""


@pytest.fixture(autouse=True)
def _reset_structlog() -> Generator[None, None, None]:
    """Undo logging configuration made by a test (CLI commands configure logging)."""
    yield
    structlog.reset_defaults()
