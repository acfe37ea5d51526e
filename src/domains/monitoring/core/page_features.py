"""Extract structural page features (text, links, headings) from HTML."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

from src.models.snapshot import PageLink, PageSnapshot

if TYPE_CHECKING:
    from datetime import datetime

# Elements whose content never counts as page content. Links and headings
# inside them are dropped along with their text.
NON_CONTENT_TAGS: tuple[str, ...] = (
    "script",
    "style",
    "noscript",
    "template",
    "nav",
    "header",
    "footer",
)

HEADING_TAGS: tuple[str, ...] = ("h1", "h2", "h3")

_WHITESPACE_RE = re.compile(r"\s+")


class ExtractionError(Exception):
    """Raised when raw markup cannot be decoded or parsed at all."""


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs (newlines, tabs, nbsp) to one space and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def _parse(raw_markup: str | bytes) -> BeautifulSoup:
    """Parse markup; bytes are decoded by bs4 (BOM, declared charset, then sniffing)."""
    if not isinstance(raw_markup, (str, bytes)):
        msg = f"markup must be str or bytes, got {type(raw_markup).__name__}"
        raise ExtractionError(msg)
    try:
        soup = BeautifulSoup(raw_markup, "html.parser")
    except Exception as exc:
        msg = f"markup could not be parsed: {exc}"
        raise ExtractionError(msg) from exc
    if isinstance(raw_markup, bytes) and raw_markup and soup.original_encoding is None:
        msg = "markup encoding could not be determined"
        raise ExtractionError(msg)
    return soup


def strip_non_content(soup: BeautifulSoup) -> None:
    """Remove non-content elements from the tree in place."""
    for tag in soup.find_all(NON_CONTENT_TAGS):
        tag.decompose()
    # hidden elements are never rendered
    for tag in soup.find_all(hidden=True):
        tag.decompose()


def extract_text(soup: BeautifulSoup) -> str:
    """Return normalized visible text of the document body."""
    body = soup.body
    if body is None:
        for head in soup.find_all("head"):
            head.decompose()
        return normalize_whitespace(soup.get_text())
    return normalize_whitespace(body.get_text())


def extract_links(soup: BeautifulSoup) -> list[PageLink]:
    """Return anchors with a non-empty href and visible text, in document order."""
    links: list[PageLink] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href = tag.get("href")
        if isinstance(href, list):
            href = href[0] if href else ""
        href = (href or "").strip()
        text = normalize_whitespace(tag.get_text())
        if href and text:
            links.append(PageLink(href=href, text=text))
    return links


def extract_headings(soup: BeautifulSoup) -> list[str]:
    """Return h1-h3 heading texts in document order. Deeper levels are ignored."""
    return [normalize_whitespace(tag.get_text()) for tag in soup.find_all(HEADING_TAGS)]


def extract_page_snapshot(
    raw_markup: str | bytes,
    captured_at: datetime | None = None,
) -> PageSnapshot:
    """Convert raw page markup into a PageSnapshot.

    Non-content elements are removed first, so script bumps and navigation
    reshuffles never register as content changes. Missing elements yield
    empty fields rather than errors.

    Raises ExtractionError if the markup cannot be decoded or parsed.
    """
    soup = _parse(raw_markup)
    strip_non_content(soup)

    links = extract_links(soup)
    headings = extract_headings(soup)
    text = extract_text(soup)

    if captured_at is None:
        return PageSnapshot(text=text, links=links, headings=headings)
    return PageSnapshot(captured_at=captured_at, text=text, links=links, headings=headings)
