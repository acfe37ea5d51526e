"""Structural change detection between two page snapshots.

Each heuristic is a named rule taking ``(previous, current)`` and returning
one ChangeEvent or None. Rules run in the fixed order of CHANGE_RULES, which
is also the order of the returned events.
"""

from __future__ import annotations

from difflib import SequenceMatcher
from typing import TYPE_CHECKING

from src.models.change_event import ChangeEvent, ChangeKind, Significance

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from src.models.snapshot import PageSnapshot

    ChangeRule = Callable[[PageSnapshot, PageSnapshot], ChangeEvent | None]

# Added or removed text beyond this many characters is a content change
CONTENT_CHANGE_MIN_CHARS = 100
# Added text beyond this many characters makes a content change High
HIGH_SIGNIFICANCE_ADDED_CHARS = 500
EXCERPT_LENGTH = 300

LINK_KEYWORDS: tuple[str, ...] = ("feature", "new", "pricing", "product")


def ordered_difference(items: Sequence[str], exclude: Iterable[str]) -> list[str]:
    """Items not present in ``exclude``, keeping the order (and repeats) of ``items``."""
    excluded = set(exclude)
    return [item for item in items if item not in excluded]


def diff_text_lines(old_text: str, new_text: str) -> tuple[str, str]:
    """Line-oriented diff of two texts.

    Returns ``(added, removed)``: the concatenated content of every added line
    and of every removed line. Line endings are kept.
    """
    old_lines = old_text.splitlines(keepends=True)
    new_lines = new_text.splitlines(keepends=True)

    added: list[str] = []
    removed: list[str] = []
    matcher = SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag in ("replace", "delete"):
            removed.extend(old_lines[i1:i2])
        if tag in ("replace", "insert"):
            added.extend(new_lines[j1:j2])

    return "".join(added), "".join(removed)


def is_link_of_interest(link_text: str, keywords: Iterable[str] = LINK_KEYWORDS) -> bool:
    """Case-insensitive substring match of link text against the keywords."""
    lowered = link_text.lower()
    return any(keyword in lowered for keyword in keywords)


def baseline_event() -> ChangeEvent:
    return ChangeEvent(
        kind=ChangeKind.NEW_BASELINE,
        description="Initial snapshot created",
        significance=Significance.LOW,
    )


def new_sections_rule(previous: PageSnapshot, current: PageSnapshot) -> ChangeEvent | None:
    """Headings present now that were not present before."""
    new_headings = ordered_difference(current.headings, previous.headings)
    if not new_headings:
        return None
    return ChangeEvent(
        kind=ChangeKind.NEW_SECTIONS,
        description=f"New sections: {', '.join(new_headings)}",
        significance=Significance.HIGH,
    )


def removed_sections_rule(previous: PageSnapshot, current: PageSnapshot) -> ChangeEvent | None:
    """Headings present before that are gone now."""
    removed_headings = ordered_difference(previous.headings, current.headings)
    if not removed_headings:
        return None
    return ChangeEvent(
        kind=ChangeKind.REMOVED_SECTIONS,
        description=f"Removed sections: {', '.join(removed_headings)}",
        significance=Significance.MEDIUM,
    )


def content_change_rule(previous: PageSnapshot, current: PageSnapshot) -> ChangeEvent | None:
    """Large additions or removals in the page text."""
    added, removed = diff_text_lines(previous.text, current.text)
    if len(added) <= CONTENT_CHANGE_MIN_CHARS and len(removed) <= CONTENT_CHANGE_MIN_CHARS:
        return None

    significance = (
        Significance.HIGH if len(added) > HIGH_SIGNIFICANCE_ADDED_CHARS else Significance.MEDIUM
    )
    return ChangeEvent(
        kind=ChangeKind.CONTENT_CHANGE,
        description=(
            f"Significant content update ({len(added)} chars added, "
            f"{len(removed)} chars removed)"
        ),
        significance=significance,
        before_excerpt=removed[:EXCERPT_LENGTH],
        after_excerpt=added[:EXCERPT_LENGTH],
    )


def new_links_rule(previous: PageSnapshot, current: PageSnapshot) -> ChangeEvent | None:
    """Newly linked hrefs whose text mentions features, pricing or products."""
    old_hrefs = {link.href for link in previous.links}
    matched = [
        link.text
        for link in current.links
        if link.href not in old_hrefs and is_link_of_interest(link.text)
    ]
    if not matched:
        return None
    return ChangeEvent(
        kind=ChangeKind.NEW_LINKS,
        description=f"New links: {', '.join(matched)}",
        significance=Significance.MEDIUM,
    )


CHANGE_RULES: tuple[ChangeRule, ...] = (
    new_sections_rule,
    removed_sections_rule,
    content_change_rule,
    new_links_rule,
)


def detect_changes(
    previous: PageSnapshot | None,
    current: PageSnapshot,
    rules: Sequence[ChangeRule] = CHANGE_RULES,
) -> list[ChangeEvent]:
    """Compare two snapshots and return the detected change events in rule order.

    With no previous snapshot the only event is a NEW_BASELINE. An empty list
    means nothing significant changed.
    """
    if previous is None:
        return [baseline_event()]

    events: list[ChangeEvent] = []
    for rule in rules:
        event = rule(previous, current)
        if event is not None:
            events.append(event)
    return events
