"""Monitoring domain core -- pure functions for page feature extraction and change detection."""

from __future__ import annotations

from src.domains.monitoring.core.change_detection import (
    CHANGE_RULES,
    content_change_rule,
    detect_changes,
    diff_text_lines,
    is_link_of_interest,
    new_links_rule,
    new_sections_rule,
    ordered_difference,
    removed_sections_rule,
)
from src.domains.monitoring.core.checksum import (
    compute_content_checksum,
    compute_snapshot_checksum,
)
from src.domains.monitoring.core.page_features import (
    ExtractionError,
    extract_headings,
    extract_links,
    extract_page_snapshot,
    extract_text,
    normalize_whitespace,
)

__all__ = [
    # change_detection
    "CHANGE_RULES",
    "content_change_rule",
    "detect_changes",
    "diff_text_lines",
    "is_link_of_interest",
    "new_links_rule",
    "new_sections_rule",
    "ordered_difference",
    "removed_sections_rule",
    # checksum
    "compute_content_checksum",
    "compute_snapshot_checksum",
    # page_features
    "ExtractionError",
    "extract_headings",
    "extract_links",
    "extract_page_snapshot",
    "extract_text",
    "normalize_whitespace",
]
