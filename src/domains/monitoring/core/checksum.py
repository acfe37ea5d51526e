"""Content checksum computation."""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.models.snapshot import PageSnapshot


def compute_content_checksum(content: str) -> str:
    """Compute MD5 hex digest of content string.

    Returns lowercase 32-character hex string.
    """
    return hashlib.md5(content.encode("utf-8")).hexdigest()


def compute_snapshot_checksum(snapshot: PageSnapshot) -> str:
    """Checksum of a snapshot's text, links and headings.

    The capture timestamp is excluded, so re-extracting identical markup
    always yields the same checksum.
    """
    canonical = json.dumps(snapshot.body(), sort_keys=True, ensure_ascii=False)
    return compute_content_checksum(canonical)
