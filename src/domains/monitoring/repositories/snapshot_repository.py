"""Snapshot repository keyed by (competitor, page)."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from src.domains.monitoring.core.checksum import compute_snapshot_checksum
from src.models.snapshot import PageLink, PageSnapshot

if TYPE_CHECKING:
    import sqlite3

    from src.services.database import Database

logger = structlog.get_logger(__name__)


def _row_to_snapshot(row: sqlite3.Row) -> PageSnapshot:
    captured_at = datetime.fromisoformat(row["captured_at"])
    links = [PageLink(href=item["href"], text=item["text"]) for item in json.loads(row["links"])]
    headings = [str(heading) for heading in json.loads(row["headings"])]
    return PageSnapshot(
        captured_at=captured_at,
        text=row["text"],
        links=links,
        headings=headings,
    )


class SnapshotRepository:
    """Holds the most recent PageSnapshot per (competitor_id, page_name).

    Saving replaces the stored snapshot; no history is kept.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def get_snapshot(self, competitor_id: str, page_name: str) -> PageSnapshot | None:
        """Get the stored snapshot for a key, or None if the page has no baseline."""
        row = self.db.fetchone(
            """SELECT * FROM page_snapshots
               WHERE competitor_id = ? AND page_name = ?""",
            (competitor_id, page_name),
        )
        return _row_to_snapshot(row) if row else None

    def save_snapshot(self, competitor_id: str, page_name: str, snapshot: PageSnapshot) -> str:
        """Store a snapshot, replacing any previous one. Returns its checksum."""
        body = snapshot.body()
        checksum = compute_snapshot_checksum(snapshot)
        with self.db.transaction() as cursor:
            cursor.execute(
                """INSERT INTO page_snapshots
                   (competitor_id, page_name, captured_at, text, links, headings,
                    content_checksum, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(competitor_id, page_name) DO UPDATE SET
                       captured_at = excluded.captured_at,
                       text = excluded.text,
                       links = excluded.links,
                       headings = excluded.headings,
                       content_checksum = excluded.content_checksum,
                       updated_at = excluded.updated_at""",
                (
                    competitor_id,
                    page_name,
                    snapshot.captured_at.isoformat(),
                    body["text"],
                    json.dumps(body["links"], ensure_ascii=False),
                    json.dumps(body["headings"], ensure_ascii=False),
                    checksum,
                    datetime.now(UTC).isoformat(),
                ),
            )
        logger.debug(
            "snapshot_saved",
            competitor_id=competitor_id,
            page_name=page_name,
            checksum=checksum,
        )
        return checksum

    def get_checksum(self, competitor_id: str, page_name: str) -> str | None:
        """Get the stored content checksum for a key."""
        row = self.db.fetchone(
            """SELECT content_checksum FROM page_snapshots
               WHERE competitor_id = ? AND page_name = ?""",
            (competitor_id, page_name),
        )
        return row["content_checksum"] if row else None

    def list_snapshots(self, competitor_id: str | None = None) -> list[dict[str, Any]]:
        """List stored snapshot keys with capture time and checksum."""
        sql = """SELECT competitor_id, page_name, captured_at, content_checksum
                 FROM page_snapshots"""
        params: tuple[Any, ...] = ()
        if competitor_id is not None:
            sql += " WHERE competitor_id = ?"
            params = (competitor_id,)
        sql += " ORDER BY competitor_id, page_name"
        return [dict(row) for row in self.db.fetchall(sql, params)]

    def delete_snapshot(self, competitor_id: str, page_name: str) -> bool:
        """Delete the stored snapshot for a key. Returns True if one existed."""
        with self.db.transaction() as cursor:
            cursor.execute(
                "DELETE FROM page_snapshots WHERE competitor_id = ? AND page_name = ?",
                (competitor_id, page_name),
            )
            deleted = cursor.rowcount > 0
        return deleted
