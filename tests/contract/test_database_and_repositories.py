"""Contract tests for the Database service, SnapshotRepository and competitor loader.

Uses a real SQLite file under tmp_path; no mocking.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from src.domains.monitoring.core.checksum import compute_snapshot_checksum
from src.domains.monitoring.repositories.snapshot_repository import SnapshotRepository
from src.models.snapshot import PageLink, PageSnapshot
from src.services.competitor_loader import (
    CompetitorConfigError,
    load_competitors,
    parse_competitors,
)
from src.services.database import Database

_REPO_ROOT = Path(__file__).resolve().parents[2]


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


class TestDatabase:
    """Tests for Database schema management and helpers."""

    def test_init_creates_snapshot_table(self, db: Database) -> None:
        rows = db.fetchall("SELECT name FROM sqlite_master WHERE type = 'table'")
        assert "page_snapshots" in {row["name"] for row in rows}

    def test_init_is_idempotent(self, db: Database) -> None:
        db.init_db()
        row = db.fetchone("SELECT COUNT(*) AS n FROM page_snapshots")
        assert row is not None
        assert row["n"] == 0

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        path = tmp_path / "a" / "b" / "snap.db"
        Database(db_path=str(path)).init_db()
        assert path.exists()

    def test_transaction_rolls_back_on_error(self, db: Database) -> None:
        with pytest.raises(RuntimeError), db.transaction() as cursor:
            cursor.execute(
                "INSERT INTO page_snapshots VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                ("acme", "Home", "2026-01-01", "", "[]", "[]", "x", "2026-01-01"),
            )
            raise RuntimeError("abort")
        assert db.fetchone("SELECT * FROM page_snapshots") is None

    def test_close_and_reopen(self, db: Database) -> None:
        db.close()
        assert db.fetchall("SELECT * FROM page_snapshots") == []


# ---------------------------------------------------------------------------
# SnapshotRepository
# ---------------------------------------------------------------------------


class TestSnapshotRepository:
    """Tests for SnapshotRepository."""

    def test_missing_key_returns_none(self, db: Database) -> None:
        repo = SnapshotRepository(db)
        assert repo.get_snapshot("acme", "Home") is None
        assert repo.get_checksum("acme", "Home") is None

    def test_round_trip_preserves_order(self, db: Database) -> None:
        repo = SnapshotRepository(db)
        snapshot = PageSnapshot(
            captured_at=datetime(2026, 3, 1, 9, 30, tzinfo=UTC),
            text="Plans start at $10 – café",
            links=[PageLink(href="/z", text="Zed"), PageLink(href="/a", text="Aye")],
            headings=["Pricing", "", "Pricing"],
        )
        repo.save_snapshot("acme", "Pricing", snapshot)

        assert repo.get_snapshot("acme", "Pricing") == snapshot

    def test_save_returns_checksum(self, db: Database, base_snapshot: PageSnapshot) -> None:
        repo = SnapshotRepository(db)
        checksum = repo.save_snapshot("acme", "Home", base_snapshot)
        assert checksum == compute_snapshot_checksum(base_snapshot)
        assert repo.get_checksum("acme", "Home") == checksum

    def test_save_replaces_previous(self, db: Database, base_snapshot: PageSnapshot) -> None:
        repo = SnapshotRepository(db)
        repo.save_snapshot("acme", "Home", base_snapshot)
        newer = PageSnapshot(text="Brand new", headings=["Launch"])
        repo.save_snapshot("acme", "Home", newer)

        stored = repo.get_snapshot("acme", "Home")
        assert stored is not None
        assert stored.text == "Brand new"
        assert stored.headings == ["Launch"]
        assert len(repo.list_snapshots()) == 1

    def test_keys_are_independent(self, db: Database, base_snapshot: PageSnapshot) -> None:
        repo = SnapshotRepository(db)
        repo.save_snapshot("acme", "Home", base_snapshot)
        assert repo.get_snapshot("acme", "Pricing") is None
        assert repo.get_snapshot("other", "Home") is None

    def test_stored_links_are_json(self, db: Database, base_snapshot: PageSnapshot) -> None:
        SnapshotRepository(db).save_snapshot("acme", "Home", base_snapshot)
        row = db.fetchone("SELECT links, headings FROM page_snapshots")
        assert row is not None
        assert json.loads(row["links"])[0] == {"href": "/about", "text": "About us"}
        assert json.loads(row["headings"]) == ["Home", "About"]

    def test_list_snapshots(self, db: Database, base_snapshot: PageSnapshot) -> None:
        repo = SnapshotRepository(db)
        repo.save_snapshot("zeta", "Home", base_snapshot)
        repo.save_snapshot("acme", "Pricing", base_snapshot)
        repo.save_snapshot("acme", "Home", base_snapshot)

        keys = [(row["competitor_id"], row["page_name"]) for row in repo.list_snapshots()]
        assert keys == [("acme", "Home"), ("acme", "Pricing"), ("zeta", "Home")]
        assert len(repo.list_snapshots("acme")) == 2

    def test_delete_snapshot(self, db: Database, base_snapshot: PageSnapshot) -> None:
        repo = SnapshotRepository(db)
        repo.save_snapshot("acme", "Home", base_snapshot)

        assert repo.delete_snapshot("acme", "Home") is True
        assert repo.get_snapshot("acme", "Home") is None
        assert repo.delete_snapshot("acme", "Home") is False

    def test_survives_reconnect(self, tmp_db_path: str, base_snapshot: PageSnapshot) -> None:
        first = Database(db_path=tmp_db_path)
        first.init_db()
        SnapshotRepository(first).save_snapshot("acme", "Home", base_snapshot)
        first.close()

        second = Database(db_path=tmp_db_path)
        second.init_db()
        assert SnapshotRepository(second).get_snapshot("acme", "Home") == base_snapshot
        second.close()


# ---------------------------------------------------------------------------
# Competitor loader
# ---------------------------------------------------------------------------


_VALID_CONFIG = {
    "competitors": [
        {
            "id": "acme",
            "name": "Acme Corp",
            "pages": [
                {"name": "Home", "url": "https://acme.example/"},
                {"name": "Pricing", "url": "https://acme.example/pricing"},
            ],
        },
        {"id": "globex", "name": "Globex", "pages": []},
    ]
}


class TestCompetitorLoader:
    """Tests for parse_competitors and load_competitors."""

    def test_parse_preserves_order(self) -> None:
        competitors = parse_competitors(json.dumps(_VALID_CONFIG))
        assert [c.id for c in competitors] == ["acme", "globex"]
        assert [p.name for p in competitors[0].pages] == ["Home", "Pricing"]

    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "competitors.json"
        path.write_text(json.dumps(_VALID_CONFIG), encoding="utf-8")
        assert len(load_competitors(path)) == 2

    def test_empty_list(self) -> None:
        assert parse_competitors('{"competitors": []}') == []

    def test_invalid_json(self) -> None:
        with pytest.raises(CompetitorConfigError, match="not valid JSON"):
            parse_competitors("{competitors: ")

    def test_missing_key(self) -> None:
        with pytest.raises(CompetitorConfigError, match="invalid"):
            parse_competitors("{}")

    def test_duplicate_ids(self) -> None:
        data = {"competitors": [_VALID_CONFIG["competitors"][0]] * 2}
        with pytest.raises(CompetitorConfigError, match="unique"):
            parse_competitors(json.dumps(data))

    def test_bad_url(self) -> None:
        data = {
            "competitors": [
                {"id": "acme", "name": "Acme", "pages": [{"name": "Home", "url": "nope"}]}
            ]
        }
        with pytest.raises(CompetitorConfigError):
            parse_competitors(json.dumps(data))

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CompetitorConfigError, match="Cannot read"):
            load_competitors(tmp_path / "missing.json")

    def test_bundled_sample_config_is_valid(self) -> None:
        competitors = load_competitors(_REPO_ROOT / "config" / "competitors.json")
        assert competitors
        assert all(competitor.pages for competitor in competitors)
