"""SQLite database service."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Generator

logger = structlog.get_logger(__name__)


class Database:
    """SQLite database service with schema management.

    The connection may be shared between worker threads; callers serialize
    access through ``lock``.
    """

    def __init__(self, db_path: str = "data/snapshots.db") -> None:
        self.db_path = db_path
        self._ensure_directory()
        self._connection: sqlite3.Connection | None = None
        self.lock = threading.RLock()

    def _ensure_directory(self) -> None:
        """Ensure the parent directory of the database file exists."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA journal_mode=WAL")
        return self._connection

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Cursor, None, None]:
        """Context manager for database transactions."""
        with self.lock:
            conn = self.connection
            cursor = conn.cursor()
            try:
                yield cursor
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def execute(self, sql: str, params: tuple[Any, ...] | dict[str, Any] = ()) -> sqlite3.Cursor:
        """Execute a single SQL statement."""
        with self.lock:
            return self.connection.execute(sql, params)

    def fetchone(
        self, sql: str, params: tuple[Any, ...] | dict[str, Any] = ()
    ) -> sqlite3.Row | None:
        """Execute and fetch one row."""
        with self.lock:
            cursor = self.execute(sql, params)
            return cursor.fetchone()

    def fetchall(
        self, sql: str, params: tuple[Any, ...] | dict[str, Any] = ()
    ) -> list[sqlite3.Row]:
        """Execute and fetch all rows."""
        with self.lock:
            cursor = self.execute(sql, params)
            return cursor.fetchall()

    def close(self) -> None:
        """Close the database connection."""
        with self.lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    def init_db(self) -> None:
        """Initialize database schema. Creates all tables and indexes."""
        logger.info("initializing_database", path=self.db_path)

        with self.transaction() as cursor:
            # page_snapshots table: one row per (competitor, page), latest capture only
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS page_snapshots (
                    competitor_id TEXT NOT NULL,
                    page_name TEXT NOT NULL,
                    captured_at TEXT NOT NULL,
                    text TEXT NOT NULL,
                    links TEXT NOT NULL,
                    headings TEXT NOT NULL,
                    content_checksum TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (competitor_id, page_name)
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_page_snapshots_competitor_id"
                " ON page_snapshots(competitor_id)"
            )

        logger.info("database_initialized", path=self.db_path)
