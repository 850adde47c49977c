"""SQLite key/value storage backend."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Iterable

from ArchiveSearch.utils.log import log


class SqliteStorage:
    """`StoragePort` persisted in one SQLite table.

    Keeps a single connection per instance and supports the context manager
    protocol for cleanup. Each write commits immediately so state survives
    process restarts between CLI invocations.
    """

    def __init__(self, db_path: Path) -> None:
        """Open (and create if needed) the database.

        Args:
            db_path: Absolute or project-relative path to the database file.
        """
        self.db_path = Path(db_path)
        self.conn = ensure_db(self.db_path)
        init_schema(self.conn)
        log.debug("SQLite storage opened: %s", self.db_path)

    def get_item(self, key: str) -> str | None:
        row = self.conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        self.conn.execute(
            """
            INSERT INTO kv_store (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = CAST(strftime('%s','now') AS INTEGER)
            """,
            (key, value),
        )
        self.conn.commit()

    def remove_item(self, key: str) -> None:
        self.conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        self.conn.commit()

    def keys(self) -> Iterable[str]:
        return [row[0] for row in self.conn.execute("SELECT key FROM kv_store ORDER BY key")]

    def close(self) -> None:
        """Close the database connection."""
        if getattr(self, "conn", None) is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self) -> SqliteStorage:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def ensure_db(db_path: Path) -> sqlite3.Connection:
    """Ensure database file exists and return connection.

    Raises:
        OSError: If directory creation fails.
        sqlite3.Error: If database connection fails.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(str(db_path))


def init_schema(conn: sqlite3.Connection) -> None:
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS kv_store (
          key TEXT PRIMARY KEY,
          value TEXT NOT NULL,
          updated_at INTEGER NOT NULL DEFAULT (
            CAST(strftime('%s','now') AS INTEGER)
          )
        );
    """)
    conn.commit()
