"""Key/value persistence layer for client-side state."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

import structlog

from ..errors import PersistenceError
from ..utils.time import utc_now

MEMORY_PATH = ":memory:"


class SqliteKeyValueStore:
    """SQLite-based string key/value store.

    Plays the role of the browser's local storage: one row per key, every
    write committed before the call returns.
    """

    def __init__(self, db_path: Union[str, Path] = "saved_campaigns.db"):
        self.db_path = str(db_path)
        self.logger = structlog.get_logger("savesync.storage")

        if self.db_path != MEMORY_PATH:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            # A single connection keeps ":memory:" stores alive between calls
            self._conn: Optional[sqlite3.Connection] = sqlite3.connect(self.db_path, timeout=30.0)
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Unable to open storage: {e}", operation="open", target=self.db_path
            ) from e

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._transaction("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    @contextmanager
    def _transaction(self, operation: str, key: Optional[str] = None) -> Iterator[sqlite3.Connection]:
        """Run statements in a committed transaction, mapping sqlite errors."""
        if self._conn is None:
            raise PersistenceError("Storage is closed", operation=operation, target=key)

        try:
            yield self._conn
            self._conn.commit()
        except sqlite3.Error as e:
            self._conn.rollback()
            self.logger.error(
                "Storage operation failed",
                operation=operation,
                key=key,
                db_path=self.db_path,
                error=str(e)
            )
            raise PersistenceError(
                f"Storage {operation} failed: {e}", operation=operation, target=key
            ) from e

    def get(self, key: str) -> Optional[str]:
        """Return the stored value for ``key`` or None."""
        with self._transaction("get", key) as conn:
            row = conn.execute(
                "SELECT value FROM storage WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        with self._transaction("set", key) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO storage (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, utc_now().isoformat())
            )

    def delete(self, key: str) -> bool:
        """Remove ``key``; returns whether a row was deleted."""
        with self._transaction("delete", key) as conn:
            cursor = conn.execute("DELETE FROM storage WHERE key = ?", (key,))
        return cursor.rowcount > 0

    def keys(self) -> list[str]:
        with self._transaction("keys") as conn:
            rows = conn.execute("SELECT key FROM storage ORDER BY key").fetchall()
        return [row[0] for row in rows]

    def clear(self) -> None:
        """Remove every key."""
        with self._transaction("clear") as conn:
            conn.execute("DELETE FROM storage")

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @property
    def closed(self) -> bool:
        return self._conn is None
