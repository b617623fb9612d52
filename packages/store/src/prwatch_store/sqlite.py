"""SQLiteStore — local file-based store for the server with many sessions.

Why SQLite alongside the JSON file:
- Saves touch one row instead of rewriting every session's state.
- Safe to share between a long-running `prwatch serve` and ad-hoc CLI runs.

Schema:
  sessions — one row per named session; tracked PRs are kept as a JSON
             column since they are always read and written as a whole.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading

from prwatch_store.base import BaseStore
from prwatch_store.models import SessionRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS sessions (
    name               TEXT PRIMARY KEY,
    last_refresh_time  TEXT,
    items_json         TEXT DEFAULT '[]'
);
"""


class SQLiteStore(BaseStore):
    """Stores session state in a local SQLite database file.

    Configure via .prwatch.yml: `store: sqlite` and `store_path: /path/to/prwatch.db`.
    """

    def __init__(self, db_path: str = "prwatch.db"):
        # The server saves from several request threads; they share this one
        # connection, serialised by _lock.
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._lock = threading.Lock()
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def load(self, name: str) -> SessionRecord | None:
        try:
            with self._lock:
                row = self._conn.execute("SELECT * FROM sessions WHERE name=?", (name,)).fetchone()
        except sqlite3.Error as e:
            logger.warning("SQLiteStore.load() failed (%s): %s", type(e).__name__, e)
            return None
        if row is None:
            return None
        try:
            return self._row_to_record(row)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring malformed state for session %r: %s", name, e)
            return None

    def save(self, name: str, record: SessionRecord) -> None:
        items_json = json.dumps(record.to_dict()["items"])
        try:
            with self._lock:
                self._conn.execute(
                    """
                    INSERT INTO sessions (name, last_refresh_time, items_json)
                    VALUES (?, ?, ?)
                    ON CONFLICT(name) DO UPDATE SET
                      last_refresh_time = excluded.last_refresh_time,
                      items_json = excluded.items_json
                    """,
                    (name, record.last_refresh_time, items_json),
                )
                self._conn.commit()
        except sqlite3.Error as e:
            logger.warning("SQLiteStore.save() failed (%s): %s", type(e).__name__, e)
            print(f"Warning: could not save session state ({type(e).__name__}: {e})")

    def delete(self, name: str) -> None:
        try:
            with self._lock:
                self._conn.execute("DELETE FROM sessions WHERE name=?", (name,))
                self._conn.commit()
        except sqlite3.Error as e:
            logger.warning("SQLiteStore.delete() failed (%s): %s", type(e).__name__, e)

    def list_names(self) -> list[str]:
        try:
            with self._lock:
                rows = self._conn.execute("SELECT name FROM sessions ORDER BY name").fetchall()
        except sqlite3.Error as e:
            logger.warning("SQLiteStore.list_names() failed (%s): %s", type(e).__name__, e)
            return []
        return [r["name"] for r in rows]

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> SessionRecord:
        return SessionRecord.from_dict(
            {
                "last_refresh_time": row["last_refresh_time"],
                "items": json.loads(row["items_json"] or "[]"),
            }
        )
