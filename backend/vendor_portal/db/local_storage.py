"""Key/value string storage for client-side state.

``SqliteLocalStorage`` survives restarts like a browser's ``localStorage``;
``SessionStorage`` lives only as long as the process, like ``sessionStorage``.
"""

from datetime import datetime
from pathlib import Path
from typing import Protocol

from .database import get_db

_CREATE_SQL = """
CREATE TABLE IF NOT EXISTS local_storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT (datetime('now'))
)
"""


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class SqliteLocalStorage:
    def __init__(self, db_path: str | Path | None = None) -> None:
        self._db_path = db_path
        conn = get_db(self._db_path)
        try:
            conn.execute(_CREATE_SQL)
            conn.commit()
        finally:
            conn.close()

    def get_item(self, key: str) -> str | None:
        conn = get_db(self._db_path)
        try:
            row = conn.execute("SELECT value FROM local_storage WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return None if row is None else str(row["value"])

    def set_item(self, key: str, value: str) -> None:
        conn = get_db(self._db_path)
        try:
            conn.execute(
                """
                INSERT INTO local_storage (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                  value = excluded.value,
                  updated_at = excluded.updated_at
                """,
                (key, value, datetime.utcnow().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        conn = get_db(self._db_path)
        try:
            conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()


class SessionStorage:
    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()
