from pathlib import Path

from .database import get_db

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS list_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    site_url TEXT NOT NULL,
    list_name TEXT NOT NULL,
    fields_json TEXT NOT NULL,
    created TEXT DEFAULT (datetime('now')),
    modified TEXT DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_list_items_list
    ON list_items (site_url, list_name);

CREATE TABLE IF NOT EXISTS local_storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT (datetime('now'))
);
"""


def init_db(db_path: str | Path | None = None) -> None:
    conn = get_db(db_path)
    try:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    finally:
        conn.close()
