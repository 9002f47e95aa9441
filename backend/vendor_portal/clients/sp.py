"""SQLite-backed stand-in for the SharePoint list and document library API.

Items are addressed by site URL + list name + numeric item id, the way the
SharePoint REST API addresses them by site URL + list GUID + item id. Item
fields are stored as one JSON object; ``ID``, ``Created`` and ``Modified`` are
filled in from the row.
"""

import json
import logging
import re
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, TypeVar
from urllib.parse import unquote, urlparse

logger = logging.getLogger(__name__)

T = TypeVar("T")

_INVALID_FOLDER_CHARS = re.compile(r'["*:<>?/\\|#%]+')


class ListItemNotFoundError(LookupError):
    """Raised when a list item id does not exist in the addressed list."""


def _row_to_item(row: sqlite3.Row) -> dict[str, Any]:
    try:
        fields = json.loads(row["fields_json"])
    except json.JSONDecodeError:
        logger.warning("List item %s has unreadable fields", row["id"])
        fields = {}
    if not isinstance(fields, dict):
        fields = {}
    return {**fields, "ID": row["id"], "Created": row["created"], "Modified": row["modified"]}


def _strip_system_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if key not in {"ID", "Created", "Modified"}}


def _get_row(db: sqlite3.Connection, site_url: str, list_name: str, item_id: int) -> sqlite3.Row:
    row = db.execute(
        "SELECT * FROM list_items WHERE id = ? AND site_url = ? AND list_name = ?",
        (item_id, site_url, list_name),
    ).fetchone()
    if row is None:
        raise ListItemNotFoundError(f"Item {item_id} not found in list '{list_name}'")
    return row


def create_item(
    db: sqlite3.Connection,
    site_url: str,
    list_name: str,
    fields: dict[str, Any],
) -> dict[str, Any]:
    now = datetime.utcnow().isoformat()
    cursor = db.execute(
        """
        INSERT INTO list_items (site_url, list_name, fields_json, created, modified)
        VALUES (?, ?, ?, ?, ?)
        """,
        (site_url, list_name, json.dumps(_strip_system_fields(fields)), now, now),
    )
    db.commit()
    return _row_to_item(_get_row(db, site_url, list_name, int(cursor.lastrowid)))


def update_item(
    db: sqlite3.Connection,
    site_url: str,
    list_name: str,
    item_id: int,
    fields: dict[str, Any],
) -> None:
    """Merge ``fields`` into the item, like a SharePoint MERGE request."""
    existing = _row_to_item(_get_row(db, site_url, list_name, item_id))
    merged = {**_strip_system_fields(existing), **_strip_system_fields(fields)}
    db.execute(
        "UPDATE list_items SET fields_json = ?, modified = ? WHERE id = ?",
        (json.dumps(merged), datetime.utcnow().isoformat(), item_id),
    )
    db.commit()


def delete_item(db: sqlite3.Connection, site_url: str, list_name: str, item_id: int) -> None:
    _get_row(db, site_url, list_name, item_id)
    db.execute("DELETE FROM list_items WHERE id = ?", (item_id,))
    db.commit()


def apply_to_items_by_filter(
    db: sqlite3.Connection,
    site_url: str,
    list_name: str,
    callback: Callable[[list[dict[str, Any]]], T],
    filters: dict[str, Any] | None = None,
) -> T:
    rows = db.execute(
        "SELECT * FROM list_items WHERE site_url = ? AND list_name = ? ORDER BY id",
        (site_url, list_name),
    ).fetchall()
    items = [_row_to_item(row) for row in rows]
    if filters:
        items = [item for item in items if all(item.get(key) == value for key, value in filters.items())]
    return callback(items)


def sanitize_folder_name(name: str) -> str:
    cleaned = _INVALID_FOLDER_CHARS.sub("", name).strip().strip(".")
    return cleaned or "untitled"


def _site_path(site_url: str) -> str:
    return urlparse(site_url).path.rstrip("/")


def _folder_path(documents_dir: Path, site_url: str, server_relative_url: str) -> Path:
    site_path = _site_path(site_url)
    relative = unquote(server_relative_url)
    if site_path and relative.startswith(site_path + "/"):
        relative = relative[len(site_path) + 1 :]
    parts = [part for part in relative.split("/") if part and part not in {".", ".."}]
    return documents_dir.joinpath(*parts)


def ensure_folder(documents_dir: Path, site_url: str, library: str, folder_name: str) -> str:
    """Create ``library/folder_name`` if missing; return its server-relative URL."""
    safe_name = sanitize_folder_name(folder_name)
    server_relative_url = f"{_site_path(site_url)}/{library}/{safe_name}"
    folder = _folder_path(documents_dir, site_url, server_relative_url)
    folder.mkdir(parents=True, exist_ok=True)
    return server_relative_url


def add_file_to_folder(
    documents_dir: Path,
    site_url: str,
    folder_server_relative_url: str,
    file_name: str,
    content: bytes,
) -> Path:
    folder = _folder_path(documents_dir, site_url, folder_server_relative_url)
    if not folder.is_dir():
        raise FileNotFoundError(f"Folder does not exist: {folder_server_relative_url}")
    target = folder / (Path(file_name).name or "upload.bin")
    target.write_bytes(content)
    logger.info("Stored %d bytes at %s", len(content), target)
    return target
