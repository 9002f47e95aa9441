import sqlite3
from datetime import datetime

from fastapi import APIRouter, Depends

from ..config import ServerSettings
from .applications import db_conn, server_settings

router = APIRouter()


@router.get("/health")
def health_check(
    db: sqlite3.Connection = Depends(db_conn),
    settings: ServerSettings = Depends(server_settings),
):
    row = db.execute(
        "SELECT COUNT(*) FROM list_items WHERE site_url = ? AND list_name = ?",
        (settings.vendors_site, settings.applications_list),
    ).fetchone()
    return {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "applicationsList": settings.applications_list,
        "applicationCount": int(row[0]),
    }
