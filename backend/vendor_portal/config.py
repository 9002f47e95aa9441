import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DEFAULT_API_BASE_URL = "http://localhost:8000"
DEFAULT_HTTP_TIMEOUT_SECONDS = 20.0
DEFAULT_VENDORS_SITE = "https://vendors.example.sharepoint.com/sites/craftfair"
DEFAULT_APPLICATIONS_LIST = "Craft Fair Applications"


@dataclass(frozen=True)
class ClientSettings:
    api_base_url: str
    user_id: str | None
    http_timeout: float
    db_path: Path


@dataclass(frozen=True)
class ServerSettings:
    vendors_site: str
    applications_list: str
    documents_dir: Path


def _env(name: str) -> str:
    return os.environ.get(name, "").strip()


def _resolve_timeout() -> float:
    raw = _env("VENDOR_PORTAL_HTTP_TIMEOUT")
    if raw:
        try:
            parsed = float(raw)
            if parsed > 0:
                return parsed
        except ValueError:
            pass
        logger.warning("Invalid VENDOR_PORTAL_HTTP_TIMEOUT value: %s", raw)
    return DEFAULT_HTTP_TIMEOUT_SECONDS


def resolve_db_path() -> Path:
    raw = _env("VENDOR_PORTAL_DB_PATH")
    return Path(raw).expanduser() if raw else DATA_DIR / "vendor_portal.db"


def load_client_settings() -> ClientSettings:
    return ClientSettings(
        api_base_url=(_env("VENDOR_PORTAL_API_BASE_URL") or DEFAULT_API_BASE_URL).rstrip("/"),
        user_id=_env("VENDOR_PORTAL_USER_ID") or None,
        http_timeout=_resolve_timeout(),
        db_path=resolve_db_path(),
    )


def load_server_settings() -> ServerSettings:
    documents_dir = _env("VENDORS_DOCUMENTS_DIR")
    return ServerSettings(
        vendors_site=(_env("VENDORS_SITE") or DEFAULT_VENDORS_SITE).rstrip("/"),
        applications_list=_env("VENDORS_CRAFT_APPLICATIONS_LIST") or DEFAULT_APPLICATIONS_LIST,
        documents_dir=Path(documents_dir).expanduser() if documents_dir else DATA_DIR / "documents",
    )
