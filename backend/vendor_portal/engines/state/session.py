import logging

from ...clients.portal_api import PortalApiClient
from ...config import ClientSettings, load_client_settings
from ...db.local_storage import KeyValueStorage, SessionStorage, SqliteLocalStorage
from .applications_manager import ApplicationsApi, ApplicationsManager
from .draft_store import DraftApplicationsStore
from .drafts_manager import DraftApplicationsManager
from .editing_store import EditingApplicationStore

logger = logging.getLogger(__name__)


class PortalSession:
    """One vendor's client-side state: draft pool, editing slot and cache.

    Durable storage outlives the session; the editing slot, the cache and the
    subscribers are dropped by ``close()``.
    """

    def __init__(
        self,
        api: ApplicationsApi,
        local_storage: KeyValueStorage,
        session_storage: SessionStorage | None = None,
    ) -> None:
        self.session_storage = session_storage or SessionStorage()
        self.draft_store = DraftApplicationsStore(local_storage)
        self.editing_store = EditingApplicationStore(self.session_storage)
        self.drafts = DraftApplicationsManager(self.draft_store, self.editing_store)
        self.applications = ApplicationsManager(api, self.editing_store, self.drafts)

    @classmethod
    def from_settings(cls, settings: ClientSettings | None = None) -> "PortalSession":
        settings = settings or load_client_settings()
        if not settings.user_id:
            logger.warning("VENDOR_PORTAL_USER_ID is not set; API calls will be rejected")
        api = PortalApiClient(settings.api_base_url, settings.user_id, settings.http_timeout)
        return cls(api, SqliteLocalStorage(settings.db_path))

    def close(self) -> None:
        self.applications.reset()
        self.session_storage.clear()
