import json
import logging

from pydantic import ValidationError

from ...db.local_storage import KeyValueStorage
from ..applications.models import EitherApplication, parse_application

logger = logging.getLogger(__name__)

EDITING_STORAGE_KEY = "vendorPortalEditingApplication"


class EditingApplicationStore:
    """Single staged application, last write wins."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    def load_from_editing_application_store(self) -> EitherApplication | None:
        raw = self._storage.get_item(EDITING_STORAGE_KEY)
        if not raw:
            return None
        try:
            return parse_application(json.loads(raw))
        except (json.JSONDecodeError, ValidationError, ValueError):
            logger.warning("Discarding unreadable editing application", exc_info=True)
            self._storage.remove_item(EDITING_STORAGE_KEY)
            return None

    def save_to_editing_application_store(self, application: EitherApplication) -> None:
        self._storage.set_item(EDITING_STORAGE_KEY, json.dumps(application.to_json_dict()))

    def clear_editing_application_store(self) -> None:
        self._storage.remove_item(EDITING_STORAGE_KEY)
