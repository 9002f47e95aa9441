import json
import logging
from typing import Any

from pydantic import ValidationError

from ...db.local_storage import KeyValueStorage
from ..applications.models import MAX_DRAFTS, DraftCraftFairApplication

logger = logging.getLogger(__name__)

DRAFTS_STORAGE_KEY = "vendorPortalDrafts"


class DraftSlotError(IndexError):
    """Raised when a draft id does not address a slot in the pool."""


def _empty_pool() -> list[DraftCraftFairApplication | None]:
    return [None] * MAX_DRAFTS


class DraftApplicationsStore:
    """Fixed pool of ``MAX_DRAFTS`` draft slots kept in durable storage.

    The whole pool is stored as one JSON array of nullable entries and is
    rewritten on every change. Slot index and ``draft_id`` are the same thing.
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    def get_available_draft_id(self) -> int | None:
        for index, draft in enumerate(self.get_drafts_from_store()):
            if draft is None:
                return index
        return None

    def get_drafts_from_store(self) -> list[DraftCraftFairApplication | None]:
        raw = self._storage.get_item(DRAFTS_STORAGE_KEY)
        if not raw:
            return _empty_pool()

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored drafts are not valid JSON; starting from an empty pool")
            return _empty_pool()
        if not isinstance(parsed, list):
            logger.warning("Stored drafts are not a list; starting from an empty pool")
            return _empty_pool()
        if len(parsed) != MAX_DRAFTS:
            logger.warning("Stored draft pool has %d slots, expected %d", len(parsed), MAX_DRAFTS)
            parsed = (parsed + [None] * MAX_DRAFTS)[:MAX_DRAFTS]

        return [self._load_slot(index, entry) for index, entry in enumerate(parsed)]

    def write_draft_to_store(self, application: DraftCraftFairApplication) -> None:
        draft_id = application.draft_id
        if not 0 <= draft_id < MAX_DRAFTS:
            raise DraftSlotError(f"Draft id {draft_id} is outside the pool of {MAX_DRAFTS} slots")
        drafts = self.get_drafts_from_store()
        drafts[draft_id] = application
        self._store_drafts(drafts)

    def clear_draft_from_store(self, draft_id: int) -> None:
        drafts = self.get_drafts_from_store()
        if 0 <= draft_id < MAX_DRAFTS:
            drafts[draft_id] = None
        self._store_drafts(drafts)

    def _load_slot(self, index: int, entry: Any) -> DraftCraftFairApplication | None:
        if entry is None:
            return None
        try:
            draft = DraftCraftFairApplication.model_validate(entry)
        except ValidationError as err:
            logger.warning("Dropping invalid draft in slot %d: %s", index, err.errors())
            return None
        if draft.draft_id != index:
            logger.warning("Draft in slot %d claimed id %d; using slot index", index, draft.draft_id)
            draft = draft.model_copy(update={"draft_id": index})
        return draft

    def _store_drafts(self, drafts: list[DraftCraftFairApplication | None]) -> None:
        payload = [draft.to_json_dict() if draft is not None else None for draft in drafts]
        self._storage.set_item(DRAFTS_STORAGE_KEY, json.dumps(payload))
