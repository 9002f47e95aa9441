import logging

from ..applications.models import DraftCraftFairApplication
from ..applications.pricing import with_total_cost
from .draft_store import DraftApplicationsStore
from .editing_store import EditingApplicationStore

logger = logging.getLogger(__name__)


class DraftPoolFullError(RuntimeError):
    """Raised when every draft slot is already in use."""


class DraftApplicationsManager:
    def __init__(
        self,
        draft_store: DraftApplicationsStore,
        editing_store: EditingApplicationStore,
    ) -> None:
        self._draft_store = draft_store
        self._editing_store = editing_store

    def get_drafts(self) -> list[DraftCraftFairApplication]:
        return [draft for draft in self._draft_store.get_drafts_from_store() if draft is not None]

    def start_new_draft(self) -> DraftCraftFairApplication:
        draft_id = self._draft_store.get_available_draft_id()
        if draft_id is None:
            raise DraftPoolFullError("No free draft slots; delete a draft before starting another")

        draft = with_total_cost(DraftCraftFairApplication(draft_id=draft_id))
        self._draft_store.write_draft_to_store(draft)
        self._editing_store.save_to_editing_application_store(draft)
        logger.info("Started draft in slot %d", draft_id)
        return draft

    def autosave_draft(self, application: DraftCraftFairApplication) -> DraftCraftFairApplication:
        draft = with_total_cost(application)
        self._draft_store.write_draft_to_store(draft)
        self._editing_store.save_to_editing_application_store(draft)
        return draft

    def open_draft_for_editing(self, draft_id: int) -> DraftCraftFairApplication:
        drafts = self._draft_store.get_drafts_from_store()
        draft = drafts[draft_id] if 0 <= draft_id < len(drafts) else None
        if draft is None:
            raise KeyError(f"No draft stored in slot {draft_id}")
        self._editing_store.save_to_editing_application_store(draft)
        return draft

    def remove_draft(self, draft_id: int) -> None:
        self._draft_store.clear_draft_from_store(draft_id)

        editing = self._editing_store.load_from_editing_application_store()
        if isinstance(editing, DraftCraftFairApplication) and editing.draft_id == draft_id:
            self._editing_store.clear_editing_application_store()
        logger.info("Removed draft in slot %d", draft_id)
