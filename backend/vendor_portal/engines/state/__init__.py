"""Client-side application state: draft pool, editing slot and submitted list."""

from .applications_manager import (
    APPLICATIONS_ERROR_MESSAGE,
    ApplicationsManager,
    NoEditingApplicationError,
    SubmissionError,
)
from .draft_store import DRAFTS_STORAGE_KEY, DraftApplicationsStore, DraftSlotError
from .drafts_manager import DraftApplicationsManager, DraftPoolFullError
from .editing_store import EditingApplicationStore
from .session import PortalSession

__all__ = [
    "APPLICATIONS_ERROR_MESSAGE",
    "ApplicationsManager",
    "DRAFTS_STORAGE_KEY",
    "DraftApplicationsManager",
    "DraftApplicationsStore",
    "DraftPoolFullError",
    "DraftSlotError",
    "EditingApplicationStore",
    "NoEditingApplicationError",
    "PortalSession",
    "SubmissionError",
]
