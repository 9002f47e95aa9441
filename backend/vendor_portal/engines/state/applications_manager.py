import asyncio
import logging
from typing import Any, Callable, Iterable, Protocol

from pydantic import ValidationError

from ..applications.models import (
    SubmittedApplicationAdapter,
    SubmittedApplicationListAdapter,
    SubmittedCraftFairApplication,
    is_draft_application,
)
from .drafts_manager import DraftApplicationsManager
from .editing_store import EditingApplicationStore

logger = logging.getLogger(__name__)

APPLICATIONS_ERROR_MESSAGE = "Error processing list of applications from server."


class ApiResponseLike(Protocol):
    status: int

    def json(self) -> Any: ...


class ApplicationsApi(Protocol):
    async def get_applications(self) -> ApiResponseLike: ...

    async def submit_craft_application(self, payload: dict[str, Any]) -> ApiResponseLike: ...


class NoEditingApplicationError(RuntimeError):
    """Raised when a submit is attempted with nothing staged for editing."""


class SubmissionError(RuntimeError):
    """Raised when the server rejects a submission."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Status code: {status_code} when submitting application.")
        self.status_code = status_code


class ApplicationListFetchError(RuntimeError):
    """Raised internally when the list endpoint answers with a non-200 status."""


class ApplicationsManager:
    """Cache of the vendor's submitted applications and the submit workflow.

    UI code subscribes for change notifications and reads state through the
    accessors. ``refresh_applications_list`` and ``submit_editing_application``
    never interleave on one instance: both take the same lock.

    Failure policies differ on purpose. A failed refresh is recorded in
    ``get_applications_error()`` with an empty list so the UI can offer a
    retry; a failed submit raises to the caller.
    """

    def __init__(
        self,
        api: ApplicationsApi,
        editing_store: EditingApplicationStore,
        drafts_manager: DraftApplicationsManager,
        applications: Iterable[SubmittedCraftFairApplication] | None = None,
    ) -> None:
        self._api = api
        self._editing_store = editing_store
        self._drafts_manager = drafts_manager
        self._applications: list[SubmittedCraftFairApplication] = list(applications or [])
        self._applications_error = ""
        self._refreshing_applications = False
        self._subscribers: dict[int, Callable[[], None]] = {}
        self._next_subscriber_token = 0
        self._lock = asyncio.Lock()

    def subscribe_application_list_change(self, callback: Callable[[], None]) -> Callable[[], None]:
        token = self._next_subscriber_token
        self._next_subscriber_token += 1
        self._subscribers[token] = callback

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def get_applications(self) -> tuple[SubmittedCraftFairApplication, ...]:
        return tuple(self._applications)

    def get_applications_error(self) -> str:
        return self._applications_error

    def is_refreshing_applications(self) -> bool:
        return self._refreshing_applications

    async def refresh_applications_list(self) -> None:
        async with self._lock:
            await self._refresh_applications_list_locked()

    async def submit_editing_application(self) -> SubmittedCraftFairApplication:
        async with self._lock:
            # Read under the lock so a queued submit sees the slot a prior submit cleared.
            current = self._editing_store.load_from_editing_application_store()
            if current is None:
                raise NoEditingApplicationError("No current craft application available for submission.")

            response = await self._api.submit_craft_application(current.to_json_dict())
            if response.status != 200:
                raise SubmissionError(response.status)

            self._editing_store.clear_editing_application_store()
            submitted = SubmittedApplicationAdapter.validate_python(response.json())

            if is_draft_application(current):
                self._drafts_manager.remove_draft(current.draft_id)
                self._applications.append(submitted)
                self._notify_application_list_change_subscribers()
            else:
                update_index = self._find_application_index(submitted.db_id)
                if update_index is not None:
                    self._applications[update_index] = submitted
                    self._notify_application_list_change_subscribers()
                else:
                    logger.info(
                        "Submitted application %s is not cached; refreshing full list",
                        submitted.db_id,
                    )
                    await self._refresh_applications_list_locked()

        logger.info("Application %s submitted", submitted.db_id)
        return submitted

    def prepare_existing_submission_for_editing(self, application: SubmittedCraftFairApplication) -> None:
        self._editing_store.save_to_editing_application_store(application)

    def reset(self) -> None:
        self._applications = []
        self._applications_error = ""
        self._refreshing_applications = False
        self._subscribers.clear()

    async def _refresh_applications_list_locked(self) -> None:
        self._refreshing_applications = True
        self._applications_error = ""
        self._notify_application_list_change_subscribers()
        try:
            response = await self._api.get_applications()
            if response.status != 200:
                raise ApplicationListFetchError(
                    f"Status code: {response.status} when fetching applications."
                )
            self._applications = SubmittedApplicationListAdapter.validate_python(response.json())
        except ValidationError as err:
            self._applications_error = APPLICATIONS_ERROR_MESSAGE
            self._applications = []
            logger.error("%s %s", APPLICATIONS_ERROR_MESSAGE, err.errors())
        except Exception:
            self._applications_error = APPLICATIONS_ERROR_MESSAGE
            self._applications = []
            logger.exception("Failed to refresh applications list")
        finally:
            self._refreshing_applications = False
        self._notify_application_list_change_subscribers()

    def _find_application_index(self, db_id: int) -> int | None:
        for index, application in enumerate(self._applications):
            if application.db_id == db_id:
                return index
        return None

    def _notify_application_list_change_subscribers(self) -> None:
        for subscriber in list(self._subscribers.values()):
            try:
                subscriber()
            except Exception:
                logger.exception("Application list subscriber failed")
