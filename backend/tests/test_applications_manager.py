import asyncio
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from vendor_portal.db.local_storage import SessionStorage
from vendor_portal.engines.applications.models import SubmittedCraftFairApplication
from vendor_portal.engines.state import (
    APPLICATIONS_ERROR_MESSAGE,
    NoEditingApplicationError,
    PortalSession,
    SubmissionError,
)


class _DummyResponse:
    def __init__(self, status: int, payload):
        self.status = status
        self._payload = payload

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _DummyApi:
    def __init__(self, list_responses=None, submit_responses=None):
        self.list_responses = list(list_responses or [])
        self.submit_responses = list(submit_responses or [])
        self.calls: list[tuple[str, dict | None]] = []
        self.gate: asyncio.Event | None = None

    async def get_applications(self):
        self.calls.append(("GET", None))
        if self.gate is not None:
            await self.gate.wait()
        response = self.list_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def submit_craft_application(self, payload):
        self.calls.append(("POST", payload))
        return self.submit_responses.pop(0)


def _submitted(db_id: int, status: str = "Pending Deposit", trading_name: str = "Acme Crafts") -> dict:
    return {"dbId": db_id, "status": status, "tradingName": trading_name, "userId": "vendor-1"}


def _session(api: _DummyApi) -> PortalSession:
    return PortalSession(api, SessionStorage())


def _method_calls(api: _DummyApi) -> list[str]:
    return [method for method, _ in api.calls]


def test_submit_without_staged_application_sends_nothing():
    api = _DummyApi()
    session = _session(api)

    with pytest.raises(NoEditingApplicationError):
        asyncio.run(session.applications.submit_editing_application())
    assert api.calls == []


def test_submit_draft_clears_slot_appends_and_notifies_once():
    api = _DummyApi(submit_responses=[_DummyResponse(200, _submitted(41))])
    session = _session(api)
    draft = session.drafts.start_new_draft()
    session.drafts.autosave_draft(draft.model_copy(update={"trading_name": "Acme Crafts", "tables": 2}))

    notifications = []
    session.applications.subscribe_application_list_change(lambda: notifications.append("changed"))

    result = asyncio.run(session.applications.submit_editing_application())

    assert result.db_id == 41
    assert session.draft_store.get_drafts_from_store()[draft.draft_id] is None
    assert [a.db_id for a in session.applications.get_applications()] == [41]
    assert notifications == ["changed"]
    assert session.editing_store.load_from_editing_application_store() is None

    method, posted = api.calls[0]
    assert method == "POST"
    assert posted["draftId"] == draft.draft_id
    assert posted["tradingName"] == "Acme Crafts"
    assert posted["totalCost"] == 460 + 24


def test_resubmit_cached_application_replaces_entry_in_place():
    api = _DummyApi(
        list_responses=[_DummyResponse(200, [_submitted(1), _submitted(2), _submitted(3)])],
        submit_responses=[_DummyResponse(200, _submitted(2, status="Submitted", trading_name="Renamed"))],
    )
    session = _session(api)
    manager = session.applications
    asyncio.run(manager.refresh_applications_list())

    manager.prepare_existing_submission_for_editing(manager.get_applications()[1])
    notifications = []
    manager.subscribe_application_list_change(lambda: notifications.append("changed"))

    asyncio.run(manager.submit_editing_application())

    applications = manager.get_applications()
    assert [a.db_id for a in applications] == [1, 2, 3]
    assert applications[1].trading_name == "Renamed"
    assert applications[1].status == "Submitted"
    assert notifications == ["changed"]
    assert _method_calls(api) == ["GET", "POST"]


def test_resubmit_uncached_application_refreshes_full_list():
    api = _DummyApi(
        list_responses=[
            _DummyResponse(200, [_submitted(1)]),
            _DummyResponse(200, [_submitted(1), _submitted(7, trading_name="From server")]),
        ],
        submit_responses=[_DummyResponse(200, _submitted(7, trading_name="From submit"))],
    )
    session = _session(api)
    manager = session.applications
    asyncio.run(manager.refresh_applications_list())

    stale = SubmittedCraftFairApplication(db_id=7, status="Pending Deposit")
    manager.prepare_existing_submission_for_editing(stale)
    asyncio.run(manager.submit_editing_application())

    applications = manager.get_applications()
    assert [a.db_id for a in applications] == [1, 7]
    assert applications[1].trading_name == "From server"
    assert _method_calls(api) == ["GET", "POST", "GET"]


def test_submit_non_200_raises_with_status_and_keeps_staged_application():
    api = _DummyApi(submit_responses=[_DummyResponse(500, {"detail": "boom"})])
    session = _session(api)
    draft = session.drafts.start_new_draft()

    with pytest.raises(SubmissionError) as exc_info:
        asyncio.run(session.applications.submit_editing_application())

    assert exc_info.value.status_code == 500
    assert session.editing_store.load_from_editing_application_store() == draft
    assert session.draft_store.get_drafts_from_store()[draft.draft_id] == draft
    assert session.applications.get_applications() == ()


def test_submit_invalid_response_body_raises():
    api = _DummyApi(submit_responses=[_DummyResponse(200, {"status": "Submitted"})])
    session = _session(api)
    draft = session.drafts.start_new_draft()

    with pytest.raises(ValidationError):
        asyncio.run(session.applications.submit_editing_application())

    assert session.applications.get_applications() == ()
    assert session.draft_store.get_drafts_from_store()[draft.draft_id] == draft


def test_refresh_notifies_before_and_after_with_busy_flag():
    api = _DummyApi(list_responses=[_DummyResponse(200, [_submitted(5)])])
    manager = _session(api).applications
    observed = []
    manager.subscribe_application_list_change(
        lambda: observed.append((manager.is_refreshing_applications(), len(manager.get_applications())))
    )

    asyncio.run(manager.refresh_applications_list())

    assert observed == [(True, 0), (False, 1)]
    assert manager.get_applications_error() == ""


def test_refresh_schema_failure_empties_list_and_records_error():
    api = _DummyApi(
        list_responses=[
            _DummyResponse(200, [_submitted(1)]),
            _DummyResponse(200, [{"status": "Submitted"}]),
        ]
    )
    manager = _session(api).applications
    asyncio.run(manager.refresh_applications_list())
    assert len(manager.get_applications()) == 1

    asyncio.run(manager.refresh_applications_list())

    assert manager.get_applications() == ()
    assert manager.get_applications_error() == APPLICATIONS_ERROR_MESSAGE
    assert manager.is_refreshing_applications() is False


@pytest.mark.parametrize(
    "failure",
    [
        _DummyResponse(200, ValueError("Expecting value")),
        _DummyResponse(503, {"detail": "unavailable"}),
        OSError("connection refused"),
    ],
)
def test_refresh_transport_failures_are_recorded_not_raised(failure):
    api = _DummyApi(list_responses=[failure])
    manager = _session(api).applications

    asyncio.run(manager.refresh_applications_list())

    assert manager.get_applications() == ()
    assert manager.get_applications_error() == APPLICATIONS_ERROR_MESSAGE
    assert manager.is_refreshing_applications() is False


def test_refresh_clears_previous_error():
    api = _DummyApi(
        list_responses=[OSError("offline"), _DummyResponse(200, [_submitted(3)])],
    )
    manager = _session(api).applications
    asyncio.run(manager.refresh_applications_list())
    assert manager.get_applications_error()

    asyncio.run(manager.refresh_applications_list())
    assert manager.get_applications_error() == ""
    assert [a.db_id for a in manager.get_applications()] == [3]


def test_unsubscribe_stops_notifications():
    api = _DummyApi(list_responses=[_DummyResponse(200, []), _DummyResponse(200, [])])
    manager = _session(api).applications
    calls = []
    unsubscribe = manager.subscribe_application_list_change(lambda: calls.append(1))

    asyncio.run(manager.refresh_applications_list())
    unsubscribe()
    unsubscribe()
    asyncio.run(manager.refresh_applications_list())

    assert len(calls) == 2


def test_failing_subscriber_does_not_block_later_subscribers():
    api = _DummyApi(list_responses=[_DummyResponse(200, [])])
    manager = _session(api).applications
    order = []

    def broken():
        order.append("broken")
        raise RuntimeError("render failed")

    manager.subscribe_application_list_change(lambda: order.append("first"))
    manager.subscribe_application_list_change(broken)
    manager.subscribe_application_list_change(lambda: order.append("last"))

    asyncio.run(manager.refresh_applications_list())

    assert order == ["first", "broken", "last"] * 2


def test_submit_waits_for_in_flight_refresh():
    api = _DummyApi(
        list_responses=[_DummyResponse(200, [_submitted(1)])],
        submit_responses=[_DummyResponse(200, _submitted(2))],
    )
    session = _session(api)
    session.drafts.start_new_draft()
    manager = session.applications

    async def scenario():
        api.gate = asyncio.Event()
        refresh = asyncio.create_task(manager.refresh_applications_list())
        for _ in range(3):
            await asyncio.sleep(0)
        submit = asyncio.create_task(manager.submit_editing_application())
        for _ in range(3):
            await asyncio.sleep(0)
        assert _method_calls(api) == ["GET"]
        api.gate.set()
        await asyncio.gather(refresh, submit)

    asyncio.run(scenario())

    assert _method_calls(api) == ["GET", "POST"]
    assert [a.db_id for a in manager.get_applications()] == [1, 2]


def test_overlapping_submits_of_one_draft_post_once():
    api = _DummyApi(submit_responses=[_DummyResponse(200, _submitted(101)), _DummyResponse(200, _submitted(102))])
    session = _session(api)
    session.drafts.start_new_draft()
    manager = session.applications

    async def scenario():
        return await asyncio.gather(
            manager.submit_editing_application(),
            manager.submit_editing_application(),
            return_exceptions=True,
        )

    first, second = asyncio.run(scenario())

    assert isinstance(first, SubmittedCraftFairApplication)
    assert first.db_id == 101
    assert isinstance(second, NoEditingApplicationError)
    assert _method_calls(api) == ["POST"]
    assert [a.db_id for a in manager.get_applications()] == [101]


def test_get_applications_returns_immutable_view():
    api = _DummyApi(list_responses=[_DummyResponse(200, [_submitted(1)])])
    manager = _session(api).applications
    asyncio.run(manager.refresh_applications_list())

    view = manager.get_applications()
    assert isinstance(view, tuple)
    with pytest.raises(AttributeError):
        view.append(None)


def test_close_resets_session_state():
    api = _DummyApi(list_responses=[_DummyResponse(200, [_submitted(1)])])
    session = _session(api)
    session.drafts.start_new_draft()
    calls = []
    session.applications.subscribe_application_list_change(lambda: calls.append(1))
    asyncio.run(session.applications.refresh_applications_list())

    session.close()

    assert session.applications.get_applications() == ()
    assert session.editing_store.load_from_editing_application_store() is None
    session.applications.prepare_existing_submission_for_editing(
        SubmittedCraftFairApplication(db_id=1, status="Submitted")
    )
    assert len(calls) == 2
    assert len(session.drafts.get_drafts()) == 1
