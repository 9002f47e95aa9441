import base64
import binascii
import json
import logging
import sqlite3

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..clients.sp import ListItemNotFoundError
from ..config import ServerSettings, load_server_settings
from ..db.database import get_db
from ..engines.applications import records
from ..engines.applications.controls import is_deletable, is_documents_uploadable, is_editable
from ..engines.applications.models import (
    CraftFairApplication,
    SubmittedCraftFairApplication,
    is_draft_application,
    parse_application,
)
from ..engines.applications.pricing import with_total_cost

router = APIRouter(prefix="/api", tags=["applications"])
logger = logging.getLogger(__name__)

BUSINESS_FIELDS = set(CraftFairApplication.model_fields)


class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DeleteApplicationRequest(_CamelRequest):
    db_id: int


class UploadDocumentRequest(_CamelRequest):
    db_id: int
    file_name: str
    content_base64: str


def db_conn():
    conn = get_db()
    try:
        yield conn
    finally:
        conn.close()


def server_settings() -> ServerSettings:
    return load_server_settings()


def current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    return user_id


def _get_owned_application_or_404(
    db: sqlite3.Connection, settings: ServerSettings, db_id: int, user_id: str
) -> SubmittedCraftFairApplication:
    application = records.get_craft_application_by_id_and_user_id(db, settings, db_id, user_id)
    if application is None:
        raise HTTPException(status_code=404, detail="Application not found")
    return application


async def _read_application_payload(request: Request) -> dict:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise HTTPException(status_code=400, detail="Request body is not valid JSON") from err

    # Older clients send the application JSON as a JSON string.
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as err:
            raise HTTPException(status_code=400, detail="Request body is not valid JSON") from err
    return payload


@router.get("/getApplications")
def get_applications(
    user_id: str = Depends(current_user_id),
    db: sqlite3.Connection = Depends(db_conn),
    settings: ServerSettings = Depends(server_settings),
):
    applications = records.get_craft_applications_by_user_id(db, settings, user_id)
    return [application.to_json_dict() for application in applications]


@router.post("/submitCraftApplication")
async def submit_craft_application(
    request: Request,
    user_id: str = Depends(current_user_id),
    db: sqlite3.Connection = Depends(db_conn),
    settings: ServerSettings = Depends(server_settings),
):
    payload = await _read_application_payload(request)
    try:
        application = with_total_cost(parse_application(payload))
    except ValueError as err:
        raise HTTPException(status_code=400, detail=str(err)) from err

    if is_draft_application(application):
        created = records.create_craft_application_list_item(db, settings, application, user_id)
        document_folder = records.ensure_document_folder_for_application(settings, created)
        created = created.model_copy(update={"document_folder": document_folder})
        records.update_craft_application_list_item(db, settings, created)
        logger.info("Created application %s for user %s", created.db_id, user_id)
        return created.to_json_dict()

    existing = _get_owned_application_or_404(db, settings, application.db_id, user_id)
    if not is_editable(existing):
        raise HTTPException(
            status_code=409,
            detail=f"Applications with status '{existing.status}' can no longer be edited",
        )
    updated = existing.model_copy(update=application.model_dump(include=BUSINESS_FIELDS))
    records.update_craft_application_list_item(db, settings, updated)
    logger.info("Updated application %s for user %s", updated.db_id, user_id)
    return updated.to_json_dict()


@router.post("/deleteCraftApplication")
def delete_craft_application(
    payload: DeleteApplicationRequest,
    user_id: str = Depends(current_user_id),
    db: sqlite3.Connection = Depends(db_conn),
    settings: ServerSettings = Depends(server_settings),
):
    existing = _get_owned_application_or_404(db, settings, payload.db_id, user_id)
    if not is_deletable(existing):
        raise HTTPException(
            status_code=409,
            detail=f"Applications with status '{existing.status}' cannot be deleted",
        )
    try:
        records.delete_craft_application_list_item(db, settings, existing)
    except ListItemNotFoundError as err:
        raise HTTPException(status_code=404, detail="Application not found") from err
    return {"deleted": True, "dbId": existing.db_id}


@router.post("/uploadApplicationDocument")
def upload_application_document(
    payload: UploadDocumentRequest,
    user_id: str = Depends(current_user_id),
    db: sqlite3.Connection = Depends(db_conn),
    settings: ServerSettings = Depends(server_settings),
):
    existing = _get_owned_application_or_404(db, settings, payload.db_id, user_id)
    if not is_documents_uploadable(existing):
        raise HTTPException(
            status_code=409,
            detail=f"Documents cannot be uploaded while status is '{existing.status}'",
        )
    try:
        content = base64.b64decode(payload.content_base64, validate=True)
    except binascii.Error as err:
        raise HTTPException(status_code=400, detail="contentBase64 is not valid base64") from err

    if not existing.document_folder:
        existing = existing.model_copy(
            update={"document_folder": records.ensure_document_folder_for_application(settings, existing)}
        )
        records.update_craft_application_list_item(db, settings, existing)

    records.add_file_to_application(settings, existing, payload.file_name, content)
    return {"fileName": payload.file_name, "documentFolder": existing.document_folder}
