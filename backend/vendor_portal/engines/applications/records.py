"""Mapping between craft fair applications and vendor site list items."""

import sqlite3
from typing import Any
from urllib.parse import quote, urljoin, urlparse

from ...clients import sp
from ...config import ServerSettings
from .models import (
    APPLICATION_STATUSES,
    ELECTRICAL_OPTIONS,
    PITCH_TYPES,
    CraftFairApplication,
    SubmittedCraftFairApplication,
)

DOCUMENTS_LIBRARY = "Application Documents"
DEFAULT_STATUS = "Pending Deposit"


def get_craft_application_by_id_and_user_id(
    db: sqlite3.Connection, settings: ServerSettings, db_id: int, user_id: str
) -> SubmittedCraftFairApplication | None:
    applications = _get_craft_applications_by_filter(db, settings, {"ID": db_id, "UserId": user_id})
    return applications[0] if applications else None


def get_craft_applications_by_user_id(
    db: sqlite3.Connection, settings: ServerSettings, user_id: str
) -> list[SubmittedCraftFairApplication]:
    return _get_craft_applications_by_filter(db, settings, {"UserId": user_id})


def _get_craft_applications_by_filter(
    db: sqlite3.Connection, settings: ServerSettings, filters: dict[str, Any] | None = None
) -> list[SubmittedCraftFairApplication]:
    return sp.apply_to_items_by_filter(
        db,
        settings.vendors_site,
        settings.applications_list,
        lambda items: [list_item_to_craft_application(item) for item in items],
        filters,
    )


def create_craft_application_list_item(
    db: sqlite3.Connection,
    settings: ServerSettings,
    application: CraftFairApplication,
    user_id: str,
    status: str = DEFAULT_STATUS,
) -> SubmittedCraftFairApplication:
    fields = craft_application_to_list_item(application)
    fields["UserId"] = user_id
    fields["Status"] = status
    item = sp.create_item(db, settings.vendors_site, settings.applications_list, fields)
    return list_item_to_craft_application(item)


def update_craft_application_list_item(
    db: sqlite3.Connection, settings: ServerSettings, application: SubmittedCraftFairApplication
) -> SubmittedCraftFairApplication:
    sp.update_item(
        db,
        settings.vendors_site,
        settings.applications_list,
        application.db_id,
        craft_application_to_list_item(application),
    )
    return application


def delete_craft_application_list_item(
    db: sqlite3.Connection, settings: ServerSettings, application: SubmittedCraftFairApplication
) -> None:
    sp.delete_item(db, settings.vendors_site, settings.applications_list, application.db_id)


def ensure_document_folder_for_application(
    settings: ServerSettings, application: SubmittedCraftFairApplication
) -> str:
    folder_name = f"{application.db_id} - {application.trading_name}"
    server_relative_url = sp.ensure_folder(
        settings.documents_dir,
        settings.vendors_site,
        DOCUMENTS_LIBRARY,
        folder_name,
    )
    return urljoin(settings.vendors_site + "/", quote(server_relative_url))


def add_file_to_application(
    settings: ServerSettings,
    application: SubmittedCraftFairApplication,
    file_name: str,
    content: bytes,
) -> bool:
    if not application.document_folder:
        return False
    folder_path = urlparse(application.document_folder).path
    sp.add_file_to_folder(settings.documents_dir, settings.vendors_site, folder_path, file_name, content)
    return True


def craft_application_to_list_item(application: CraftFairApplication) -> dict[str, Any]:
    item: dict[str, Any] = {
        "Title": application.trading_name,
        "DescriptionOfStall": application.description_of_stall,
        "AddressLine1": application.address_line1,
        "AddressLine2": application.address_line2,
        "City": application.city,
        "State": application.state,
        "Postcode": application.postcode,
        "Country": application.country,
        "ContactFirstName": application.contact_first_names,
        "ContactLastName": application.contact_last_name,
        "ContactEmail": application.email,
        "Landline": application.landline,
        "Mobile": application.mobile,
        "Website": application.website,
        "TotalCost": application.total_cost,
        "PitchType": application.pitch_type,
        "PitchAdditionalWidth": application.pitch_additional_width,
        "PitchVanSpaceRequired": application.pitch_van_space_required,
        "PitchElectricalOptions": application.pitch_electrical_options,
        "CampingRequired": application.camping_required,
        "Tables": application.tables,
    }
    if isinstance(application, SubmittedCraftFairApplication):
        item.update(
            {
                "Status": application.status,
                "UserId": application.user_id,
                "DepositOrderNumber": application.deposit_order_number,
                "DepositOrderKey": application.deposit_order_key,
                "DepositAmount": application.deposit_amount,
                "DepositAmountPaid": application.deposit_amount_paid,
                "DocumentFolder": (
                    {"Description": "Related Documents", "Url": application.document_folder}
                    if application.document_folder
                    else None
                ),
            }
        )
    return item


def list_item_to_craft_application(item: dict[str, Any]) -> SubmittedCraftFairApplication:
    status = item.get("Status")
    pitch_type = item.get("PitchType")
    electrical = item.get("PitchElectricalOptions")
    document_folder = item.get("DocumentFolder")

    return SubmittedCraftFairApplication(
        db_id=item["ID"],
        user_id=item.get("UserId") or "",
        trading_name=item.get("Title") or "",
        status=status if status in APPLICATION_STATUSES else DEFAULT_STATUS,
        address_line1=item.get("AddressLine1") or "",
        address_line2=item.get("AddressLine2") or "",
        city=item.get("City") or "",
        state=item.get("State") or "",
        postcode=item.get("Postcode") or "",
        country=item.get("Country") or "",
        contact_first_names=item.get("ContactFirstName") or "",
        contact_last_name=item.get("ContactLastName") or "",
        email=item.get("ContactEmail") or "",
        landline=item.get("Landline") or "",
        mobile=item.get("Mobile") or "",
        website=item.get("Website") or "",
        description_of_stall=item.get("DescriptionOfStall") or "",
        pitch_type=pitch_type if pitch_type in PITCH_TYPES else "standardNoShelter",
        pitch_additional_width=item.get("PitchAdditionalWidth") or 0,
        pitch_van_space_required=bool(item.get("PitchVanSpaceRequired")),
        pitch_electrical_options=electrical if electrical in ELECTRICAL_OPTIONS else "none",
        camping_required=bool(item.get("CampingRequired")),
        total_cost=item.get("TotalCost") or 0,
        tables=item.get("Tables") or 0,
        created=item.get("Created"),
        deposit_order_number=item.get("DepositOrderNumber") or 0,
        deposit_order_key=item.get("DepositOrderKey") or "",
        deposit_amount=item.get("DepositAmount"),
        deposit_amount_paid=item.get("DepositAmountPaid"),
        document_folder=document_folder.get("Url") if isinstance(document_folder, dict) else None,
    )
