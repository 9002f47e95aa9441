"""Craft fair application models shared by the client state layer and the API."""

from __future__ import annotations

from typing import Any, Literal, TypeGuard, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

MAX_DRAFTS = 10

PitchType = Literal[
    "standardNoShelter",
    "extraLargeNoShelter",
    "standardInMarquee",
    "doubleInMarquee",
]

ElectricalOption = Literal[
    "none",
    "1 x 13amp socket",
    "1 x 16amp socket",
    "2 x 13amp socket",
    "1 x 32amp supply",
]

ApplicationStatus = Literal[
    "Pending Deposit",
    "Submitted",
    "Pending Document Upload",
    "Accepted Pending Payment",
    "Accepted",
    "Declined",
    "Withdrawn",
]

PITCH_TYPES: tuple[str, ...] = get_args(PitchType)
ELECTRICAL_OPTIONS: tuple[str, ...] = get_args(ElectricalOption)
APPLICATION_STATUSES: tuple[str, ...] = get_args(ApplicationStatus)


class CraftFairApplication(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    trading_name: str = ""
    description_of_stall: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = ""
    contact_first_names: str = ""
    contact_last_name: str = ""
    email: str = ""
    landline: str = ""
    mobile: str = ""
    website: str = ""
    pitch_type: PitchType = "standardNoShelter"
    pitch_additional_width: int = Field(default=0, ge=0)
    pitch_van_space_required: bool = False
    pitch_electrical_options: ElectricalOption = "none"
    camping_required: bool = False
    tables: int = Field(default=0, ge=0)
    total_cost: int = 0

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class DraftCraftFairApplication(CraftFairApplication):
    draft_id: int = Field(ge=0, lt=MAX_DRAFTS)


class SubmittedCraftFairApplication(CraftFairApplication):
    db_id: int
    status: ApplicationStatus
    user_id: str = ""
    created: str | None = None
    deposit_order_number: int = 0
    deposit_order_key: str = ""
    deposit_amount: float | None = None
    deposit_amount_paid: float | None = None
    document_folder: str | None = None


EitherApplication = Union[DraftCraftFairApplication, SubmittedCraftFairApplication]

SubmittedApplicationAdapter = TypeAdapter(SubmittedCraftFairApplication)
SubmittedApplicationListAdapter = TypeAdapter(list[SubmittedCraftFairApplication])


def is_draft_application(application: EitherApplication) -> TypeGuard[DraftCraftFairApplication]:
    return isinstance(application, DraftCraftFairApplication)


def is_submitted_application(
    application: EitherApplication,
) -> TypeGuard[SubmittedCraftFairApplication]:
    return isinstance(application, SubmittedCraftFairApplication)


def parse_application(payload: Any) -> EitherApplication:
    """Validate a JSON object as either a draft or a submitted application.

    The variant is picked from the identity key. A payload carrying both
    ``draftId`` and ``dbId`` (or neither) is rejected.
    """
    if not isinstance(payload, dict):
        raise ValueError("Application payload must be a JSON object")
    has_draft_id = "draftId" in payload or "draft_id" in payload
    has_db_id = "dbId" in payload or "db_id" in payload
    if has_draft_id == has_db_id:
        raise ValueError("Application must carry exactly one of draftId or dbId")
    if has_draft_id:
        return DraftCraftFairApplication.model_validate(payload)
    return SubmittedCraftFairApplication.model_validate(payload)
