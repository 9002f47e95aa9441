"""Which list-item actions a vendor may take on an application.

Presentation code renders one button per true flag. Drafts have no status and
always get ``DRAFT_CONTROLS``.
"""

from dataclasses import dataclass

from .models import EitherApplication, is_submitted_application


@dataclass(frozen=True)
class ApplicationControls:
    editable: bool
    deletable: bool
    payable: bool
    documents_uploadable: bool
    completable: bool


DRAFT_CONTROLS = ApplicationControls(
    editable=True,
    deletable=True,
    payable=False,
    documents_uploadable=False,
    completable=False,
)

STATUS_CONTROLS: dict[str, ApplicationControls] = {
    "Pending Deposit": ApplicationControls(
        editable=True, deletable=True, payable=True, documents_uploadable=False, completable=False
    ),
    "Submitted": ApplicationControls(
        editable=True, deletable=True, payable=False, documents_uploadable=False, completable=False
    ),
    "Pending Document Upload": ApplicationControls(
        editable=True, deletable=False, payable=False, documents_uploadable=True, completable=True
    ),
    "Accepted Pending Payment": ApplicationControls(
        editable=False, deletable=False, payable=True, documents_uploadable=False, completable=False
    ),
    "Accepted": ApplicationControls(
        editable=False, deletable=False, payable=False, documents_uploadable=False, completable=False
    ),
    "Declined": ApplicationControls(
        editable=False, deletable=False, payable=False, documents_uploadable=False, completable=False
    ),
    "Withdrawn": ApplicationControls(
        editable=False, deletable=False, payable=False, documents_uploadable=False, completable=False
    ),
}


def controls_for_status(status: str) -> ApplicationControls:
    # KeyError here means a status was added without a row above.
    return STATUS_CONTROLS[status]


def get_application_controls(application: EitherApplication) -> ApplicationControls:
    if is_submitted_application(application):
        return controls_for_status(application.status)
    return DRAFT_CONTROLS


def is_editable(application: EitherApplication) -> bool:
    return get_application_controls(application).editable


def is_deletable(application: EitherApplication) -> bool:
    return get_application_controls(application).deletable


def is_payable(application: EitherApplication) -> bool:
    return get_application_controls(application).payable


def is_documents_uploadable(application: EitherApplication) -> bool:
    return get_application_controls(application).documents_uploadable


def is_completable(application: EitherApplication) -> bool:
    return get_application_controls(application).completable
