from typing import TypeVar

from .models import CraftFairApplication

ApplicationT = TypeVar("ApplicationT", bound=CraftFairApplication)

PITCH_BASE_COST: dict[str, int] = {
    "standardNoShelter": 460,
    "extraLargeNoShelter": 560,
    "standardInMarquee": 480,
    "doubleInMarquee": 940,
}

PITCH_ADDITIONAL_WIDTH_COST: dict[str, int] = {
    "standardNoShelter": 140,
    "extraLargeNoShelter": 150,
    "standardInMarquee": 0,
    "doubleInMarquee": 0,
}

ELECTRICAL_OPTION_COST: dict[str, int] = {
    "none": 0,
    "1 x 13amp socket": 60,
    "1 x 16amp socket": 60,
    "2 x 13amp socket": 70,
    "1 x 32amp supply": 90,
}

CAMPING_COST = 60
TABLE_COST = 12


def calculate_total_cost(
    pitch_type: str,
    pitch_additional_width: int,
    pitch_electrical_options: str,
    camping_required: bool,
    tables: int,
) -> int:
    base_cost = PITCH_BASE_COST[pitch_type]
    additional_width_cost = PITCH_ADDITIONAL_WIDTH_COST[pitch_type] * pitch_additional_width
    electrical_cost = ELECTRICAL_OPTION_COST[pitch_electrical_options]
    camping_cost = CAMPING_COST if camping_required else 0
    tables_cost = TABLE_COST * tables
    return base_cost + additional_width_cost + electrical_cost + camping_cost + tables_cost


def get_total_craft_fair_application_cost(application: CraftFairApplication) -> int:
    return calculate_total_cost(
        application.pitch_type,
        application.pitch_additional_width,
        application.pitch_electrical_options,
        application.camping_required,
        application.tables,
    )


def with_total_cost(application: ApplicationT) -> ApplicationT:
    """Return a copy of ``application`` with ``total_cost`` recomputed."""
    return application.model_copy(
        update={"total_cost": get_total_craft_fair_application_cost(application)}
    )
