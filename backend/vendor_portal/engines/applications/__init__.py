"""Craft fair application models, pricing, list records and action controls."""

from .controls import ApplicationControls, get_application_controls
from .models import (
    MAX_DRAFTS,
    DraftCraftFairApplication,
    SubmittedCraftFairApplication,
    parse_application,
)
from .pricing import calculate_total_cost, get_total_craft_fair_application_cost

__all__ = [
    "ApplicationControls",
    "DraftCraftFairApplication",
    "MAX_DRAFTS",
    "SubmittedCraftFairApplication",
    "calculate_total_cost",
    "get_application_controls",
    "get_total_craft_fair_application_cost",
    "parse_application",
]
