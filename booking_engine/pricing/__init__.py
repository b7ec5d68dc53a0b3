"""
Module 'pricing': grille de prix, catalogue des créneaux et calcul du total.
"""

from .models import (
    PriceTable,
    PriceBreakdown,
    Attraction,
    TimeSlot,
    TIME_SLOTS,
    GUIDED_SLOTS,
    PICKUP_LOCATIONS,
    DEFAULT_PRICING,
    is_guided_slot,
)
from .service import compute_total, format_amount, round_amount, to_minor_units, vehicles_needed
from .repository import load_price_table

__all__ = [
    "PriceTable",
    "PriceBreakdown",
    "Attraction",
    "TimeSlot",
    "TIME_SLOTS",
    "GUIDED_SLOTS",
    "PICKUP_LOCATIONS",
    "DEFAULT_PRICING",
    "is_guided_slot",
    "compute_total",
    "format_amount",
    "round_amount",
    "to_minor_units",
    "vehicles_needed",
    "load_price_table",
]
