"""
Module 'availability': lecture et cache des places restantes par créneau.
"""

from .repository import fetch_availability
from .cache import AvailabilityCache, LOW_AVAILABILITY_THRESHOLD

__all__ = [
    "fetch_availability",
    "AvailabilityCache",
    "LOW_AVAILABILITY_THRESHOLD",
]
