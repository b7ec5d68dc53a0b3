"""
Module 'wizard': brouillon de sélection et validateurs d'étape.
Le contrôleur (wizard.controller) dépend de bookings/payments et s'importe explicitement.
"""

from .models import Selection, WizardStep
from .validators import validate_step, validate_date_time, validate_pickup_and_count, validate_contact_info

__all__ = [
    # models
    "Selection",
    "WizardStep",
    # validators
    "validate_step",
    "validate_date_time",
    "validate_pickup_and_count",
    "validate_contact_info",
]
