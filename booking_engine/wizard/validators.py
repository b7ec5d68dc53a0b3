"""
Validateurs d'étape: chaque fonction retourne la liste des erreurs (vide = passage autorisé).
"""
import re
from typing import TYPE_CHECKING, List, Optional

from booking_engine.config import MIN_PHONE_DIGITS
from booking_engine.pricing.models import TIME_SLOTS
from .models import Selection, WizardStep

if TYPE_CHECKING:
    from booking_engine.availability.cache import AvailabilityCache
    from booking_engine.settings.models import SessionConfig

KNOWN_SLOTS = {slot.value for slot in TIME_SLOTS}

def validate_date_time(selection: Selection, config: "SessionConfig", availability: Optional["AvailabilityCache"] = None) -> List[str]:
    errors: List[str] = []
    if not config.purchases_enabled:
        errors.append("La vente de billets est momentanément suspendue")
    if not selection.date:
        errors.append("Date requise")
    if not selection.time_slot:
        errors.append("Créneau requis")
    elif selection.time_slot not in KNOWN_SLOTS:
        errors.append("Créneau inconnu")
    elif availability is not None and selection.date and availability.get(selection.date, selection.time_slot) <= 0:
        errors.append("Créneau complet")
    return errors

def validate_pickup_and_count(selection: Selection) -> List[str]:
    errors: List[str] = []
    if not (selection.pickup_location or "").strip():
        errors.append("Point de prise en charge requis")
    if selection.passengers < 1:
        errors.append("Au moins un passager requis")
    return errors

def validate_contact_info(selection: Selection, min_phone_digits: int = MIN_PHONE_DIGITS) -> List[str]:
    errors: List[str] = []
    email = (selection.email or "").strip()
    if not (selection.full_name or "").strip():
        errors.append("Nom complet requis")
    if not email:
        errors.append("Email requis")
    if not (selection.confirm_email or "").strip():
        errors.append("Confirmation de l'email requise")
    elif email and selection.confirm_email.strip() != email:
        errors.append("Les emails ne correspondent pas")
    digits = re.sub(r"\D", "", selection.phone_number or "")
    if len(digits) < min_phone_digits:
        errors.append(f"Numéro de téléphone trop court (minimum {min_phone_digits} chiffres)")
    return errors

def validate_step(
    step: WizardStep,
    selection: Selection,
    config: "SessionConfig",
    availability: Optional["AvailabilityCache"] = None,
) -> List[str]:
    """
    Validateur de l'étape courante (condition pour passer à l'étape suivante).
    L'étape ADD_ONS est toujours valide (options facultatives, ou simple notice si désactivées).
    """
    if step is WizardStep.DATE_TIME:
        return validate_date_time(selection, config, availability)
    if step is WizardStep.PICKUP_AND_COUNT:
        return validate_pickup_and_count(selection)
    if step is WizardStep.ADD_ONS:
        return []
    if step is WizardStep.CONTACT_INFO:
        return validate_contact_info(selection)
    return []
