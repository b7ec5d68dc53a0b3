"""
Classification de l'échec d'envoi de l'email de confirmation.
Purement informatif: la réservation reste confirmée.
"""
from enum import Enum
from typing import Optional, Tuple

DOMAIN_MARKERS = ("domain verification required", "verify", "only send testing emails")
NO_ADDRESS_MARKERS = ("no email address",)

class EmailWarning(str, Enum):
    DOMAIN_UNVERIFIED = "domain_unverified"
    NO_ADDRESS = "no_address"
    GENERIC = "generic"

def classify_email_error(email_error: Optional[str]) -> Tuple[EmailWarning, str]:
    """
    Retourne (catégorie, message utilisateur).
    - domaine expéditeur non vérifié / sans adresse destinataire / générique (détail brut ajouté)
    """
    detail = (email_error or "").strip()
    lowered = detail.lower()
    if any(marker in lowered for marker in DOMAIN_MARKERS):
        return EmailWarning.DOMAIN_UNVERIFIED, "L'envoi d'emails nécessite la vérification du domaine. Vos QR codes sont disponibles sur cette page."
    if any(marker in lowered for marker in NO_ADDRESS_MARKERS):
        return EmailWarning.NO_ADDRESS, "Aucune adresse email fournie. Conservez vos QR codes depuis cette page."
    if detail:
        return EmailWarning.GENERIC, f"L'email n'a pas pu être envoyé: {detail}. Conservez vos QR codes depuis cette page."
    return EmailWarning.GENERIC, "L'email n'a pas pu être envoyé. Conservez vos QR codes depuis cette page."
