"""
Adaptateur Stripe: vérifie côté serveur l'issue d'une confirmation de paiement.
La confirmation elle-même est faite côté client (SDK Stripe avec le client_secret).
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import stripe

from booking_engine.config import STRIPE_SECRET_KEY
from booking_engine.pricing.service import to_minor_units
from .models import PaymentConfirmation

logger = logging.getLogger(__name__)

PENDING_STATUSES = {"requires_action", "processing", "requires_confirmation"}

# module booking_engine.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi, ou None sans STRIPE_SECRET_KEY.
    """
    if not STRIPE_SECRET_KEY:
        return None
    stripe.api_key = STRIPE_SECRET_KEY
    return stripe

def retrieve_payment_intent(intent_id: str) -> Dict[str, Any]:
    """
    Récupère un PaymentIntent par son identifiant.
    Retour: dict incluant "id", "status", "amount" (centimes), "currency".
    """
    client = require_stripe()
    if client is None:
        raise RuntimeError("STRIPE_SECRET_KEY manquant pour retrieve_payment_intent()")
    intent = client.PaymentIntent.retrieve(intent_id)
    # stripe retourne un objet; on le traite comme dict-compatible
    return dict(intent)

def confirmation_from_status(status: Optional[str]) -> PaymentConfirmation:
    """
    Traduit un statut PaymentIntent en issue de confirmation.
    - succeeded -> SUCCEEDED
    - requires_action / processing / requires_confirmation -> REQUIRES_ACTION
    - autre (requires_payment_method, canceled, inconnu) -> FAILED
    """
    s = (status or "").lower()
    if s == "succeeded":
        return PaymentConfirmation.SUCCEEDED
    if s in PENDING_STATUSES:
        return PaymentConfirmation.REQUIRES_ACTION
    return PaymentConfirmation.FAILED

def verify_confirmation(
    intent_id: str,
    reported: PaymentConfirmation,
    expected_amount: Optional[Decimal] = None,
) -> PaymentConfirmation:
    """
    Vérifie auprès de Stripe l'issue annoncée par le client.
    - Montant Stripe différent du montant autorisé (centimes): FAILED.
    - Sans clé Stripe configurée, l'issue annoncée est conservée (le backend revérifie à la réservation).
    - Erreur Stripe: l'issue annoncée est conservée et l'erreur est journalisée.
    """
    if require_stripe() is None:
        return reported
    try:
        intent = retrieve_payment_intent(intent_id)
    except stripe.StripeError:
        logger.exception("payments.stripe_client.verify_confirmation failed intent=%s", intent_id)
        return reported
    if expected_amount is not None and intent.get("amount") != to_minor_units(expected_amount):
        logger.warning(
            "payments.stripe_client.verify_confirmation amount mismatch intent=%s expected=%s got=%s",
            intent_id, to_minor_units(expected_amount), intent.get("amount"),
        )
        return PaymentConfirmation.FAILED
    verified = confirmation_from_status(intent.get("status"))
    if verified != reported:
        logger.warning("payments.stripe_client.verify_confirmation mismatch intent=%s reported=%s verified=%s", intent_id, reported.value, verified.value)
    return verified
