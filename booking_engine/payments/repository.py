"""
Création d'une autorisation de paiement via le backend (POST create-payment-intent).
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from booking_engine.config import DEFAULT_CURRENCY
from booking_engine.errors import RejectionError
from booking_engine.infra.api_client import BookingApiClient, get_api_client
from booking_engine.pricing.service import round_amount
from .models import PaymentAuthorization

logger = logging.getLogger(__name__)

# module booking_engine.payments.repository
def create_payment_intent(
    *,
    amount: Decimal,
    currency: str = DEFAULT_CURRENCY,
    metadata: Optional[Dict[str, Any]] = None,
    client: Optional[BookingApiClient] = None,
) -> PaymentAuthorization:
    """
    Demande au backend un PaymentIntent pour le montant (en euros, le backend convertit en centimes).
    - Réponse attendue: {success, clientSecret, paymentIntentId} (ou imbriqué sous "data")
    - Lève TransportError (via le client) ou RejectionError si la réponse est un refus / incomplète
    """
    client = client or get_api_client()
    payload = {
        "amount": float(round_amount(amount)),
        "currency": currency.lower(),
        "metadata": metadata or {},
    }
    envelope = client.post("create-payment-intent", payload)
    body = envelope.body
    if not envelope.success or body.get("success") is False:
        raise RejectionError(envelope.error or body.get("error") or "Échec de création du paiement", code="payment_intent_rejected", status_code=envelope.status_code)

    inner = body.get("data") if isinstance(body.get("data"), dict) else body
    client_secret = inner.get("clientSecret")
    intent_id = inner.get("paymentIntentId")
    if not client_secret or not intent_id:
        raise RejectionError("Réponse de paiement incomplète", code="payment_intent_incomplete", status_code=envelope.status_code)

    logger.info("payments.repository.create_payment_intent created intent=%s amount=%s", intent_id, payload["amount"])
    return PaymentAuthorization(client_secret=client_secret, provider_intent_id=intent_id, amount=amount)
