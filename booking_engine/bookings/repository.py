"""
Écriture des réservations (POST bookings).
"""
from typing import Any, Dict, Optional

from booking_engine.infra.api_client import ApiEnvelope, BookingApiClient, get_api_client

def post_booking(
    payload: Dict[str, Any],
    *,
    idempotency_key: str,
    client: Optional[BookingApiClient] = None,
) -> ApiEnvelope:
    """
    Envoie la commande au backend. La clé d'idempotence est transmise dans le corps et en en-tête.
    Lève TransportError si l'envoi n'a pas abouti (réseau, 5xx, non-JSON).
    """
    client = client or get_api_client()
    return client.post("bookings", payload, headers={"Idempotency-Key": idempotency_key})
