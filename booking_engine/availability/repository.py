"""
Lecture des places restantes par créneau (GET availability/{date}).
"""
import logging
from typing import Dict, Optional

from booking_engine.errors import TransportError
from booking_engine.infra.api_client import BookingApiClient, get_api_client

logger = logging.getLogger(__name__)

# module booking_engine.availability.repository
def fetch_availability(date: str, client: Optional[BookingApiClient] = None) -> Dict[str, int]:
    """
    Retourne {créneau: places} pour une date.
    - Lève TransportError si le backend est injoignable ou si la réponse n'est pas exploitable.
    - Ignore les valeurs non entières et borne à 0 les valeurs négatives.
    """
    client = client or get_api_client()
    envelope = client.get(f"availability/{date}")
    body = envelope.body
    raw = body.get("availability")
    if not envelope.success or body.get("success") is False or not isinstance(raw, dict):
        raise TransportError(envelope.error or body.get("error") or "Disponibilités indisponibles", code="availability_unavailable", status_code=envelope.status_code)

    slots: Dict[str, int] = {}
    for slot, seats in raw.items():
        if isinstance(seats, bool):
            continue
        try:
            slots[str(slot)] = max(int(seats), 0)
        except (TypeError, ValueError):
            logger.debug("availability.repository.fetch_availability ignored slot=%s value=%r", slot, seats)
    return slots
