"""
Chargement des réglages de session: interrupteur de vente et grille de prix.
"""
import logging
from typing import Optional

from booking_engine.errors import TransportError
from booking_engine.infra.api_client import BookingApiClient, get_api_client
from booking_engine.pricing.repository import load_price_table
from .models import SessionConfig

logger = logging.getLogger(__name__)

# module booking_engine.settings.repository
def fetch_ticket_purchases_enabled(client: Optional[BookingApiClient] = None) -> bool:
    """
    GET settings/ticket-purchases-enabled -> {enabled: bool}.
    Fail-open: champ absent, refus ou backend injoignable => True.
    """
    client = client or get_api_client()
    try:
        envelope = client.get("settings/ticket-purchases-enabled")
    except TransportError as e:
        logger.warning("settings.repository.fetch_ticket_purchases_enabled fail-open (%s)", e.code)
        return True
    enabled = envelope.body.get("enabled") if envelope.success else None
    if not isinstance(enabled, bool):
        return True
    return enabled

def load_session_config(client: Optional[BookingApiClient] = None) -> SessionConfig:
    client = client or get_api_client()
    return SessionConfig(
        price_table=load_price_table(client),
        purchases_enabled=fetch_ticket_purchases_enabled(client),
    )
