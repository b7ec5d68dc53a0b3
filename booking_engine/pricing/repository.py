"""
Chargement de la grille de prix depuis le backend (GET pricing).
- Fusionne la réponse dans la grille par défaut.
- En cas d'échec: dernière grille chargée avec succès, sinon grille par défaut.
"""
import logging
from typing import Optional

from booking_engine.errors import TransportError
from booking_engine.infra.api_client import BookingApiClient, get_api_client
from .models import PriceTable, DEFAULT_PRICING

logger = logging.getLogger(__name__)

_last_loaded: Optional[PriceTable] = None

def load_price_table(client: Optional[BookingApiClient] = None) -> PriceTable:
    global _last_loaded
    client = client or get_api_client()
    try:
        envelope = client.get("pricing")
    except TransportError as e:
        logger.warning("pricing.repository.load_price_table fallback (%s): %s", e.code, e.message)
        return _last_loaded or DEFAULT_PRICING

    pricing = envelope.body.get("pricing") if envelope.success else None
    if not isinstance(pricing, dict):
        logger.info("pricing.repository.load_price_table no pricing stored, using defaults")
        return _last_loaded or DEFAULT_PRICING

    table = PriceTable.from_payload(pricing)
    _last_loaded = table
    logger.info("pricing.repository.load_price_table loaded attractions=%s", len(table.attractions))
    return table
