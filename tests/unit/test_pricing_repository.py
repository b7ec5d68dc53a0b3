from decimal import Decimal

from booking_engine.errors import TransportError
from booking_engine.infra.api_client import ApiEnvelope
from booking_engine.pricing.models import DEFAULT_PRICING
from booking_engine.pricing.repository import load_price_table

def test_load_price_table_merges_backend_pricing(fake_api):
    fake_api.routes[("GET", "pricing")] = ApiEnvelope(True, data={"success": True, "pricing": {"basePriceAdult": 28, "childPrice": 14}})

    table = load_price_table()

    assert table.base_price_adult == Decimal("28")
    assert table.child_price == Decimal("14")
    assert table.attractions == DEFAULT_PRICING.attractions

def test_load_price_table_without_stored_pricing_uses_defaults(fake_api):
    fake_api.routes[("GET", "pricing")] = ApiEnvelope(True, data={"success": True, "pricing": None})
    assert load_price_table() == DEFAULT_PRICING

def test_load_price_table_transport_error_falls_back_to_last_loaded(fake_api):
    fake_api.routes[("GET", "pricing")] = [
        ApiEnvelope(True, data={"pricing": {"basePriceAdult": 31}}),
        TransportError("Erreur réseau", code="network"),
    ]

    first = load_price_table()
    second = load_price_table()

    assert first.base_price_adult == Decimal("31")
    assert second == first

def test_load_price_table_transport_error_without_history_uses_defaults(fake_api):
    fake_api.routes[("GET", "pricing")] = TransportError("Erreur réseau", code="network")
    assert load_price_table() == DEFAULT_PRICING
