from decimal import Decimal

from booking_engine.pricing.models import DEFAULT_PRICING, PriceTable, Attraction
from booking_engine.pricing.service import (
    compute_total,
    format_amount,
    round_amount,
    to_minor_units,
    vehicles_needed,
)
from booking_engine.wizard.models import Selection

def _table(**kw):
    base = dict(
        base_price_adult=Decimal("25"),
        guided_tour_surcharge=Decimal("5"),
        attractions={"pena-palace-full": Attraction(name="Pena Palace & Park", price=Decimal("14"))},
    )
    base.update(kw)
    return PriceTable(**base)

def test_compute_total_guided_slot_with_attraction():
    # 2 adultes, 1 enfant, créneau guidé 10:00, Pena Palace (14€), enfant à 0.6 x 25
    selection = Selection(adult_count=2, child_count=1, time_slot="10:00", selected_attraction_ids={"pena-palace-full"})

    bd = compute_total(_table(), selection)

    assert bd.adult_total == Decimal("50")
    assert bd.child_total == Decimal("15")
    assert bd.guided_tour_total == Decimal("15")
    assert bd.attractions_total == Decimal("42")
    assert bd.grand_total == Decimal("122")
    assert bd.passengers == 3
    assert bd.is_guided is True

def test_compute_total_is_sum_of_components_and_ignores_contact_fields():
    selection = Selection(adult_count=3, child_count=2, time_slot="14:00", selected_attraction_ids={"pena-palace-full"})
    table = _table(base_price_child=Decimal("12.50"))

    first = compute_total(table, selection)
    renamed = selection.model_copy(update={"full_name": "Autre Nom", "email": "x@example.com"})
    second = compute_total(table, renamed)

    assert first == second
    assert first.grand_total == first.adult_total + first.child_total + first.guided_tour_total + first.attractions_total

def test_guided_surcharge_only_on_guided_slots():
    for slot, expected in (("10:00", Decimal("10")), ("14:00", Decimal("10")), ("11:00", Decimal("0")), ("9:00", Decimal("0"))):
        bd = compute_total(_table(), Selection(adult_count=2, time_slot=slot, selected_attraction_ids={"pena-palace-full"}))
        assert bd.guided_tour_total == expected
        assert bd.attractions_total == Decimal("28")

def test_child_price_fallback_is_explicit():
    table = _table()
    assert table.child_price_is_fallback is True
    assert table.child_price == Decimal("15.0")

    explicit = _table(base_price_child=Decimal("10"))
    assert explicit.child_price_is_fallback is False
    assert compute_total(explicit, Selection(adult_count=0, child_count=2)).child_total == Decimal("20")

def test_unknown_attraction_is_ignored():
    bd = compute_total(_table(), Selection(adult_count=1, selected_attraction_ids={"unknown"}))
    assert bd.attractions_total == Decimal("0")
    assert bd.grand_total == Decimal("25")

def test_no_rounding_during_accumulation():
    table = _table(base_price_adult=Decimal("19.99"), attractions={})
    bd = compute_total(table, Selection(adult_count=3, child_count=1))
    # 3 x 19.99 + 0.6 x 19.99 = 71.964 conservé tel quel, arrondi seulement à l'affichage
    assert bd.grand_total == Decimal("71.964")
    assert round_amount(bd.grand_total) == Decimal("71.96")
    assert format_amount(bd.grand_total) == "€71.96"

def test_format_and_minor_units():
    assert format_amount(Decimal("122")) == "€122.00"
    assert to_minor_units(Decimal("12.345")) == 1235
    assert to_minor_units(Decimal("122")) == 12200

def test_vehicles_needed():
    assert vehicles_needed(0) == 0
    assert vehicles_needed(1) == 1
    assert vehicles_needed(6) == 1
    assert vehicles_needed(7) == 2

def test_price_table_from_payload_merges_defaults():
    table = PriceTable.from_payload({
        "basePrice": 30,
        "attractions": {
            "pena-palace-full": {"price": 16},
            "cabo-da-roca": {"name": "Cabo da Roca", "price": "7.5"},
            "broken": "not-a-dict",
        },
    })

    assert table.base_price_adult == Decimal("30")
    assert table.child_price == Decimal("18.0")
    assert table.guided_tour_surcharge == DEFAULT_PRICING.guided_tour_surcharge
    assert table.attractions["pena-palace-full"].price == Decimal("16")
    assert table.attractions["pena-palace-full"].name == "Pena Palace & Park"
    assert table.attractions["cabo-da-roca"].price == Decimal("7.5")
    assert "broken" not in table.attractions
    assert "moorish-castle" in table.attractions

def test_price_table_from_payload_invalid_values_keep_defaults():
    table = PriceTable.from_payload({"basePriceAdult": "abc", "guidedTourSurcharge": None})
    assert table.base_price_adult == DEFAULT_PRICING.base_price_adult
    assert table.guided_tour_surcharge == DEFAULT_PRICING.guided_tour_surcharge
    assert PriceTable.from_payload(None) == DEFAULT_PRICING
