"""
Calcul tarifaire pur (pas de réseau, pas d'état).
"""
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING

from .models import PriceTable, PriceBreakdown, is_guided_slot

if TYPE_CHECKING:
    from booking_engine.wizard.models import Selection

TWO_PLACES = Decimal("0.01")
SEATS_PER_VEHICLE = 6

# module booking_engine.pricing.service
def compute_total(price_table: PriceTable, selection: "Selection") -> PriceBreakdown:
    """
    Calcule le détail du prix pour la sélection courante.
    - adultes: base_price_adult x adult_count ; enfants: child_price x child_count
    - supplément guidé: surcharge x passagers, uniquement sur un créneau guidé
    - attractions: prix unitaire x passagers (pas de distinction adulte/enfant), ids inconnus ignorés
    - aucun arrondi ici: l'arrondi à 2 décimales est fait à l'affichage
    """
    adults = max(int(selection.adult_count or 0), 0)
    children = max(int(selection.child_count or 0), 0)
    passengers = adults + children

    adult_total = price_table.base_price_adult * adults
    child_total = price_table.child_price * children

    guided = is_guided_slot(selection.time_slot)
    guided_tour_total = price_table.guided_tour_surcharge * passengers if guided else Decimal("0")

    attractions_total = Decimal("0")
    for attraction_id in sorted(selection.selected_attraction_ids):
        attraction = price_table.attractions.get(attraction_id)
        if attraction is None:
            continue
        attractions_total += attraction.price * passengers

    return PriceBreakdown(
        adult_total=adult_total,
        child_total=child_total,
        guided_tour_total=guided_tour_total,
        attractions_total=attractions_total,
        grand_total=adult_total + child_total + guided_tour_total + attractions_total,
        passengers=passengers,
        is_guided=guided,
    )

def round_amount(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

def format_amount(amount: Decimal, symbol: str = "€") -> str:
    """Affichage: €122.00"""
    return f"{symbol}{round_amount(amount)}"

def to_minor_units(amount: Decimal) -> int:
    """Montant en centimes pour le prestataire de paiement."""
    return int(round_amount(amount) * 100)

def vehicles_needed(passengers: int) -> int:
    """Nombre de véhicules dépêchés pour le groupe (6 places par véhicule)."""
    if passengers <= 0:
        return 0
    return math.ceil(passengers / SEATS_PER_VEHICLE)
