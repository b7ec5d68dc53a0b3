"""
Modèles tarifaires: grille de prix, catalogue des créneaux et points de prise en charge.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

# Tarif enfant par défaut quand la grille ne le fournit pas: 60% du tarif adulte
CHILD_PRICE_RATIO = Decimal("0.6")

GUIDED_SLOTS = frozenset({"10:00", "14:00"})

class TimeSlot(BaseModel):
    value: str
    label: str
    is_guided: bool = False

TIME_SLOTS: List[TimeSlot] = [
    TimeSlot(value="9:00", label="9:00 AM"),
    TimeSlot(value="10:00", label="10:00 AM", is_guided=True),
    TimeSlot(value="11:00", label="11:00 AM"),
    TimeSlot(value="12:00", label="12:00 PM"),
    TimeSlot(value="13:00", label="1:00 PM"),
    TimeSlot(value="14:00", label="2:00 PM", is_guided=True),
    TimeSlot(value="15:00", label="3:00 PM"),
    TimeSlot(value="16:00", label="4:00 PM"),
]

PICKUP_LOCATIONS = [
    "sintra-train-station",
    "sintra-town-center",
    "pena-palace",
    "quinta-regaleira",
    "moorish-castle",
    "monserrate-palace",
    "sintra-palace",
    "other",
]

def is_guided_slot(time_slot: Optional[str]) -> bool:
    return (time_slot or "") in GUIDED_SLOTS

def to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """
    Convertit str|int|float en Decimal via str() (évite les artefacts binaires des floats).
    Retourne default si la conversion échoue.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default

class Attraction(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    price: Decimal

class PriceTable(BaseModel):
    """
    Grille de prix d'une session. Immuable pendant un achat, remplacée uniquement par un nouveau chargement.
    """
    model_config = ConfigDict(frozen=True)

    base_price_adult: Decimal = Decimal("25")
    base_price_child: Optional[Decimal] = None
    guided_tour_surcharge: Decimal = Decimal("5")
    attractions: Dict[str, Attraction] = {}

    @property
    def child_price_is_fallback(self) -> bool:
        return self.base_price_child is None

    @property
    def child_price(self) -> Decimal:
        if self.base_price_child is not None:
            return self.base_price_child
        return self.base_price_adult * CHILD_PRICE_RATIO

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "PriceTable":
        """
        Fusionne une grille reçue du backend dans la grille par défaut.
        - Clés acceptées: basePriceAdult|basePrice, basePriceChild|childPrice, guidedTourSurcharge, attractions
        - Chaque clé absente ou invalide garde la valeur par défaut
        - attractions: fusion par id ({id: {name, price}})
        """
        payload = payload if isinstance(payload, dict) else {}
        default = DEFAULT_PRICING

        adult_raw = payload.get("basePriceAdult", payload.get("basePrice"))
        child_raw = payload.get("basePriceChild", payload.get("childPrice"))
        attractions = dict(default.attractions)
        for attraction_id, entry in (payload.get("attractions") or {}).items():
            if not isinstance(entry, dict):
                continue
            current = attractions.get(attraction_id)
            price = to_decimal(entry.get("price"), current.price if current else None)
            if price is None:
                continue
            name = entry.get("name") or (current.name if current else attraction_id)
            attractions[str(attraction_id)] = Attraction(name=name, price=price)

        return cls(
            base_price_adult=to_decimal(adult_raw, default.base_price_adult),
            base_price_child=to_decimal(child_raw, default.base_price_child),
            guided_tour_surcharge=to_decimal(payload.get("guidedTourSurcharge"), default.guided_tour_surcharge),
            attractions=attractions,
        )

DEFAULT_PRICING = PriceTable(
    base_price_adult=Decimal("25"),
    guided_tour_surcharge=Decimal("5"),
    attractions={
        "pena-palace-park": Attraction(name="Pena Palace Park Only", price=Decimal("8")),
        "pena-palace-full": Attraction(name="Pena Palace & Park", price=Decimal("14")),
        "quinta-regaleira": Attraction(name="Quinta da Regaleira", price=Decimal("12")),
        "moorish-castle": Attraction(name="Moorish Castle", price=Decimal("10")),
        "monserrate-palace": Attraction(name="Monserrate Palace", price=Decimal("10")),
        "sintra-palace": Attraction(name="Sintra National Palace", price=Decimal("10")),
    },
)

class PriceBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    adult_total: Decimal
    child_total: Decimal
    guided_tour_total: Decimal
    attractions_total: Decimal
    grand_total: Decimal
    passengers: int
    is_guided: bool
