"""
Commande soumise au backend, réservation créée et issue d'une soumission.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from booking_engine.pricing.models import Attraction, PriceTable, PriceBreakdown
from booking_engine.pricing.service import compute_total, round_amount
from booking_engine.wizard.models import Selection

# Refus liés aux places: on recharge les disponibilités du jour
SEATS_ERROR_MARKERS = ("not enough seats", "available")

def _amount(value) -> float:
    return float(round_amount(value))

class Order(BaseModel):
    """
    Instantané de la sélection + détail du prix + identifiant du paiement confirmé.
    idempotency_key est dérivée du PaymentIntent: deux envois pour un même paiement portent la même clé.
    """
    model_config = ConfigDict(frozen=True)

    selection: Selection
    breakdown: PriceBreakdown
    provider_intent_id: str
    idempotency_key: str
    attractions: Dict[str, Attraction] = {}

    @classmethod
    def build(cls, selection: Selection, price_table: PriceTable, provider_intent_id: str) -> "Order":
        snapshot = selection.model_copy(deep=True)
        attractions = {
            attraction_id: price_table.attractions[attraction_id]
            for attraction_id in snapshot.selected_attraction_ids
            if attraction_id in price_table.attractions
        }
        return cls(
            selection=snapshot,
            breakdown=compute_total(price_table, snapshot),
            provider_intent_id=provider_intent_id,
            idempotency_key=f"booking-{provider_intent_id}",
            attractions=attractions,
        )

    def passengers(self) -> List[Dict[str, str]]:
        """Liste des passagers: le premier porte le nom du contact, adultes puis enfants."""
        sel = self.selection
        types = ["Adult"] * sel.adult_count + ["Child"] * sel.child_count
        return [
            {"name": sel.full_name if i == 0 else f"Passenger {i + 1}", "type": kind}
            for i, kind in enumerate(types)
        ]

    def to_payload(self) -> Dict[str, Any]:
        sel = self.selection
        bd = self.breakdown
        passengers = bd.passengers
        attractions = [
            {
                "id": attraction_id,
                "name": attraction.name,
                "tickets": passengers,
                "price": _amount(attraction.price * passengers),
            }
            for attraction_id, attraction in sorted(self.attractions.items())
        ]
        return {
            "contactInfo": {"name": sel.full_name, "email": sel.email, "phone": sel.phone},
            "selectedDate": sel.date,
            "timeSlot": sel.time_slot,
            "pickupLocation": sel.pickup_location,
            "adultCount": sel.adult_count,
            "childCount": sel.child_count,
            "passengers": self.passengers(),
            "guidedTour": {"type": "Small Group", "price": _amount(bd.guided_tour_total)} if bd.is_guided else None,
            "selectedAttractions": attractions,
            "priceBreakdown": {
                "adultTotal": _amount(bd.adult_total),
                "childTotal": _amount(bd.child_total),
                "guidedTourTotal": _amount(bd.guided_tour_total),
                "attractionsTotal": _amount(bd.attractions_total),
                "grandTotal": _amount(bd.grand_total),
            },
            "totalPrice": _amount(bd.grand_total),
            "paymentIntentId": self.provider_intent_id,
            "idempotencyKey": self.idempotency_key,
        }

class BookingRecord:
    """Réservation créée par le backend; lecture seule ensuite."""
    def __init__(
        self,
        id: str,
        contact: Dict[str, Any],
        email_sent: bool,
        email_error: Optional[str] = None,
        raw: Optional[Dict[str, Any]] = None,
    ):
        self.id = id
        self.contact = contact
        self.email_sent = email_sent
        self.email_error = email_error
        self.raw = raw or {}

    @classmethod
    def from_payload(cls, booking: Dict[str, Any], envelope_body: Optional[Dict[str, Any]] = None) -> "BookingRecord":
        """emailSent / emailError sont lus sur la réservation puis, à défaut, sur l'enveloppe interne."""
        body = envelope_body or {}
        email_sent = booking.get("emailSent", body.get("emailSent"))
        email_error = booking.get("emailError", body.get("emailError"))
        return cls(
            id=str(booking.get("id")),
            contact=booking.get("contactInfo") or {},
            email_sent=bool(email_sent),
            email_error=str(email_error) if email_error else None,
            raw=booking,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "contact": self.contact,
            "email_sent": self.email_sent,
            "email_error": self.email_error,
        }

class SubmissionStatus(str, Enum):
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    AMBIGUOUS = "ambiguous"
    TRANSPORT_FAILED = "transport_failed"

class SubmissionOutcome:
    def __init__(
        self,
        status: SubmissionStatus,
        attempts: int,
        record: Optional[BookingRecord] = None,
        error: Optional[str] = None,
        payment_reference: Optional[str] = None,
        email_warning: Optional[str] = None,
    ):
        self.status = status
        self.attempts = attempts
        self.record = record
        self.error = error
        self.payment_reference = payment_reference
        self.email_warning = email_warning

    @property
    def success(self) -> bool:
        return self.status is SubmissionStatus.CONFIRMED

    @property
    def needs_support(self) -> bool:
        return self.status in (SubmissionStatus.AMBIGUOUS, SubmissionStatus.TRANSPORT_FAILED)

    @property
    def is_seat_rejection(self) -> bool:
        if self.status is not SubmissionStatus.REJECTED:
            return False
        error = (self.error or "").lower()
        return any(marker in error for marker in SEATS_ERROR_MARKERS)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "attempts": self.attempts,
            "booking": self.record.to_dict() if self.record else None,
            "error": self.error,
            "payment_reference": self.payment_reference,
            "email_warning": self.email_warning,
        }
