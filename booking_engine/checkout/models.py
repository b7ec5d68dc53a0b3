from typing import List, Optional

from pydantic import BaseModel, Field

from booking_engine.payments.models import PaymentConfirmation

class SelectionUpdate(BaseModel):
    """Corps PATCH /selection: seuls les champs fournis sont appliqués."""
    date: Optional[str] = None
    time_slot: Optional[str] = None
    pickup_location: Optional[str] = None
    adult_count: Optional[int] = Field(default=None, ge=0)
    child_count: Optional[int] = Field(default=None, ge=0)
    selected_attraction_ids: Optional[List[str]] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    confirm_email: Optional[str] = None
    phone_prefix: Optional[str] = None
    phone_number: Optional[str] = None

class PaymentResult(BaseModel):
    """Issue de la confirmation Stripe côté client."""
    status: PaymentConfirmation
    payment_intent_id: str
    error: Optional[str] = None
