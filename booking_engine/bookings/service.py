"""
Soumission d'une commande après paiement confirmé.
- retry borné uniquement sur erreur de transport (même clé d'idempotence à chaque tentative)
- refus bien formé => terminal, pas de retry
- enveloppe interne incomplète => issue ambiguë (paiement débité, réservation non confirmée)
"""
import logging
import time
from typing import Callable, Optional

from booking_engine.config import BOOKING_MAX_ATTEMPTS, BOOKING_RETRY_DELAY_SECONDS
from booking_engine.errors import SUPPORT_MESSAGE, TransportError
from booking_engine.infra.api_client import ApiEnvelope
from .models import BookingRecord, Order, SubmissionOutcome, SubmissionStatus
from .notifications import classify_email_error
from .repository import post_booking

logger = logging.getLogger(__name__)

def _support_message(order: Order) -> str:
    return f"Paiement reçu mais réservation non confirmée. {SUPPORT_MESSAGE}: {order.provider_intent_id}"

def evaluate_envelope(envelope: ApiEnvelope, order: Order, attempts: int) -> SubmissionOutcome:
    """
    Lecture stricte de l'enveloppe imbriquée:
    - externe en échec => refus
    - interne success=False => refus avec l'erreur interne
    - interne success absent/non True, ou réservation sans id => ambiguë
    - sinon confirmée (+ avertissement email éventuel)
    """
    if not envelope.success:
        return SubmissionOutcome(
            SubmissionStatus.REJECTED,
            attempts,
            error=envelope.error or "Réservation refusée",
        )

    inner = envelope.body
    inner_success = inner.get("success")
    if inner_success is False:
        return SubmissionOutcome(
            SubmissionStatus.REJECTED,
            attempts,
            error=inner.get("error") or "Réservation refusée",
        )

    booking = inner.get("booking")
    if inner_success is not True or not isinstance(booking, dict) or not booking.get("id"):
        logger.error(
            "bookings.service.evaluate_envelope ambiguous outcome intent=%s body_keys=%s",
            order.provider_intent_id, sorted(inner.keys()),
        )
        return SubmissionOutcome(
            SubmissionStatus.AMBIGUOUS,
            attempts,
            error=_support_message(order),
            payment_reference=order.provider_intent_id,
        )

    record = BookingRecord.from_payload(booking, inner)
    email_warning = None
    if not record.email_sent:
        _, email_warning = classify_email_error(record.email_error)
    return SubmissionOutcome(
        SubmissionStatus.CONFIRMED,
        attempts,
        record=record,
        email_warning=email_warning,
    )

class BookingSubmitter:
    def __init__(
        self,
        poster: Callable[..., ApiEnvelope] = post_booking,
        max_attempts: int = BOOKING_MAX_ATTEMPTS,
        retry_delay: float = BOOKING_RETRY_DELAY_SECONDS,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.poster = poster
        self.max_attempts = max(1, int(max_attempts))
        self.retry_delay = retry_delay
        self.sleep = sleep or time.sleep

    def submit(self, order: Order) -> SubmissionOutcome:
        payload = order.to_payload()
        last_error: Optional[TransportError] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                envelope = self.poster(payload, idempotency_key=order.idempotency_key)
            except TransportError as e:
                last_error = e
                logger.warning(
                    "bookings.service.submit transport error attempt=%s/%s code=%s",
                    attempt, self.max_attempts, e.code,
                )
                if attempt < self.max_attempts:
                    self.sleep(self.retry_delay)
                continue

            outcome = evaluate_envelope(envelope, order, attempt)
            if outcome.success:
                logger.info("bookings.service.submit confirmed booking=%s attempts=%s", outcome.record.id, attempt)
            else:
                logger.warning("bookings.service.submit %s error=%s", outcome.status.value, outcome.error)
            return outcome

        detail = last_error.message if last_error else "Erreur réseau"
        logger.error(
            "bookings.service.submit exhausted attempts=%s intent=%s",
            self.max_attempts, order.provider_intent_id,
        )
        return SubmissionOutcome(
            SubmissionStatus.TRANSPORT_FAILED,
            self.max_attempts,
            error=f"{detail}. {_support_message(order)}",
            payment_reference=order.provider_intent_id,
        )
