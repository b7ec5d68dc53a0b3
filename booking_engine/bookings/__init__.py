from .models import Order, BookingRecord, SubmissionOutcome, SubmissionStatus
from .notifications import EmailWarning, classify_email_error
from .repository import post_booking
from .service import BookingSubmitter, evaluate_envelope

__all__ = [
    # models
    "Order",
    "BookingRecord",
    "SubmissionOutcome",
    "SubmissionStatus",
    # notifications
    "EmailWarning",
    "classify_email_error",
    # repository / service
    "post_booking",
    "BookingSubmitter",
    "evaluate_envelope",
]
