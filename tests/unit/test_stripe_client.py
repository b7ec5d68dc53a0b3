from decimal import Decimal

import pytest
import stripe

from booking_engine.payments import stripe_client
from booking_engine.payments.models import PaymentConfirmation

@pytest.mark.parametrize(
    "status, expected",
    [
        ("succeeded", PaymentConfirmation.SUCCEEDED),
        ("requires_action", PaymentConfirmation.REQUIRES_ACTION),
        ("processing", PaymentConfirmation.REQUIRES_ACTION),
        ("requires_payment_method", PaymentConfirmation.FAILED),
        ("canceled", PaymentConfirmation.FAILED),
        (None, PaymentConfirmation.FAILED),
    ],
)
def test_confirmation_from_status(status, expected):
    assert stripe_client.confirmation_from_status(status) is expected

def test_require_stripe_without_key_returns_none():
    assert stripe_client.require_stripe() is None
    with pytest.raises(RuntimeError):
        stripe_client.retrieve_payment_intent("pi_1")

def test_verify_confirmation_without_key_keeps_reported():
    assert stripe_client.verify_confirmation("pi_1", PaymentConfirmation.SUCCEEDED) is PaymentConfirmation.SUCCEEDED

def test_verify_confirmation_uses_provider_status(monkeypatch):
    monkeypatch.setattr(stripe_client, "STRIPE_SECRET_KEY", "sk_test_123")
    monkeypatch.setattr(stripe_client, "retrieve_payment_intent", lambda intent_id: {"id": intent_id, "status": "requires_payment_method"})

    assert stripe_client.verify_confirmation("pi_1", PaymentConfirmation.SUCCEEDED) is PaymentConfirmation.FAILED

def test_verify_confirmation_stripe_error_keeps_reported(monkeypatch):
    monkeypatch.setattr(stripe_client, "STRIPE_SECRET_KEY", "sk_test_123")

    def boom(intent_id):
        raise stripe.StripeError("API indisponible")

    monkeypatch.setattr(stripe_client, "retrieve_payment_intent", boom)
    assert stripe_client.verify_confirmation("pi_1", PaymentConfirmation.SUCCEEDED) is PaymentConfirmation.SUCCEEDED

def test_verify_confirmation_amount_mismatch_fails(monkeypatch):
    monkeypatch.setattr(stripe_client, "STRIPE_SECRET_KEY", "sk_test_123")
    monkeypatch.setattr(
        stripe_client,
        "retrieve_payment_intent",
        lambda intent_id: {"id": intent_id, "status": "succeeded", "amount": 8000},
    )

    assert stripe_client.verify_confirmation("pi_1", PaymentConfirmation.SUCCEEDED, Decimal("80.00")) is PaymentConfirmation.SUCCEEDED
    assert stripe_client.verify_confirmation("pi_1", PaymentConfirmation.SUCCEEDED, Decimal("122.00")) is PaymentConfirmation.FAILED
