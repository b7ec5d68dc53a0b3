"""
Module 'payments' (feature-first): point d'entrée public.
Réunit l'autorisation de paiement (PaymentIntent), son gestionnaire d'états et l'adaptateur Stripe.
"""

from .models import PaymentAuthorization, PaymentState, PaymentConfirmation
from .repository import create_payment_intent
from .stripe_client import require_stripe, retrieve_payment_intent, confirmation_from_status, verify_confirmation
from .intent_manager import PaymentIntentManager

__all__ = [
    # models
    "PaymentAuthorization",
    "PaymentState",
    "PaymentConfirmation",
    # repository
    "create_payment_intent",
    # stripe
    "require_stripe",
    "retrieve_payment_intent",
    "confirmation_from_status",
    "verify_confirmation",
    # services
    "PaymentIntentManager",
]
