"""
Module 'checkout': exposition HTTP du tunnel d'achat (une session = un WizardController).
"""

from .sessions import CheckoutSession, CheckoutSessionStore
from .views import router

__all__ = [
    "CheckoutSession",
    "CheckoutSessionStore",
    "router",
]
