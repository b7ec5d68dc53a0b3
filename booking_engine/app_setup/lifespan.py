"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Crée le registre des sessions d'achat (app.state.checkout_sessions).
- Journalise la configuration effective du backend de réservation.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from booking_engine.checkout.sessions import CheckoutSessionStore
from booking_engine.config import BOOKING_API_BASE_URL, STRIPE_SECRET_KEY

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")
    if getattr(app.state, "checkout_sessions", None) is None:
        app.state.checkout_sessions = CheckoutSessionStore()
    if not BOOKING_API_BASE_URL:
        logger.warning("Booking backend not configured (SUPABASE_URL / BOOKING_API_BASE_URL missing)")
    else:
        logger.info("Booking backend: %s", BOOKING_API_BASE_URL)
    if not STRIPE_SECRET_KEY:
        logger.info("Stripe verification disabled (STRIPE_SECRET_KEY missing)")

    yield

    logger.info("Checkout sessions closed: %s", len(app.state.checkout_sessions))
