import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from booking_engine.bookings.models import SubmissionStatus
from booking_engine.config import DEFAULT_CURRENCY, STRIPE_PUBLIC_KEY
from booking_engine.payments import stripe_client
from booking_engine.pricing import PICKUP_LOCATIONS, TIME_SLOTS
from booking_engine.pricing import repository as pricing_repo
from booking_engine.settings import repository as settings_repo
from .models import PaymentResult, SelectionUpdate
from .sessions import CheckoutSession, CheckoutSessionStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout API"])

OUTCOME_STATUS_CODES = {
    SubmissionStatus.CONFIRMED: 200,
    SubmissionStatus.REJECTED: 409,
    SubmissionStatus.AMBIGUOUS: 502,
    SubmissionStatus.TRANSPORT_FAILED: 502,
}

def get_store(request: Request) -> CheckoutSessionStore:
    store = getattr(request.app.state, "checkout_sessions", None)
    if store is None:
        store = CheckoutSessionStore()
        request.app.state.checkout_sessions = store
    return store

def get_session(request: Request, session_id: str) -> CheckoutSession:
    session = get_store(request).get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session d'achat introuvable")
    return session

# module booking_engine.checkout.views
@router.get("/catalog")
async def read_catalog():
    """
    Données statiques du tunnel: devise, clé publique Stripe, créneaux (avec visite guidée) et lieux de prise en charge.
    """
    return {
        "currency": DEFAULT_CURRENCY,
        "stripe_public_key": STRIPE_PUBLIC_KEY,
        "time_slots": [slot.model_dump() for slot in TIME_SLOTS],
        "pickup_locations": list(PICKUP_LOCATIONS),
    }

@router.post("/sessions", status_code=201)
async def create_checkout_session(request: Request):
    """
    Ouvre une session d'achat.
    - Charge une fois la configuration (grille de prix + interrupteur de vente), puis l'injecte dans le tunnel
    - Réponse: {session_id, state, events}
    """
    config = settings_repo.load_session_config()
    session = get_store(request).create(config)
    return session.to_dict()

@router.get("/sessions/{session_id}")
async def read_checkout_session(request: Request, session_id: str):
    return get_session(request, session_id).to_dict()

@router.delete("/sessions/{session_id}", status_code=204)
async def delete_checkout_session(request: Request, session_id: str):
    if not get_store(request).delete(session_id):
        raise HTTPException(status_code=404, detail="Session d'achat introuvable")

@router.patch("/sessions/{session_id}/selection")
async def update_selection(request: Request, session_id: str, body: SelectionUpdate):
    """
    Met à jour le brouillon (champs fournis uniquement) et renvoie le total recalculé.
    - 409 si la sélection est verrouillée (étape paiement, soumission en cours, commande finalisée)
    """
    session = get_session(request, session_id)
    session.controller.update_selection(**body.model_dump(exclude_none=True))
    return session.to_dict()

@router.post("/sessions/{session_id}/attractions/{attraction_id}/toggle")
async def toggle_attraction(request: Request, session_id: str, attraction_id: str):
    session = get_session(request, session_id)
    session.controller.toggle_attraction(attraction_id)
    return session.to_dict()

@router.post("/sessions/{session_id}/next")
async def next_step(request: Request, session_id: str):
    session = get_session(request, session_id)
    moved = session.controller.next()
    return {"moved": moved, **session.to_dict()}

@router.post("/sessions/{session_id}/back")
async def previous_step(request: Request, session_id: str):
    session = get_session(request, session_id)
    moved = session.controller.back()
    return {"moved": moved, **session.to_dict()}

@router.get("/sessions/{session_id}/availability/{date}")
async def read_availability(request: Request, session_id: str, date: str):
    """
    Places restantes par créneau pour une date (chargées une fois par date).
    Un échec de chargement n'est pas bloquant: les créneaux non vérifiés gardent le plafond par défaut.
    """
    cache = get_session(request, session_id).controller.availability
    slots = cache.ensure(date)
    return {
        "date": date,
        "slots": {slot: {"seats": seats, "status": cache.status(date, slot)} for slot, seats in slots.items()},
        "default_ceiling": cache.default_ceiling,
        "error": cache.last_error,
    }

@router.post("/sessions/{session_id}/payment/retry")
async def retry_payment(request: Request, session_id: str):
    session = get_session(request, session_id)
    session.controller.retry_payment()
    return session.to_dict()

@router.post("/sessions/{session_id}/payment/confirm")
async def confirm_payment(request: Request, session_id: str, body: PaymentResult):
    """
    Reçoit l'issue de la confirmation Stripe côté client.
    - L'issue annoncée est revérifiée auprès de Stripe si une clé secrète est configurée
    - succeeded: la réservation est soumise (retry borné sur erreur de transport)
    - Codes: 200 confirmé ou en attente, 409 refus, 502 issue ambiguë (contacter le support)
    """
    session = get_session(request, session_id)
    authorization = session.controller.payments.authorization
    expected_amount = authorization.amount if authorization is not None else None
    confirmation = stripe_client.verify_confirmation(body.payment_intent_id, body.status, expected_amount)
    outcome = session.controller.handle_payment_result(confirmation, body.payment_intent_id, body.error)
    status_code = OUTCOME_STATUS_CODES[outcome.status] if outcome else 200
    if outcome is not None and outcome.needs_support:
        logger.error("checkout.confirm_payment needs support session=%s intent=%s", session_id, body.payment_intent_id)
    return JSONResponse(status_code=status_code, content=session.to_dict())

@router.post("/sessions/{session_id}/content-updated")
async def content_updated(request: Request, session_id: str):
    """Recharge la grille de prix et recalcule le total (l'autorisation périmée est recréée à l'étape 5)."""
    session = get_session(request, session_id)
    session.controller.notify_content_updated(pricing_repo.load_price_table())
    return session.to_dict()
