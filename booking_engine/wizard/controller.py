"""
Tunnel d'achat en cinq étapes pour une session.

Ordre imposé:
- l'autorisation de paiement n'est créée qu'à l'entrée de l'étape 5, pour le total courant
- la réservation n'est soumise qu'après confirmation du paiement
- une issue ambiguë ou un échec de transport épuisé n'est jamais resoumis

Les observateurs s'abonnent via subscribe(callback); callback(event, data).
"""
import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from booking_engine.availability.cache import AvailabilityCache
from booking_engine.bookings.models import Order, SubmissionOutcome, SubmissionStatus
from booking_engine.bookings.service import BookingSubmitter
from booking_engine.errors import WizardError
from booking_engine.payments.intent_manager import PaymentIntentManager
from booking_engine.payments.models import PaymentConfirmation
from booking_engine.pricing.models import PriceBreakdown, PriceTable
from booking_engine.pricing.service import compute_total, format_amount, round_amount, vehicles_needed
from booking_engine.settings.models import SessionConfig
from .models import Selection, WizardStep
from .validators import validate_step

logger = logging.getLogger(__name__)

Observer = Callable[[str, Dict[str, Any]], None]

OUTCOME_EVENTS = {
    SubmissionStatus.CONFIRMED: "booking_confirmed",
    SubmissionStatus.REJECTED: "booking_rejected",
    SubmissionStatus.AMBIGUOUS: "booking_ambiguous",
    SubmissionStatus.TRANSPORT_FAILED: "booking_ambiguous",
}

def breakdown_to_dict(breakdown: PriceBreakdown) -> Dict[str, Any]:
    return {
        "adult_total": str(round_amount(breakdown.adult_total)),
        "child_total": str(round_amount(breakdown.child_total)),
        "guided_tour_total": str(round_amount(breakdown.guided_tour_total)),
        "attractions_total": str(round_amount(breakdown.attractions_total)),
        "grand_total": str(round_amount(breakdown.grand_total)),
        "display_total": format_amount(breakdown.grand_total),
        "passengers": breakdown.passengers,
        "vehicles": vehicles_needed(breakdown.passengers),
        "is_guided": breakdown.is_guided,
    }

class WizardController:
    def __init__(
        self,
        config: SessionConfig,
        availability: Optional[AvailabilityCache] = None,
        payments: Optional[PaymentIntentManager] = None,
        submitter: Optional[BookingSubmitter] = None,
    ):
        self.config = config
        self.availability = availability or AvailabilityCache()
        self.payments = payments or PaymentIntentManager()
        self.submitter = submitter or BookingSubmitter()
        self.selection = Selection()
        self.step = WizardStep.DATE_TIME
        self.step_errors: List[str] = []
        self.submitting = False
        self.outcome: Optional[SubmissionOutcome] = None
        self.payment_notice: Optional[str] = None
        self._observers: List[Observer] = []

    # --- observateurs ---
    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Enregistre un observateur; retourne la fonction de désabonnement."""
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _emit(self, event: str, **data: Any) -> None:
        for callback in list(self._observers):
            try:
                callback(event, data)
            except Exception:
                logger.exception("wizard.controller._emit observer failed event=%s", event)

    # --- état dérivé ---
    def breakdown(self) -> PriceBreakdown:
        return compute_total(self.config.price_table, self.selection)

    def payable_amount(self) -> Decimal:
        return round_amount(self.breakdown().grand_total)

    @property
    def is_closed(self) -> bool:
        """Commande finalisée (confirmée) ou bloquée en attente du support."""
        return self.outcome is not None and (self.outcome.success or self.outcome.needs_support)

    def can_proceed(self) -> bool:
        if self.step is WizardStep.PAYMENT:
            return False
        return not validate_step(self.step, self.selection, self.config, self.availability)

    def can_go_back(self) -> bool:
        return self.step is not WizardStep.DATE_TIME and not self.submitting and not self.is_closed

    def _ensure_editable(self) -> None:
        if self.submitting:
            raise WizardError("Soumission en cours, veuillez patienter", code="submission_in_progress")
        if self.is_closed:
            raise WizardError("Cette commande est déjà finalisée", code="checkout_closed")

    # --- sélection ---
    def update_selection(self, **changes: Any) -> Selection:
        """
        Applique des modifications au brouillon.
        Refusé pendant une soumission, après finalisation, et à l'étape paiement (le total y est figé).
        """
        self._ensure_editable()
        if self.step is WizardStep.PAYMENT:
            raise WizardError("Revenez à l'étape précédente pour modifier la sélection", code="selection_locked")
        unknown = set(changes) - set(Selection.model_fields)
        if unknown:
            raise WizardError(f"Champs inconnus: {', '.join(sorted(unknown))}", code="unknown_field")
        if "selected_attraction_ids" in changes:
            changes["selected_attraction_ids"] = self._check_attractions(changes["selected_attraction_ids"])

        previous_date = self.selection.date
        try:
            selection = Selection.model_validate({**self.selection.model_dump(), **changes})
        except ValidationError as e:
            raise WizardError(f"Sélection invalide: {e.errors()[0].get('msg')}", code="invalid_selection")
        self.selection = selection

        if selection.date and selection.date != previous_date:
            self.availability.ensure(selection.date)
        self._emit("selection_changed", selection=selection.to_dict(), breakdown=breakdown_to_dict(self.breakdown()))
        return selection

    def select_date(self, date: str) -> Dict[str, int]:
        self.update_selection(date=date)
        return self.availability.snapshot().get(date, {})

    def _check_attractions(self, attraction_ids) -> set:
        ids = set(attraction_ids or [])
        if ids and not self.config.attractions_enabled:
            raise WizardError("Les billets d'attraction ne sont pas disponibles en ligne", code="attractions_disabled")
        unknown = ids - set(self.config.price_table.attractions)
        if unknown:
            raise WizardError(f"Attraction inconnue: {', '.join(sorted(unknown))}", code="unknown_attraction")
        return ids

    def toggle_attraction(self, attraction_id: str) -> Selection:
        ids = set(self.selection.selected_attraction_ids)
        if attraction_id in ids:
            ids.discard(attraction_id)
        else:
            ids.add(attraction_id)
        return self.update_selection(selected_attraction_ids=ids)

    # --- navigation ---
    def next(self) -> bool:
        """Passe à l'étape suivante si le validateur de l'étape courante ne retourne aucune erreur."""
        self._ensure_editable()
        if self.step is WizardStep.PAYMENT:
            return False
        errors = validate_step(self.step, self.selection, self.config, self.availability)
        if errors:
            self.step_errors = errors
            self._emit("step_blocked", step=int(self.step), errors=list(errors))
            return False
        self._enter_step(WizardStep(self.step + 1))
        return True

    def back(self) -> bool:
        """Retour arrière; l'autorisation de paiement existante est conservée."""
        if not self.can_go_back():
            return False
        self._enter_step(WizardStep(self.step - 1))
        return True

    def _enter_step(self, step: WizardStep) -> None:
        self.step = step
        self.step_errors = []
        self.payment_notice = None
        self._emit("scroll_to_top", step=int(step))
        if step is WizardStep.PAYMENT:
            self._ensure_payment()

    # --- paiement ---
    def _payment_metadata(self) -> Dict[str, Any]:
        sel = self.selection
        return {
            "date": sel.date or "",
            "timeSlot": sel.time_slot or "",
            "adults": str(sel.adult_count),
            "children": str(sel.child_count),
            "email": sel.email,
        }

    def _ensure_payment(self) -> None:
        state = self.payments.ensure(self.payable_amount(), self._payment_metadata())
        self._emit("payment_state", **self.payments.to_dict())
        logger.info("wizard.controller._ensure_payment state=%s", state.value)

    def retry_payment(self) -> None:
        """Retry explicite de la création de l'autorisation (étape 5 uniquement)."""
        self._ensure_editable()
        if self.step is not WizardStep.PAYMENT:
            raise WizardError("Le paiement n'est disponible qu'à la dernière étape", code="wrong_step")
        self.payments.retry(self.payable_amount(), self._payment_metadata())
        self._emit("payment_state", **self.payments.to_dict())

    def handle_payment_result(
        self,
        confirmation: PaymentConfirmation,
        provider_intent_id: Optional[str] = None,
        error: Optional[str] = None,
    ) -> Optional[SubmissionOutcome]:
        """
        Issue de la confirmation côté client.
        - SUCCEEDED: construit la commande et la soumet (navigation verrouillée pendant l'envoi)
        - FAILED: message d'erreur, on reste à l'étape 5
        - REQUIRES_ACTION: notice d'attente
        """
        self._ensure_editable()
        if self.step is not WizardStep.PAYMENT:
            raise WizardError("Le paiement n'est disponible qu'à la dernière étape", code="wrong_step")
        authorization = self.payments.authorization
        if not self.payments.is_ready or authorization is None:
            raise WizardError("Aucune autorisation de paiement active", code="payment_not_ready")
        if provider_intent_id and provider_intent_id != authorization.provider_intent_id:
            raise WizardError("Le paiement ne correspond pas à l'autorisation en cours", code="intent_mismatch")

        if confirmation is PaymentConfirmation.FAILED:
            self.payment_notice = error or "Le paiement a échoué. Vérifiez vos informations de carte."
            self._emit("payment_failed", message=self.payment_notice)
            return None
        if confirmation is PaymentConfirmation.REQUIRES_ACTION:
            self.payment_notice = "Une action supplémentaire est requise pour valider le paiement."
            self._emit("payment_pending", message=self.payment_notice)
            return None

        if self.payments.is_stale_for(self.payable_amount()):
            raise WizardError("Le total a changé depuis l'autorisation du paiement", code="stale_authorization")

        order = Order.build(self.selection, self.config.price_table, authorization.provider_intent_id)
        self.submitting = True
        self._emit("submission_started", payment_reference=order.provider_intent_id)
        try:
            outcome = self.submitter.submit(order)
        finally:
            self.submitting = False
        self.outcome = outcome

        if outcome.status is SubmissionStatus.REJECTED:
            # l'autorisation a été consommée par le paiement
            self.payments.invalidate()
            if outcome.is_seat_rejection and self.selection.date:
                self.availability.refresh(self.selection.date)
                self._emit("availability_refreshed", date=self.selection.date)
        self._emit(OUTCOME_EVENTS[outcome.status], **outcome.to_dict())
        return outcome

    # --- contenu ---
    def notify_content_updated(self, price_table: Optional[PriceTable] = None) -> None:
        """
        Canal "contenu mis à jour": remplace la grille de prix et recalcule le total.
        À l'étape 5, seule une autorisation prête mais périmée est recréée pour le nouveau total:
        un état ERROR ne se quitte que par un retry explicite.
        """
        if price_table is not None:
            self.config = self.config.with_price_table(price_table)
        self._emit("pricing_updated", breakdown=breakdown_to_dict(self.breakdown()))
        if self.step is not WizardStep.PAYMENT or self.submitting or self.is_closed:
            return
        if self.payments.is_ready and self.payments.is_stale_for(self.payable_amount()):
            self._ensure_payment()
        else:
            self._emit("payment_state", **self.payments.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        sel = self.selection
        slots = {}
        if sel.date:
            slots = {
                slot: {"seats": self.availability.get(sel.date, slot), "status": self.availability.status(sel.date, slot)}
                for slot in self.availability.snapshot().get(sel.date, {})
            }
        return {
            "step": int(self.step),
            "step_name": self.step.name.lower(),
            "step_errors": list(self.step_errors),
            "selection": sel.to_dict(),
            "breakdown": breakdown_to_dict(self.breakdown()),
            "child_price_is_fallback": self.config.price_table.child_price_is_fallback,
            "purchases_enabled": self.config.purchases_enabled,
            "attractions_enabled": self.config.attractions_enabled,
            "availability": slots,
            "availability_error": self.availability.last_error,
            "payment": self.payments.to_dict(),
            "payment_notice": self.payment_notice,
            "submitting": self.submitting,
            "can_proceed": self.can_proceed(),
            "can_go_back": self.can_go_back(),
            "outcome": self.outcome.to_dict() if self.outcome else None,
        }
