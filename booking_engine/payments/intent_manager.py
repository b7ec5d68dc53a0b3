"""
Gestion de l'autorisation de paiement d'une session d'achat.

États: UNINITIALIZED -> CREATING -> READY | ERROR, et READY/ERROR -> CREATING sur retry explicite.
- Au plus une autorisation active; un déclenchement pendant CREATING est ignoré.
- Aucune boucle de retry automatique: chaque création est un nouvel objet financier chez Stripe.
- Une autorisation READY pour un autre montant est périmée et doit être recréée.
"""
import logging
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from booking_engine.config import DEFAULT_CURRENCY
from booking_engine.errors import TransportError, RejectionError
from .models import PaymentAuthorization, PaymentState
from .repository import create_payment_intent

logger = logging.getLogger(__name__)

INIT_ERROR_PREFIX = "Impossible d'initialiser le paiement"

class PaymentIntentManager:
    def __init__(
        self,
        creator: Callable[..., PaymentAuthorization] = create_payment_intent,
        currency: str = DEFAULT_CURRENCY,
    ):
        self._creator = creator
        self.currency = currency
        self.state = PaymentState.UNINITIALIZED
        self.authorization: Optional[PaymentAuthorization] = None
        self.error: Optional[str] = None
        self.creation_attempts = 0

    @property
    def is_ready(self) -> bool:
        return self.state is PaymentState.READY and self.authorization is not None

    def is_stale_for(self, amount: Decimal) -> bool:
        return self.authorization is not None and self.authorization.amount != amount

    def ensure(self, amount: Decimal, metadata: Optional[Dict[str, Any]] = None) -> PaymentState:
        """
        Déclenchement automatique à l'entrée de l'étape paiement.
        - CREATING: no-op
        - READY pour le même montant: réutilise l'autorisation
        - READY pour un autre montant: l'autorisation est périmée, une nouvelle est créée
        - UNINITIALIZED / ERROR: une seule tentative de création
        """
        if self.state is PaymentState.CREATING:
            return self.state
        if self.is_ready:
            if not self.is_stale_for(amount):
                return self.state
            logger.info(
                "payments.intent_manager.ensure stale authorization intent=%s old=%s new=%s",
                self.authorization.provider_intent_id, self.authorization.amount, amount,
            )
        return self._create(amount, metadata)

    def retry(self, amount: Decimal, metadata: Optional[Dict[str, Any]] = None) -> PaymentState:
        """Retry explicite demandé par l'utilisateur (ignoré si une création est en cours)."""
        if self.state is PaymentState.CREATING:
            return self.state
        return self._create(amount, metadata)

    def invalidate(self) -> None:
        self.state = PaymentState.UNINITIALIZED
        self.authorization = None
        self.error = None

    def _create(self, amount: Decimal, metadata: Optional[Dict[str, Any]]) -> PaymentState:
        self.state = PaymentState.CREATING
        self.authorization = None
        self.error = None
        self.creation_attempts += 1
        try:
            authorization = self._creator(amount=amount, currency=self.currency, metadata=metadata or {})
        except (TransportError, RejectionError) as e:
            self.state = PaymentState.ERROR
            self.error = f"{INIT_ERROR_PREFIX}: {e.message}"
            logger.warning("payments.intent_manager._create failed kind=%s code=%s", e.kind, e.code)
            return self.state
        self.authorization = authorization
        self.state = PaymentState.READY
        return self.state

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "error": self.error,
            "authorization": self.authorization.to_dict() if self.authorization else None,
        }
