from decimal import Decimal
from enum import Enum

class PaymentState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CREATING = "creating"
    READY = "ready"
    ERROR = "error"

class PaymentConfirmation(str, Enum):
    """Issue terminale de la confirmation côté client (SDK Stripe)."""
    SUCCEEDED = "succeeded"
    REQUIRES_ACTION = "requires_action"
    FAILED = "failed"

class PaymentAuthorization:
    """Autorisation de paiement en cours: une seule par session, pour un montant figé à la création."""
    def __init__(self, client_secret: str, provider_intent_id: str, amount: Decimal):
        self.client_secret = client_secret
        self.provider_intent_id = provider_intent_id
        self.amount = amount

    def to_dict(self) -> dict:
        return {
            "client_secret": self.client_secret,
            "provider_intent_id": self.provider_intent_id,
            "amount": str(self.amount),
        }
