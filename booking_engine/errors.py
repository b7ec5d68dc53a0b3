"""
Taxonomie des erreurs du tunnel d'achat.
- TransportError: réseau, corps non-JSON, 5xx, quota (retry borné pour les soumissions).
- RejectionError: refus bien formé du backend (places, validation) -> terminal.
- Issue ambiguë (paiement confirmé, réservation non confirmée): SubmissionOutcome AMBIGUOUS -> support.
"""
from typing import Optional

SUPPORT_MESSAGE = "Contactez le support avec cette référence de paiement"

class BookingEngineError(Exception):
    kind = "error"

    def __init__(self, message: str, code: str = "error"):
        super().__init__(message)
        self.message = message
        self.code = code

class TransportError(BookingEngineError):
    kind = "transport"

    def __init__(self, message: str, code: str = "network", status_code: Optional[int] = None):
        super().__init__(message, code=code)
        self.status_code = status_code

class BackendInitializingError(TransportError):
    """404 renvoyé pendant le démarrage (cold start) de la fonction edge."""

    def __init__(self, message: str = "Le service de réservation démarre, réessayez dans quelques instants."):
        super().__init__(message, code="backend_initializing", status_code=404)

class QuotaExceededError(TransportError):
    def __init__(self, message: str = "Le service de réservation est temporairement indisponible (quota dépassé).", status_code: Optional[int] = None):
        super().__init__(message, code="quota_exceeded", status_code=status_code)

class RejectionError(BookingEngineError):
    kind = "rejection"

    def __init__(self, message: str, code: str = "rejected", status_code: Optional[int] = None):
        super().__init__(message, code=code)
        self.status_code = status_code

class WizardError(BookingEngineError):
    """Transition ou action refusée par le tunnel (étape invalide, soumission en cours...)."""
    kind = "wizard"
