"""
Client HTTP du backend de réservation (fonction edge Supabase).
- Toutes les réponses sont ramenées à une enveloppe externe ApiEnvelope {success, data, error}.
- Les échecs de transport (réseau, non-JSON, 5xx, 404, quota) lèvent TransportError et ses variantes.
- Un 4xx avec un corps JSON est un refus bien formé: enveloppe success=False avec l'erreur du backend.
"""
import logging
from typing import Any, Dict, Optional

import requests

from booking_engine.config import BOOKING_API_BASE_URL, SUPABASE_ANON_KEY, API_TIMEOUT_SECONDS
from booking_engine.errors import TransportError, BackendInitializingError, QuotaExceededError

logger = logging.getLogger(__name__)

QUOTA_MARKERS = ("exceeded your Free Plan quota", "quota in this billing")

class ApiEnvelope:
    """
    Enveloppe externe d'un appel backend.
    - success: statut HTTP 2xx
    - data: corps JSON décodé (enveloppe interne pour /bookings)
    - error: message d'erreur du backend si success=False
    """
    def __init__(
        self,
        success: bool,
        data: Optional[Any] = None,
        error: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.success = success
        self.data = data
        self.error = error
        self.status_code = status_code

    @property
    def body(self) -> Dict[str, Any]:
        return self.data if isinstance(self.data, dict) else {}

def _looks_like_quota_page(text: str) -> bool:
    return any(marker in (text or "") for marker in QUOTA_MARKERS)

class BookingApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        anon_key: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url if base_url is not None else BOOKING_API_BASE_URL).rstrip("/")
        self.anon_key = anon_key if anon_key is not None else SUPABASE_ANON_KEY
        self.timeout = timeout if timeout is not None else API_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.anon_key:
            headers["Authorization"] = f"Bearer {self.anon_key}"
        if extra:
            headers.update(extra)
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> ApiEnvelope:
        if not self.base_url:
            raise TransportError("Service de réservation non configuré", code="not_configured")
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self.session.request(method, url, json=json, headers=self._headers(headers), timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("infra.api_client.request network error %s %s: %s", method, path, e)
            raise TransportError("Erreur réseau. Vérifiez votre connexion.", code="network")

        status = resp.status_code
        if status == 404:
            raise BackendInitializingError()

        try:
            data = resp.json()
        except ValueError:
            if _looks_like_quota_page(resp.text):
                raise QuotaExceededError(status_code=status)
            logger.warning("infra.api_client.request non-JSON response %s %s status=%s", method, path, status)
            raise TransportError("Réponse invalide du service de réservation", code="invalid_response", status_code=status)

        if status == 429:
            raise QuotaExceededError(status_code=status)

        error = data.get("error") if isinstance(data, dict) else None
        if status >= 500:
            logger.warning("infra.api_client.request server error %s %s status=%s error=%s", method, path, status, error)
            raise TransportError(error or "Erreur du service de réservation", code="server_error", status_code=status)
        if not resp.ok:
            return ApiEnvelope(False, data=data, error=error or "Une erreur est survenue", status_code=status)
        return ApiEnvelope(True, data=data, status_code=status)

    def get(self, path: str) -> ApiEnvelope:
        return self.request("GET", path)

    def post(self, path: str, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> ApiEnvelope:
        return self.request("POST", path, json=payload, headers=headers)

    def backend_status(self) -> str:
        """
        Sonde GET /health.
        Retour: "online" | "initializing" | "quota_exceeded" | "offline".
        """
        try:
            envelope = self.get("health")
        except BackendInitializingError:
            return "initializing"
        except QuotaExceededError:
            return "quota_exceeded"
        except TransportError:
            return "offline"
        return "online" if envelope.success else "offline"

_client: Optional[BookingApiClient] = None

def get_api_client() -> BookingApiClient:
    global _client
    if _client is None:
        _client = BookingApiClient()
    return _client
