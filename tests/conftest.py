import pytest
from typing import Any, Dict, Generator, List, Optional
from fastapi.testclient import TestClient

from booking_engine.app import app as fastapi_app
from booking_engine.infra.api_client import ApiEnvelope

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/"):
            item.add_marker(pytest.mark.integration)

class FakeApiClient:
    """
    Backend de réservation en mémoire.
    - routes: {(méthode, chemin): ApiEnvelope | Exception | [réponses successives]}
    - calls: appels reçus (méthode, chemin, corps, en-têtes)
    """
    def __init__(self, routes: Optional[Dict[Any, Any]] = None):
        self.routes: Dict[Any, Any] = dict(routes or {})
        self.calls: List[Dict[str, Any]] = []

    def request(self, method, path, *, json=None, headers=None):
        self.calls.append({"method": method, "path": path, "json": json, "headers": headers or {}})
        response = self.routes.get((method, path))
        if isinstance(response, list):
            response = response.pop(0) if len(response) > 1 else response[0]
        if response is None:
            return ApiEnvelope(False, data={"error": "Route inconnue"}, error="Route inconnue", status_code=400)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, path):
        return self.request("GET", path)

    def post(self, path, payload, headers=None):
        return self.request("POST", path, json=payload, headers=headers)

    def calls_to(self, method, path):
        return [c for c in self.calls if c["method"] == method and c["path"] == path]

@pytest.fixture
def fake_api(monkeypatch) -> FakeApiClient:
    """Remplace le client backend partagé (get_api_client) par un FakeApiClient."""
    fake = FakeApiClient()
    monkeypatch.setattr("booking_engine.infra.api_client._client", fake)
    return fake

@pytest.fixture(autouse=True)
def _isolate_module_state(monkeypatch):
    # Pas d'appel Stripe réel et pas de grille de prix conservée d'un test à l'autre
    monkeypatch.setattr("booking_engine.payments.stripe_client.STRIPE_SECRET_KEY", "")
    monkeypatch.setattr("booking_engine.pricing.repository._last_loaded", None)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
