"""
Sessions d'achat en mémoire: un WizardController par identifiant de session.
Les événements émis par le contrôleur sont mis en file et rendus au client au prochain appel.
"""
import logging
import uuid
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional

from booking_engine.settings.models import SessionConfig
from booking_engine.wizard.controller import WizardController

logger = logging.getLogger(__name__)

MAX_PENDING_EVENTS = 100

class CheckoutSession:
    def __init__(self, session_id: str, controller: WizardController):
        self.id = session_id
        self.controller = controller
        self.events: Deque[Dict[str, Any]] = deque(maxlen=MAX_PENDING_EVENTS)
        self._unsubscribe = controller.subscribe(self._record)

    def _record(self, event: str, data: Dict[str, Any]) -> None:
        self.events.append({"event": event, "data": data})

    def drain_events(self) -> List[Dict[str, Any]]:
        events = list(self.events)
        self.events.clear()
        return events

    def close(self) -> None:
        self._unsubscribe()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.id,
            "state": self.controller.to_dict(),
            "events": self.drain_events(),
        }

class CheckoutSessionStore:
    def __init__(self, controller_factory: Callable[[SessionConfig], WizardController] = WizardController):
        self._controller_factory = controller_factory
        self._sessions: Dict[str, CheckoutSession] = {}

    def create(self, config: SessionConfig) -> CheckoutSession:
        session_id = uuid.uuid4().hex
        session = CheckoutSession(session_id, self._controller_factory(config))
        self._sessions[session_id] = session
        logger.info("checkout.sessions.create session=%s purchases_enabled=%s", session_id, config.purchases_enabled)
        return session

    def get(self, session_id: str) -> Optional[CheckoutSession]:
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    def __len__(self) -> int:
        return len(self._sessions)
