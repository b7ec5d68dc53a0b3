"""
Cache local des places restantes, par date puis par créneau.
Indicatif seulement: le contrôle qui fait foi a lieu côté backend à la création de la réservation.
"""
import logging
from typing import Callable, Dict, Optional

from booking_engine.config import DEFAULT_SEAT_CEILING
from booking_engine.errors import TransportError
from .repository import fetch_availability

logger = logging.getLogger(__name__)

LOW_AVAILABILITY_THRESHOLD = 10

class AvailabilityCache:
    def __init__(
        self,
        fetcher: Callable[[str], Dict[str, int]] = fetch_availability,
        default_ceiling: int = DEFAULT_SEAT_CEILING,
    ):
        self._fetcher = fetcher
        self.default_ceiling = default_ceiling
        self._snapshot: Dict[str, Dict[str, int]] = {}
        self.last_error: Optional[str] = None

    def fetch(self, date: str) -> Dict[str, int]:
        """
        Charge les places pour une date et les fusionne dans le cache (les autres dates sont conservées).
        Un échec n'est pas bloquant: le cache reste inchangé et get() renvoie le plafond par défaut.
        """
        try:
            slots = self._fetcher(date)
        except TransportError as e:
            self.last_error = e.message
            logger.warning("availability.cache.fetch failed date=%s code=%s", date, e.code)
            return dict(self._snapshot.get(date, {}))
        self.last_error = None
        self._snapshot[date] = dict(slots)
        return dict(slots)

    def ensure(self, date: str) -> Dict[str, int]:
        """Un seul chargement par date distincte."""
        if date in self._snapshot:
            return dict(self._snapshot[date])
        return self.fetch(date)

    def get(self, date: str, time_slot: str) -> int:
        # Absence = pas encore vérifié, pas "complet"
        return self._snapshot.get(date, {}).get(time_slot, self.default_ceiling)

    def has(self, date: str) -> bool:
        return date in self._snapshot

    def invalidate(self, date: str) -> None:
        self._snapshot.pop(date, None)

    def refresh(self, date: str) -> Dict[str, int]:
        self.invalidate(date)
        return self.fetch(date)

    def status(self, date: str, time_slot: str) -> str:
        seats = self.get(date, time_slot)
        if seats <= 0:
            return "sold_out"
        if seats < LOW_AVAILABILITY_THRESHOLD:
            return "limited"
        return "available"

    def snapshot(self) -> Dict[str, Dict[str, int]]:
        return {date: dict(slots) for date, slots in self._snapshot.items()}
