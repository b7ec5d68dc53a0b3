"""
Brouillon de sélection et étapes du tunnel d'achat.
"""
from enum import IntEnum
from typing import Any, Dict, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

class WizardStep(IntEnum):
    DATE_TIME = 1
    PICKUP_AND_COUNT = 2
    ADD_ONS = 3
    CONTACT_INFO = 4
    PAYMENT = 5

class Selection(BaseModel):
    """
    Brouillon mutable construit au fil des étapes.
    Créé à l'entrée du tunnel, abandonné après succès ou abandon; jamais partagé entre deux achats.
    """
    model_config = ConfigDict(validate_assignment=True)

    date: Optional[str] = None
    time_slot: Optional[str] = None
    pickup_location: Optional[str] = None
    adult_count: int = Field(default=1, ge=0)
    child_count: int = Field(default=0, ge=0)
    selected_attraction_ids: Set[str] = Field(default_factory=set)
    full_name: str = ""
    email: str = ""
    confirm_email: str = ""
    phone_prefix: str = "+351"
    phone_number: str = ""

    @property
    def passengers(self) -> int:
        return self.adult_count + self.child_count

    @property
    def phone(self) -> str:
        number = (self.phone_number or "").strip()
        if not number:
            return ""
        return f"{(self.phone_prefix or '').strip()} {number}".strip()

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump()
        data["selected_attraction_ids"] = sorted(self.selected_attraction_ids)
        return data
