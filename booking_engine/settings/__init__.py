from .models import SessionConfig
from .repository import fetch_ticket_purchases_enabled, load_session_config

__all__ = ["SessionConfig", "fetch_ticket_purchases_enabled", "load_session_config"]
