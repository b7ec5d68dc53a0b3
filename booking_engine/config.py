# booking_engine.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du moteur de réservation.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose l'URL du backend de réservation (fonction edge Supabase) et la clé anon
- Expose les clés Stripe, la devise et les paramètres du tunnel d'achat (plafond de places,
  politique de retry, longueur minimale du téléphone, drapeau des billets d'attraction)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _env_int(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name)) or default)
    except ValueError:
        return default

def _env_float(name: str, default: float) -> float:
    try:
        return float(_clean_env(os.getenv(name)) or default)
    except ValueError:
        return default

def _env_bool(name: str, default: bool) -> bool:
    raw = _clean_env(os.getenv(name)).lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")

# Supabase: URL du projet et clé publique (anon) envoyée en Bearer
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or "")
SUPABASE_ANON_KEY = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Fonction edge qui expose pricing / availability / bookings
BOOKING_FUNCTION_NAME = _clean_env(os.getenv("BOOKING_FUNCTION_NAME") or "make-server-3bd0ade8")

# BOOKING_API_BASE_URL permet de pointer vers un autre backend (ex: mock local)
BOOKING_API_BASE_URL = _clean_env(os.getenv("BOOKING_API_BASE_URL") or "")
if not BOOKING_API_BASE_URL and SUPABASE_URL:
    BOOKING_API_BASE_URL = f"{SUPABASE_URL}/functions/v1/{BOOKING_FUNCTION_NAME}"
BOOKING_API_BASE_URL = BOOKING_API_BASE_URL.rstrip("/")

API_TIMEOUT_SECONDS = _env_float("API_TIMEOUT_SECONDS", 15.0)

# Stripe: clé publique (confirmation côté client) et clé secrète (vérification côté serveur)
STRIPE_PUBLIC_KEY = _clean_env(os.getenv("STRIPE_PUBLIC_KEY") or "")
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
DEFAULT_CURRENCY = _clean_env(os.getenv("DEFAULT_CURRENCY") or "eur").lower()

# Tunnel d'achat
DEFAULT_SEAT_CEILING = _env_int("DEFAULT_SEAT_CEILING", 50)
BOOKING_MAX_ATTEMPTS = _env_int("BOOKING_MAX_ATTEMPTS", 3)
BOOKING_RETRY_DELAY_SECONDS = _env_float("BOOKING_RETRY_DELAY_SECONDS", 1.0)
MIN_PHONE_DIGITS = _env_int("MIN_PHONE_DIGITS", 6)
# Billets d'attraction désactivés par défaut (vente en ligne pas encore ouverte)
ATTRACTION_TICKETS_ENABLED = _env_bool("ATTRACTION_TICKETS_ENABLED", False)

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
