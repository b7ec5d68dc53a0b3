"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: uvicorn workers) importe `booking_engine.asgi:app`.
- Toute la configuration de FastAPI (routes, middlewares, exceptions) est centralisée
  dans booking_engine.app_setup, ce fichier ne fait qu'exposer l'instance `app`.
"""

from booking_engine.app import app
