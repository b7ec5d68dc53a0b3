"""
Middlewares transverses de l'application.
- register_basic_middlewares: CORS pour le front du tunnel d'achat.
- register_no_cache_middleware: empêche la mise en cache de l'état des sessions d'achat.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from booking_engine.config import CORS_ORIGINS

def register_basic_middlewares(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

def register_no_cache_middleware(app: FastAPI) -> None:
    """
    L'état d'une session (total, autorisation de paiement) change à chaque appel:
    les réponses sous /api/v1/checkout ne doivent jamais être servies depuis un cache.
    """
    @app.middleware("http")
    async def no_cache_for_checkout(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith("/api/v1/checkout"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
        return response
