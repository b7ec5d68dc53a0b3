"""
Factory d'application utilisée par les entrypoints (ex: booking_engine.asgi).
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_no_cache_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares (CORS, no-cache)
      - gestionnaires d'exceptions du domaine
      - routers (checkout, health)
    """
    app = FastAPI(title="Booking Engine", lifespan=lifespan)
    register_basic_middlewares(app)
    register_no_cache_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
