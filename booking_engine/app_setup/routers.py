from fastapi import FastAPI

from booking_engine.checkout.views import router as checkout_router
from booking_engine.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(checkout_router)
    app.include_router(health_router)
