from fastapi import APIRouter

from booking_engine.infra.api_client import get_api_client

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/backend")
def health_backend():
    """État du backend de réservation: online | initializing | quota_exceeded | offline."""
    return {"status": get_api_client().backend_status()}
