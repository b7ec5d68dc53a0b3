"""
Gestionnaires d'exceptions utilisés par la factory.
Chaque erreur du domaine est rendue en JSON {detail, kind, code} pour que le client sache
s'il doit réessayer, patienter ou contacter le support.
"""
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from booking_engine.errors import (
    BookingEngineError,
    TransportError,
    BackendInitializingError,
    RejectionError,
    WizardError,
)

def _error_response(status_code: int, exc: BookingEngineError, headers=None) -> JSONResponse:
    content = {"detail": exc.message, "kind": exc.kind, "code": exc.code}
    return JSONResponse(status_code=status_code, content=content, headers=headers)

def register_exception_handlers(app: FastAPI) -> None:
    """
    - WizardError / RejectionError: 409 (action refusée, à corriger par l'utilisateur)
    - BackendInitializingError: 503 + Retry-After (réessayer sous peu)
    - TransportError: 503
    - HTTPException: JSON {detail}
    """
    @app.exception_handler(WizardError)
    async def wizard_error(request: Request, exc: WizardError):
        return _error_response(409, exc)

    @app.exception_handler(RejectionError)
    async def rejection_error(request: Request, exc: RejectionError):
        return _error_response(409, exc)

    @app.exception_handler(BackendInitializingError)
    async def backend_initializing(request: Request, exc: BackendInitializingError):
        return _error_response(503, exc, headers={"Retry-After": "5"})

    @app.exception_handler(TransportError)
    async def transport_error(request: Request, exc: TransportError):
        return _error_response(503, exc)

    @app.exception_handler(BookingEngineError)
    async def booking_engine_error(request: Request, exc: BookingEngineError):
        return _error_response(400, exc)

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
