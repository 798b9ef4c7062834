"""
Gestionnaires d'exceptions utilisés par la factory.
- BookingError (et sous-classes): 400/404 JSON {"detail", "code"} avec le message métier.
- Erreurs de validation pydantic: 400 (même forme), pour un contrat d'erreur unique côté front.
- HTTPException: JSON FastAPI standard.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from seminar_backend.errors import BookingError

logger = logging.getLogger(__name__)


def _first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Requête invalide"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        logger.info("Requête rejetée %s %s: %s (%s)", request.method, request.url.path, exc.message, exc.code)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"detail": _first_error_message(exc), "code": "validation_error"},
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
