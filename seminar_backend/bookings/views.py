# module seminar_backend.bookings.views

"""Endpoints publics des réservations.
- POST /public/bookings: crée une réservation (tarif recalculé côté serveur, capture PayPal vérifiée si fournie).
- GET /public/bookings/{id}: projection publique (statut + totaux, sans données personnelles).
Erreurs:
- BookingError -> 400 (404 pour une réservation inconnue) via app_setup.exceptions
- toute autre erreur -> 500, journalisée
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
import logging

from seminar_backend.bookings.schemas import BookingCreateRequest
from seminar_backend.bookings.service import BookingService
from seminar_backend.dependencies import get_booking_service
from seminar_backend.errors import BookingError
from seminar_backend.utils.rate_limit import optional_rate_limit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/public/bookings", tags=["Bookings"])


@router.post("", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_booking(payload: BookingCreateRequest, service: BookingService = Depends(get_booking_service)):
    """Crée une réservation et renvoie l'identifiant, la ventilation tarifaire complète et le statut."""
    try:
        booking = await service.create_booking(payload)
        return JSONResponse(booking.to_response())
    except BookingError:
        raise
    except Exception:
        logger.exception("Erreur create_booking")
        raise HTTPException(status_code=500, detail="Erreur interne")


@router.get("/{booking_id}")
def get_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    raw = (booking_id or "").strip()
    if not raw.isdigit():
        raise HTTPException(status_code=400, detail="Identifiant de réservation invalide")
    try:
        return service.get_public_booking(int(raw))
    except BookingError:
        raise
    except Exception:
        logger.exception("Erreur get_booking id=%s", raw)
        raise HTTPException(status_code=500, detail="Erreur interne")
