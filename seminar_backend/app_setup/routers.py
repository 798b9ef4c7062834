"""
Registre central des routers.
- Public: réservations, bons de réduction, webhook PayPal
- Health: health_router
"""
from fastapi import FastAPI
from seminar_backend.bookings import views as bookings_views
from seminar_backend.vouchers import views as vouchers_views
from seminar_backend.payments import views as payments_views
from seminar_backend.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l'application.
    - L'ordre n'a pas d'impact sauf conflits de chemins (évités par préfixes).
    """
    app.include_router(bookings_views.router)
    app.include_router(vouchers_views.router)
    app.include_router(payments_views.router)
    # Health & monitoring
    app.include_router(health_router)
