"""
Rattachement d'une réservation à une fiche client.
- Recherche par e-mail (e-mail de facturation pour une société, sinon e-mail de contact);
- création à la première réservation, avec des valeurs de repli pour les noms.
Limite connue: lecture puis création sans contrainte d'unicité, deux premières
réservations simultanées avec le même e-mail peuvent créer deux fiches.
"""
from typing import Optional
import logging

from seminar_backend.bookings.models import Booking
from seminar_backend.customers.repository import CustomerStore

logger = logging.getLogger(__name__)

NAME_PLACEHOLDER = "—"


class CustomerLinker:
    def __init__(self, store: CustomerStore):
        self.store = store

    def link(self, booking: Booking) -> Optional[int]:
        email = booking.customer_email
        if not email:
            return None
        email = email.lower()
        existing = self.store.find_by_email(email)
        if existing:
            return existing.get("id")

        last_name = booking.last_name or (booking.company_name if booking.is_company else None)
        created = self.store.create({
            "first_name": booking.first_name or NAME_PLACEHOLDER,
            "last_name": last_name or NAME_PLACEHOLDER,
            "email": email,
            "phone": booking.phone,
            "street": booking.street,
            "postal_code": booking.postal_code,
            "city": booking.city,
            "country": booking.country,
        })
        logger.info("Client %s créé pour %s", created.get("id"), email)
        return created.get("id")
