"""
Persistance des réservations (table bookings).
- BookingStore: interface utilisée par le service et le webhook.
- SupabaseBookingStore: implémentation Supabase (client service-role).
Règles:
- update() ne touche jamais au statut;
- mark_paid() est une mise à jour conditionnelle (status = 'open'), donc idempotente
  quand le vérificateur synchrone et le webhook arrivent en même temps.
"""
from abc import ABC, abstractmethod
from typing import Callable, Optional
import logging

from supabase import Client

from seminar_backend.bookings.models import Booking, BookingStatus
from seminar_backend.infra.supabase_client import get_service_supabase

logger = logging.getLogger(__name__)

TABLE = "bookings"


class BookingStore(ABC):
    @abstractmethod
    def create(self, booking: Booking) -> Booking: ...

    @abstractmethod
    def get(self, booking_id: int) -> Optional[Booking]: ...

    @abstractmethod
    def find_by_payment_reference(self, reference: str) -> Optional[Booking]: ...

    @abstractmethod
    def update(self, booking: Booking) -> Booking: ...

    @abstractmethod
    def mark_paid(self, booking_id: int, payment_method: str, payment_reference: str) -> bool: ...

    @abstractmethod
    def set_customer(self, booking_id: int, customer_id: int) -> None: ...


class SupabaseBookingStore(BookingStore):
    def __init__(self, client_factory: Callable[[], Client] = get_service_supabase):
        self._client_factory = client_factory

    def _table(self):
        return self._client_factory().table(TABLE)

    def create(self, booking: Booking) -> Booking:
        """Les erreurs d'écriture remontent: sans écriture, pas de réservation."""
        row = booking.to_row()
        res = self._table().insert(row).execute()
        data = res.data or []
        if not data:
            raise RuntimeError("Insertion de la réservation sans retour")
        booking.id = data[0].get("id")
        logger.info("Réservation %s créée (session=%s, statut=%s)", booking.id, booking.session_id, booking.status.value)
        return booking

    def get(self, booking_id: int) -> Optional[Booking]:
        res = self._table().select("*").eq("id", booking_id).limit(1).execute()
        data = res.data or []
        return Booking.from_row(data[0]) if data else None

    def find_by_payment_reference(self, reference: str) -> Optional[Booking]:
        if not reference:
            return None
        res = self._table().select("*").eq("payment_reference", reference).limit(1).execute()
        data = res.data or []
        return Booking.from_row(data[0]) if data else None

    def update(self, booking: Booking) -> Booking:
        row = booking.to_row()
        row.pop("status", None)
        self._table().update(row).eq("id", booking.id).execute()
        return booking

    def mark_paid(self, booking_id: int, payment_method: str, payment_reference: str) -> bool:
        res = (
            self._table()
            .update({
                "status": BookingStatus.PAID.value,
                "payment_method": payment_method,
                "payment_reference": payment_reference,
            })
            .eq("id", booking_id)
            .eq("status", BookingStatus.OPEN.value)
            .execute()
        )
        return bool(res.data)

    def set_customer(self, booking_id: int, customer_id: int) -> None:
        self._table().update({"customer_id": customer_id}).eq("id", booking_id).execute()
