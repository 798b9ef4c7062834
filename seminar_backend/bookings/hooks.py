"""
Actions post-écriture d'une réservation (best-effort).
Exécutées après l'insertion réussie; chaque hook est isolé et ses erreurs
sont journalisées sans jamais remonter au client.
"""
from typing import Callable, Iterable
import logging

from seminar_backend.bookings.models import Booking
from seminar_backend.bookings.repository import BookingStore
from seminar_backend.catalog.repository import CatalogStore
from seminar_backend.catalog.titles import ensure_session_title
from seminar_backend.customers.service import CustomerLinker

logger = logging.getLogger(__name__)

PostCommitHook = Callable[[Booking], object]


def customer_link_hook(linker: CustomerLinker, bookings: BookingStore) -> PostCommitHook:
    def _hook(booking: Booking):
        customer_id = linker.link(booking)
        if customer_id is not None:
            bookings.set_customer(booking.id, customer_id)
            booking.customer_id = customer_id
        return customer_id
    _hook.__name__ = "customer_link"
    return _hook


def session_title_hook(catalog: CatalogStore) -> PostCommitHook:
    def _hook(booking: Booking):
        return ensure_session_title(catalog, booking.session_id)
    _hook.__name__ = "session_title"
    return _hook


def run_post_commit_hooks(booking: Booking, hooks: Iterable[PostCommitHook]) -> None:
    for hook in hooks:
        try:
            hook(booking)
        except Exception:
            logger.warning(
                "Hook %s en échec pour la réservation %s",
                getattr(hook, "__name__", hook), booking.id, exc_info=True,
            )
