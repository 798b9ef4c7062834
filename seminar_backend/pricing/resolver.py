"""
Résolution du prix unitaire faisant foi pour une session.
Priorité: prix de la session (fini et > 0) puis prix par défaut du séminaire.
Les prix déclarés par le client ne sont jamais pris en compte ici.
"""
from dataclasses import dataclass
from typing import Optional
import math

from seminar_backend.catalog.models import Course, Session
from seminar_backend.catalog.repository import CatalogStore
from seminar_backend.config import Settings
from seminar_backend.errors import InvalidPriceError, SessionNotFoundError


@dataclass(frozen=True)
class SeatPrice:
    amount: float
    source: str  # "session" | "course"
    is_gross: bool
    vat_applicable: bool
    vat_rate: float

    def seed(self) -> dict:
        """Arguments gross=/net= à passer au moteur de calcul."""
        return {"gross": self.amount} if self.is_gross else {"net": self.amount}


def _usable(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


def resolve_seat_price(
    session: Session,
    course: Optional[Course],
    settings: Settings,
    vat_override: Optional[bool] = None,
) -> SeatPrice:
    amount = _usable(session.price)
    source = "session"
    if amount is None:
        amount = _usable(course.default_price) if course else None
        source = "course"
    if amount is None:
        raise InvalidPriceError()

    if vat_override is not None:
        vat_applicable = bool(vat_override)
    else:
        vat_applicable = course.vat_applicable if course else True

    return SeatPrice(
        amount=amount,
        source=source,
        is_gross=settings.prices_include_vat,
        vat_applicable=vat_applicable,
        vat_rate=settings.vat_rate if vat_applicable else 0.0,
    )


class PriceResolver:
    def __init__(self, settings: Settings, catalog: CatalogStore):
        self.settings = settings
        self.catalog = catalog

    def resolve(self, session_id: int, vat_override: Optional[bool] = None) -> SeatPrice:
        session = self.catalog.get_session(session_id)
        if session is None:
            raise SessionNotFoundError()
        course = self.catalog.get_course(session.course_id) if session.course_id is not None else None
        return resolve_seat_price(session, course, self.settings, vat_override)
