"""
Titre d'affichage des sessions, rempli automatiquement s'il est vide.
Format: "<date du premier jour> – <nom du séminaire> – <lieu>", parties vides ignorées.
La date du premier jour est réécrite AAAA-JJ-MM (format historique des pages publiques).
"""
from typing import Optional
import logging

from seminar_backend.catalog.models import Course, Location, Session
from seminar_backend.catalog.repository import CatalogStore

logger = logging.getLogger(__name__)

TITLE_SEPARATOR = " – "


def _first_day_label(session: Session) -> str:
    days = [d for d in session.days if d.date]
    if not days:
        return ""
    first = sorted(days, key=lambda d: f"{d.date} {d.start_time}")[0]
    parts = first.date.split("-")
    if len(parts) == 3:
        year, month, day = parts
        return f"{year}-{day}-{month}"
    return first.date


def build_session_title(session: Session, course: Optional[Course], location: Optional[Location]) -> str:
    parts = [
        _first_day_label(session),
        course.name if course else "",
        location.display_name if location else "",
    ]
    return TITLE_SEPARATOR.join(p for p in parts if p)


def ensure_session_title(catalog: CatalogStore, session_id: int) -> Optional[str]:
    """
    Renseigne le titre de la session s'il est vide et renvoie le titre écrit (None sinon).
    Les exceptions de stockage remontent: l'appelant (hook post-commit) les journalise.
    """
    session = catalog.get_session(session_id)
    if session is None or (session.title or "").strip():
        return None
    course = catalog.get_course(session.course_id) if session.course_id is not None else None
    location = catalog.get_location(session.location_id) if session.location_id is not None else None
    title = build_session_title(session, course, location)
    if not title:
        return None
    catalog.update_session_title(session.id, title)
    logger.info("Titre de session %s renseigné: %s", session.id, title)
    return title
