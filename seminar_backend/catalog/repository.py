"""
Accès catalogue (tables sessions, courses, locations).
- CatalogStore: interface lue par le résolveur de prix et l'auto-titre des sessions.
- SupabaseCatalogStore: implémentation Supabase (client service-role, lectures par id).
Une ligne absente donne None; une erreur Supabase remonte telle quelle (une panne n'est pas « introuvable »).
"""
from abc import ABC, abstractmethod
from typing import Callable, Optional

from supabase import Client

from seminar_backend.catalog.models import Course, Location, Session
from seminar_backend.infra.supabase_client import get_service_supabase


class CatalogStore(ABC):
    @abstractmethod
    def get_session(self, session_id: int) -> Optional[Session]: ...

    @abstractmethod
    def get_course(self, course_id: int) -> Optional[Course]: ...

    @abstractmethod
    def get_location(self, location_id: int) -> Optional[Location]: ...

    @abstractmethod
    def update_session_title(self, session_id: int, title: str) -> bool: ...


class SupabaseCatalogStore(CatalogStore):
    def __init__(self, client_factory: Callable[[], Client] = get_service_supabase):
        self._client_factory = client_factory

    def _get_row(self, table: str, row_id: int, columns: str) -> Optional[dict]:
        res = (
            self._client_factory()
            .table(table)
            .select(columns)
            .eq("id", row_id)
            .limit(1)
            .execute()
        )
        data = res.data or []
        return data[0] if data else None

    def get_session(self, session_id: int) -> Optional[Session]:
        row = self._get_row(
            "sessions",
            session_id,
            "id, course_id, price, capacity, status, title, days, location_id",
        )
        return Session.from_row(row) if row else None

    def get_course(self, course_id: int) -> Optional[Course]:
        row = self._get_row(
            "courses",
            course_id,
            "id, name, slug, default_price, vat_applicable, short_description, description",
        )
        return Course.from_row(row) if row else None

    def get_location(self, location_id: int) -> Optional[Location]:
        row = self._get_row("locations", location_id, "id, site_name, venue, city")
        return Location.from_row(row) if row else None

    def update_session_title(self, session_id: int, title: str) -> bool:
        # Pas de try/except: appelé depuis un hook post-commit qui journalise lui-même l'échec
        res = (
            self._client_factory()
            .table("sessions")
            .update({"title": title})
            .eq("id", session_id)
            .execute()
        )
        return bool(res.data)
