"""
Accès aux fiches clients (table customers), dédoublonnées par e-mail.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional
import logging

from supabase import Client

from seminar_backend.infra.supabase_client import get_service_supabase

logger = logging.getLogger(__name__)


class CustomerStore(ABC):
    @abstractmethod
    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Dict[str, Any]: ...


class SupabaseCustomerStore(CustomerStore):
    def __init__(self, client_factory: Callable[[], Client] = get_service_supabase):
        self._client_factory = client_factory

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        res = (
            self._client_factory()
            .table("customers")
            .select("id, email")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        data = res.data or []
        return data[0] if data else None

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        res = self._client_factory().table("customers").insert(data).execute()
        rows = res.data or []
        if not rows:
            raise RuntimeError("Création du client sans retour")
        return rows[0]
