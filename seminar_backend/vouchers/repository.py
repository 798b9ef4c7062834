"""
Accès aux bons de réduction (table vouchers).
La recherche accepte le code tel que saisi, en majuscules et en minuscules.
"""
from abc import ABC, abstractmethod
from typing import Callable, List, Optional
import logging

from supabase import Client

from seminar_backend.infra.supabase_client import get_service_supabase
from seminar_backend.vouchers.models import Voucher

logger = logging.getLogger(__name__)


def code_variants(code: str) -> List[str]:
    raw = (code or "").strip()
    variants: List[str] = []
    for v in (raw, raw.upper(), raw.lower()):
        if v and v not in variants:
            variants.append(v)
    return variants


class VoucherStore(ABC):
    @abstractmethod
    def find_by_code(self, code: str) -> Optional[Voucher]: ...


class SupabaseVoucherStore(VoucherStore):
    def __init__(self, client_factory: Callable[[], Client] = get_service_supabase):
        self._client_factory = client_factory

    def find_by_code(self, code: str) -> Optional[Voucher]:
        """Les erreurs Supabase remontent: l'évaluateur les convertit en bon invalide."""
        variants = code_variants(code)
        if not variants:
            return None
        res = (
            self._client_factory()
            .table("vouchers")
            .select("code, kind, value, active, valid_from, valid_to, usage_limit")
            .in_("code", variants)
            .execute()
        )
        rows = res.data or []
        if not rows:
            return None
        # Priorité à la correspondance exacte, puis à l'ordre des variantes
        rows.sort(key=lambda r: variants.index(r.get("code")) if r.get("code") in variants else len(variants))
        return Voucher.from_row(rows[0])
