"""
Évaluation d'un code promo contre un total brut d'origine.
Un code absent, inconnu, inactif ou hors période n'est jamais une erreur:
le résultat est simplement `valid=False` sans remise.
"""
from datetime import datetime, timezone
from typing import Callable, Optional
import logging

from seminar_backend.pricing.money import round2
from seminar_backend.vouchers.models import FIXED_AMOUNT, PERCENTAGE, VoucherEvaluation
from seminar_backend.vouchers.repository import VoucherStore

logger = logging.getLogger(__name__)


def utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


class VoucherEvaluator:
    def __init__(self, store: VoucherStore, today: Callable[[], str] = utc_today):
        self.store = store
        self.today = today

    def _no_discount(self, original: float, reason: str, kind=None, value=None) -> VoucherEvaluation:
        return VoucherEvaluation(
            valid=False,
            discount_gross=0.0,
            original_total_gross=original,
            discounted_total_gross=original,
            reason=reason,
            kind=kind,
            value=value,
        )

    def evaluate(self, code: Optional[str], original_total_gross: float, participant_count: int) -> VoucherEvaluation:
        original = round2(original_total_gross or 0)
        if not (code or "").strip():
            return self._no_discount(original, "no_code")

        try:
            voucher = self.store.find_by_code(code)
        except Exception:
            logger.warning("Lecture du bon %r impossible, traité comme invalide", code, exc_info=True)
            return self._no_discount(original, "lookup_failed")
        if voucher is None:
            return self._no_discount(original, "not_found")

        today = self.today()
        if not voucher.active:
            return self._no_discount(original, "inactive", voucher.kind, voucher.value)
        if not voucher.is_usable_on(today):
            reason = "not_yet_valid" if voucher.valid_from and voucher.valid_from > today else "expired"
            return self._no_discount(original, reason, voucher.kind, voucher.value)

        value = voucher.value if voucher.value > 0 else 0.0
        if voucher.kind == FIXED_AMOUNT:
            discount = min(value, original)
        elif voucher.kind == PERCENTAGE:
            discount = round2(original * value / 100)
        else:
            logger.warning("Type de bon inconnu %r pour %s", voucher.kind, voucher.code)
            return self._no_discount(original, "unknown_kind", voucher.kind, voucher.value)

        if discount <= 0 or participant_count < 1:
            return self._no_discount(original, "no_discount", voucher.kind, voucher.value)

        discounted_total = round2(max(0.0, original - discount))
        return VoucherEvaluation(
            valid=True,
            discount_gross=discount,
            original_total_gross=original,
            discounted_total_gross=discounted_total,
            kind=voucher.kind,
            value=voucher.value,
            price_gross_per_seat=round2(discounted_total / participant_count),
        )
