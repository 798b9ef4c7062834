"""
Devis faisant foi: résolution du prix + bon de réduction + moteur de calcul.
C'est ce même calcul qui sert à afficher un devis, à créer une réservation
et à recalculer le montant attendu lors de la vérification d'un paiement.
"""
from dataclasses import dataclass
from typing import Optional

from seminar_backend.catalog.repository import CatalogStore
from seminar_backend.config import Settings
from seminar_backend.pricing.money import PricingBreakdown, derive_pricing
from seminar_backend.pricing.resolver import PriceResolver, SeatPrice
from seminar_backend.vouchers.evaluator import VoucherEvaluator
from seminar_backend.vouchers.models import VoucherEvaluation


@dataclass(frozen=True)
class Quote:
    seat_price: SeatPrice
    original: PricingBreakdown
    voucher: VoucherEvaluation
    breakdown: PricingBreakdown

    @property
    def expected_total_gross(self) -> float:
        """Montant que le paiement doit couvrir (remise déjà incluse)."""
        return self.breakdown.total_gross


class PricingService:
    def __init__(self, settings: Settings, catalog: CatalogStore, vouchers: VoucherEvaluator):
        self.settings = settings
        self.resolver = PriceResolver(settings, catalog)
        self.vouchers = vouchers

    def quote(
        self,
        session_id: int,
        participant_count: int,
        voucher_code: Optional[str] = None,
        vat_override: Optional[bool] = None,
    ) -> Quote:
        seat = self.resolver.resolve(session_id, vat_override)
        original = derive_pricing(
            participant_count,
            vat_applicable=seat.vat_applicable,
            vat_rate=seat.vat_rate,
            **seat.seed(),
        )
        evaluation = self.vouchers.evaluate(voucher_code, original.total_gross, participant_count)
        breakdown = original
        if evaluation.valid and evaluation.price_gross_per_seat is not None:
            # La remise est répartie sur le prix unitaire brut, qui devient le nouveau prix d'amorçage
            breakdown = derive_pricing(
                participant_count,
                gross=evaluation.price_gross_per_seat,
                vat_applicable=seat.vat_applicable,
                vat_rate=seat.vat_rate,
            )
        return Quote(seat_price=seat, original=original, voucher=evaluation, breakdown=breakdown)
