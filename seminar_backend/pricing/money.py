"""
Moteur de calcul des montants (pur, sans effet de bord).

Règles:
- arrondi "half away from zero" à 2 décimales, appliqué après CHAQUE dérivation
  (prix unitaire net/brut, TVA unitaire, puis chaque total séparément);
- un seul prix d'amorçage (brut OU net), l'autre est toujours dérivé du taux de TVA;
- hors TVA: brut == net, TVA == 0, taux forcé à 0.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional
import math
import sys

from seminar_backend.errors import PricingError

_CENT = Decimal("0.01")


def round2(value: float) -> float:
    """
    Arrondi monétaire à 2 décimales (0.005 -> 0.01, -0.005 -> -0.01).
    Un epsilon machine est ajouté dans le sens du signe avant l'arrondi:
    1.005 est stocké 1.00499999... en binaire et doit quand même donner 1.01.
    """
    value = float(value)
    if not math.isfinite(value):
        raise PricingError("Montant non fini", code="non_finite_amount")
    if value == 0:
        return 0.0
    nudged = value + math.copysign(sys.float_info.epsilon, value)
    return float(Decimal(repr(nudged)).quantize(_CENT, rounding=ROUND_HALF_UP))


def gross_from_net(net: float, vat_rate: float) -> float:
    return round2(net * (1 + vat_rate / 100))


def net_from_gross(gross: float, vat_rate: float) -> float:
    return round2(gross / (1 + vat_rate / 100))


@dataclass(frozen=True)
class PricingBreakdown:
    vat_applicable: bool
    vat_rate: float
    price_gross_per_seat: float
    price_net_per_seat: float
    vat_amount_per_seat: float
    total_gross: float
    total_net: float
    total_vat_amount: float
    participant_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_public(self) -> Dict[str, Any]:
        """Forme camelCase renvoyée par l'API publique."""
        return {
            "participantCount": self.participant_count,
            "vatApplicable": self.vat_applicable,
            "vatRate": self.vat_rate,
            "priceGrossPerSeat": self.price_gross_per_seat,
            "priceNetPerSeat": self.price_net_per_seat,
            "vatAmountPerSeat": self.vat_amount_per_seat,
            "totalGross": self.total_gross,
            "totalNet": self.total_net,
            "totalVatAmount": self.total_vat_amount,
        }


def _check_seed(name: str, value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise PricingError(f"Montant {name} invalide", code="invalid_amount")
    if not math.isfinite(amount) or amount < 0:
        raise PricingError(f"Montant {name} invalide", code="invalid_amount")
    return amount


def derive_pricing(
    participant_count: int,
    gross: Optional[float] = None,
    net: Optional[float] = None,
    vat_applicable: bool = True,
    vat_rate: float = 19.0,
) -> PricingBreakdown:
    """
    Calcule la ventilation complète (unitaire + totaux) à partir d'un seul prix d'amorçage.
    Lève PricingError si le nombre de places est < 1, si aucun ou les deux prix sont fournis,
    ou si un montant est négatif / non fini.
    """
    if isinstance(participant_count, bool) or not isinstance(participant_count, int) or participant_count < 1:
        raise PricingError("Au moins une place est requise", code="invalid_participant_count")

    gross = _check_seed("brut", gross)
    net = _check_seed("net", net)
    if gross is None and net is None:
        raise PricingError("Prix brut ou net requis", code="missing_price")
    if gross is not None and net is not None:
        raise PricingError("Un seul prix (brut ou net) peut être fourni", code="ambiguous_price")

    rate = float(vat_rate or 0) if vat_applicable else 0.0
    if not math.isfinite(rate) or rate < 0:
        raise PricingError("Taux de TVA invalide", code="invalid_vat_rate")

    if vat_applicable:
        if gross is not None:
            gross_seat = round2(gross)
            net_seat = net_from_gross(gross_seat, rate)
        else:
            net_seat = round2(net)
            gross_seat = gross_from_net(net_seat, rate)
        vat_seat = round2(gross_seat - net_seat)
    else:
        gross_seat = net_seat = round2(gross if gross is not None else net)
        vat_seat = 0.0

    return PricingBreakdown(
        vat_applicable=bool(vat_applicable),
        vat_rate=rate,
        price_gross_per_seat=gross_seat,
        price_net_per_seat=net_seat,
        vat_amount_per_seat=vat_seat,
        total_gross=round2(gross_seat * participant_count),
        total_net=round2(net_seat * participant_count),
        total_vat_amount=round2(vat_seat * participant_count),
        participant_count=participant_count,
    )


AMOUNT_TOLERANCE = Decimal("0.01")


def amounts_match(received: float, expected: float) -> bool:
    """
    Compare deux montants en décimal exact: l'écart doit rester strictement
    inférieur à un centime (238.01 reçu pour 238.00 attendu est refusé).
    """
    try:
        diff = abs(Decimal(str(received)) - Decimal(str(expected)))
    except (ArithmeticError, ValueError):
        return False
    if not diff.is_finite():
        return False
    return diff < AMOUNT_TOLERANCE
