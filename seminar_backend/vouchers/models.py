from dataclasses import dataclass
from typing import Any, Dict, Optional

FIXED_AMOUNT = "fixed-amount"
PERCENTAGE = "percentage"
VOUCHER_KINDS = (FIXED_AMOUNT, PERCENTAGE)


@dataclass(frozen=True)
class Voucher:
    code: str
    kind: str
    value: float
    active: bool = True
    valid_from: Optional[str] = None
    valid_to: Optional[str] = None
    # Métadonnée seulement: aucun compteur d'utilisation n'est tenu
    usage_limit: Optional[int] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Voucher":
        try:
            value = float(row.get("value") or 0)
        except (TypeError, ValueError):
            value = 0.0
        return cls(
            code=str(row.get("code") or ""),
            kind=str(row.get("kind") or ""),
            value=value,
            active=bool(row.get("active")),
            valid_from=(str(row["valid_from"])[:10] if row.get("valid_from") else None),
            valid_to=(str(row["valid_to"])[:10] if row.get("valid_to") else None),
            usage_limit=row.get("usage_limit"),
        )

    def is_usable_on(self, today: str) -> bool:
        """today: date ISO AAAA-MM-JJ (comparaison lexicographique valide pour ce format)."""
        if not self.active:
            return False
        if self.valid_from and self.valid_from > today:
            return False
        if self.valid_to and self.valid_to < today:
            return False
        return True


@dataclass(frozen=True)
class VoucherEvaluation:
    valid: bool
    discount_gross: float
    original_total_gross: float
    discounted_total_gross: float
    reason: Optional[str] = None
    kind: Optional[str] = None
    value: Optional[float] = None
    # Nouveau prix unitaire brut, renseigné uniquement si une remise s'applique
    price_gross_per_seat: Optional[float] = None
