"""
POST /public/vouchers/validate: devis avec ou sans code promo.
Répond toujours 200: un code absent/invalide ou une session inconnue donne simplement valid=false.
"""
from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError

from seminar_backend.bookings.schemas import VoucherValidateRequest, normalize_session_ref
from seminar_backend.dependencies import get_pricing_service
from seminar_backend.errors import BookingError
from seminar_backend.pricing.quote import PricingService, Quote
from seminar_backend.utils.rate_limit import optional_rate_limit

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/public/vouchers", tags=["Vouchers"])


def _participant_count(raw: Any) -> int:
    try:
        count = int(raw)
    except (TypeError, ValueError):
        return 1
    return count if count >= 1 else 1


def quote_to_payload(quote: Quote) -> Dict[str, Any]:
    evaluation = quote.voucher
    payload: Dict[str, Any] = {
        "valid": evaluation.valid,
        "original": {
            "pricePerSeatGross": quote.original.price_gross_per_seat,
            "totalGross": quote.original.total_gross,
        },
        "discount": {
            "kind": evaluation.kind,
            "value": evaluation.value,
            "amountGross": evaluation.discount_gross,
        },
        "total": {
            "pricePerSeatGross": quote.breakdown.price_gross_per_seat,
            "totalGross": quote.breakdown.total_gross,
            "totalNet": quote.breakdown.total_net,
            "totalVatAmount": quote.breakdown.total_vat_amount,
        },
    }
    if evaluation.reason:
        payload["reason"] = evaluation.reason
    return payload


def rejected_payload(reason: str) -> Dict[str, Any]:
    """Même forme qu'un devis, montants à zéro, quand aucun devis n'a pu être calculé."""
    return {
        "valid": False,
        "reason": reason,
        "original": {"pricePerSeatGross": 0.0, "totalGross": 0.0},
        "discount": {"kind": None, "value": None, "amountGross": 0.0},
        "total": {"pricePerSeatGross": 0.0, "totalGross": 0.0, "totalNet": 0.0, "totalVatAmount": 0.0},
    }


@router.post("/validate", dependencies=[Depends(optional_rate_limit(times=30, seconds=60))])
async def validate_voucher(request: Request, pricing: PricingService = Depends(get_pricing_service)):
    try:
        try:
            body = await request.json()
        except ValueError:
            body = {}
        data = VoucherValidateRequest.model_validate(body if isinstance(body, dict) else {})
        ref = normalize_session_ref(data.raw_session_ref)
        if ref is None:
            return rejected_payload("session_required")
        quote = pricing.quote(ref.id, _participant_count(data.participant_count), data.effective_code)
        return quote_to_payload(quote)
    except BookingError as e:
        return rejected_payload(e.code)
    except PydanticValidationError:
        return rejected_payload("invalid_request")
    except Exception:
        logger.exception("Erreur validate_voucher")
        return rejected_payload("error")
