"""
Vérification d'une capture PayPal contre un montant attendu recalculé côté serveur.

Étapes: token OAuth2 -> lecture de la capture -> statut COMPLETED -> devise EUR
-> montant attendu recalculé (résolution du prix + bon + moteur de calcul) -> comparaison au centime.
Échec « fermé »: toute erreur produit un résultat non-ok, jamais un paiement supposé.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from seminar_backend.errors import BookingError, PaymentProviderError
from seminar_backend.payments.context import OrderContext, context_from_order
from seminar_backend.payments.paypal_client import PayPalClient
from seminar_backend.pricing.money import amounts_match
from seminar_backend.pricing.quote import PricingService

logger = logging.getLogger(__name__)

EXPECTED_CURRENCY = "EUR"


@dataclass(frozen=True)
class PaymentContext:
    session_id: int
    participant_count: int
    voucher_code: Optional[str] = None
    vat_override: Optional[bool] = None


@dataclass(frozen=True)
class VerificationResult:
    ok: bool
    reason: Optional[str] = None
    captured_amount: Optional[float] = None
    expected_amount: Optional[float] = None
    currency: Optional[str] = None


def read_capture_amount(capture: dict):
    """Retourne (montant, devise) d'une capture ou d'une ressource de webhook; (None, None) si illisible."""
    amount = (capture or {}).get("amount") or {}
    currency = (amount.get("currency_code") or "").upper() or None
    try:
        value = float(amount.get("value"))
    except (TypeError, ValueError):
        return None, currency
    return value, currency


class PaymentVerifier:
    def __init__(self, paypal: PayPalClient, pricing: PricingService):
        self.paypal = paypal
        self.pricing = pricing

    async def resolve_order_context(self, order_id: str) -> Optional[OrderContext]:
        """Lit la commande PayPal et décode son custom_id. None en cas d'échec (journalisé)."""
        if not order_id:
            return None
        try:
            order = await self.paypal.get_order(order_id)
        except PaymentProviderError as e:
            logger.warning("Commande PayPal %s illisible: %s", order_id, e)
            return None
        context = context_from_order(order)
        if context is None:
            logger.warning("Commande PayPal %s sans contexte de session exploitable", order_id)
        return context

    async def verify_capture(self, capture_id: str, context: PaymentContext) -> VerificationResult:
        if not capture_id:
            return VerificationResult(False, "missing_capture")
        try:
            capture = await self.paypal.get_capture(capture_id)
        except PaymentProviderError as e:
            logger.warning("Capture PayPal %s illisible: %s", capture_id, e)
            return VerificationResult(False, "provider_error")

        status = (capture.get("status") or "").upper()
        captured, currency = read_capture_amount(capture)
        if status != "COMPLETED":
            return VerificationResult(False, "status_not_completed", captured, None, currency)
        if currency != EXPECTED_CURRENCY:
            return VerificationResult(False, "currency_mismatch", captured, None, currency)
        if captured is None:
            return VerificationResult(False, "amount_unreadable", None, None, currency)

        try:
            quote = self.pricing.quote(
                context.session_id,
                context.participant_count,
                context.voucher_code,
                context.vat_override,
            )
        except BookingError as e:
            logger.warning("Montant attendu incalculable pour la capture %s: %s", capture_id, e)
            return VerificationResult(False, "expected_amount_unavailable", captured, None, currency)

        expected = quote.expected_total_gross
        if not amounts_match(captured, expected):
            logger.warning(
                "Capture %s: montant %.2f reçu, %.2f attendu", capture_id, captured, expected
            )
            return VerificationResult(False, "amount_mismatch", captured, expected, currency)
        return VerificationResult(True, None, captured, expected, currency)
