"""
Réconciliation des webhooks PayPal.
- Signature vérifiée via l'API PayPal; non vérifié => accusé de réception sans action.
- PAYMENT.CAPTURE.COMPLETED: réservation retrouvée par référence de paiement,
  devise EUR et montant au centime près vs total brut enregistré, puis open -> paid.
- Toujours un accusé de réception: PayPal relivre tant qu'il ne reçoit pas de 2xx.
"""
from typing import Any, Dict, Mapping
import json
import logging

from seminar_backend.bookings.models import BookingStatus
from seminar_backend.bookings.repository import BookingStore
from seminar_backend.payments.paypal_client import PayPalClient
from seminar_backend.payments.verifier import EXPECTED_CURRENCY, read_capture_amount
from seminar_backend.pricing.money import amounts_match

logger = logging.getLogger(__name__)

CAPTURE_COMPLETED = "PAYMENT.CAPTURE.COMPLETED"


class WebhookReconciler:
    def __init__(self, paypal: PayPalClient, bookings: BookingStore):
        self.paypal = paypal
        self.bookings = bookings

    async def handle_event(self, raw_body: bytes, headers: Mapping[str, str]) -> Dict[str, Any]:
        try:
            event = json.loads(raw_body or b"{}")
            if not isinstance(event, dict):
                logger.warning("Webhook PayPal: corps inattendu (%s)", type(event).__name__)
                return {"ok": True, "verified": False}

            try:
                verified = await self.paypal.verify_webhook_signature(headers, event)
            except Exception as e:
                logger.warning("Webhook PayPal: vérification de signature impossible: %s", e)
                verified = False
            if not verified:
                return {"ok": True, "verified": False}

            outcome = "ignored"
            if event.get("event_type") == CAPTURE_COMPLETED:
                outcome = self._on_capture_completed(event.get("resource") or {})
            return {"ok": True, "verified": True, "outcome": outcome}
        except Exception:
            logger.exception("Webhook PayPal: erreur interne")
            return {"ok": True}

    def _on_capture_completed(self, resource: Dict[str, Any]) -> str:
        capture_id = resource.get("id") or resource.get("capture_id")
        if not capture_id:
            logger.warning("Webhook PayPal: capture sans identifiant")
            return "missing_capture_id"

        booking = self.bookings.find_by_payment_reference(capture_id)
        if booking is None:
            logger.info("Webhook PayPal: aucune réservation pour la capture %s", capture_id)
            return "not_found"
        if booking.status == BookingStatus.PAID:
            return "already_paid"

        amount, currency = read_capture_amount(resource)
        if currency != EXPECTED_CURRENCY:
            logger.warning("Webhook PayPal: devise %s pour la réservation %s", currency, booking.id)
            return "currency_mismatch"
        expected = booking.pricing.total_gross if booking.pricing else None
        if amount is None or expected is None or not amounts_match(amount, expected):
            logger.warning(
                "Webhook PayPal: montant %s reçu, %s attendu (réservation %s)", amount, expected, booking.id
            )
            return "amount_mismatch"

        if not self.bookings.mark_paid(booking.id, "paypal", capture_id):
            # Un autre chemin (vérification synchrone ou doublon) est passé avant
            return "already_paid"
        logger.info("Réservation %s payée (capture %s)", booking.id, capture_id)
        return "paid"
