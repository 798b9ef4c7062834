"""Couche service des réservations publiques.
Rôles:
- Créer une réservation: normalisation de la session, validation, tarif serveur,
  vérification éventuelle de la capture PayPal, écriture, puis hooks post-écriture.
- Modifier une réservation: recalcul du tarif si un champ tarifaire change (statut intouchable).
- Exposer une projection publique minimale.
"""
from typing import List, Optional, Sequence, Tuple
import logging

from seminar_backend.bookings.hooks import PostCommitHook, run_post_commit_hooks
from seminar_backend.bookings.models import Booking, InvoicingType
from seminar_backend.bookings.repository import BookingStore
from seminar_backend.bookings.schemas import (
    BookingCreateRequest,
    BookingUpdateRequest,
    SessionRef,
    normalize_session_ref,
)
from seminar_backend.errors import BookingNotFoundError, PaymentVerificationError, PricingError, ValidationError
from seminar_backend.payments.verifier import PaymentContext, PaymentVerifier
from seminar_backend.pricing.money import derive_pricing
from seminar_backend.pricing.quote import PricingService

logger = logging.getLogger(__name__)

PAYPAL = "paypal"

VERIFICATION_MESSAGES = {
    "provider_error": "fournisseur de paiement injoignable",
    "status_not_completed": "paiement non finalisé",
    "currency_mismatch": "devise incorrecte",
    "amount_unreadable": "montant illisible",
    "amount_mismatch": "montant incorrect",
    "expected_amount_unavailable": "montant attendu incalculable",
}

_BUYER_FIELDS = (
    "first_name", "last_name", "email", "phone", "company_name", "tax_id",
    "invoice_email", "street", "postal_code", "city", "country", "notes",
)
_PRICING_FIELDS = {"participants", "invoicing_type", "voucher_code", "vat_applicable", "price_gross", "price_net"}


class BookingService:
    def __init__(
        self,
        bookings: BookingStore,
        pricing: PricingService,
        verifier: PaymentVerifier,
        hooks: Sequence[PostCommitHook] = (),
    ):
        self.bookings = bookings
        self.pricing = pricing
        self.verifier = verifier
        self.hooks: List[PostCommitHook] = list(hooks)

    async def _resolve_session(self, request: BookingCreateRequest) -> Tuple[SessionRef, Optional[int]]:
        """Renvoie la session et, si elle vient d'une commande PayPal, le nombre de places annoncé."""
        ref = normalize_session_ref(request.raw_session_ref)
        if ref is not None:
            return ref, None
        if request.order_id:
            context = await self.verifier.resolve_order_context(request.order_id)
            if context is not None:
                if context.participant_count and context.participant_count != len(request.participants):
                    logger.warning(
                        "Commande %s: %s places annoncées, %s participants reçus",
                        request.order_id, context.participant_count, len(request.participants),
                    )
                return SessionRef(context.session_id), context.participant_count
        raise ValidationError("Une session doit être indiquée", code="session_required")

    async def create_booking(self, request: BookingCreateRequest) -> Booking:
        ref, announced_count = await self._resolve_session(request)

        booking = request.to_draft(ref.id)
        booking.validate()

        quote = self.pricing.quote(ref.id, booking.participant_count, booking.voucher_code)
        booking.apply_pricing(quote.breakdown)
        booking.open()

        if request.capture_id:
            # Le tarif suit la liste des participants reçue: elle doit correspondre aux places payées
            if announced_count and announced_count != booking.participant_count:
                raise PaymentVerificationError(
                    "Vérification du paiement échouée: nombre de places différent de la commande",
                    code="participant_count_mismatch",
                )
            # Une capture ne paie qu'une seule réservation
            if self.bookings.find_by_payment_reference(request.capture_id) is not None:
                logger.warning("Capture %s déjà rattachée à une réservation", request.capture_id)
                raise PaymentVerificationError(
                    "Vérification du paiement échouée: paiement déjà utilisé",
                    code="capture_already_used",
                )
            booking.payment_method = PAYPAL
            booking.payment_reference = request.capture_id
            result = await self.verifier.verify_capture(
                request.capture_id,
                PaymentContext(ref.id, booking.participant_count, booking.voucher_code),
            )
            if not result.ok:
                label = VERIFICATION_MESSAGES.get(result.reason or "", result.reason or "erreur inconnue")
                raise PaymentVerificationError(f"Vérification du paiement échouée: {label}")
            booking.mark_paid(PAYPAL, request.capture_id)
        else:
            booking.payment_method = request.payment_method
            booking.payment_reference = request.payment_reference

        created = self.bookings.create(booking)
        run_post_commit_hooks(created, self.hooks)
        return created

    def update_booking(self, booking_id: int, changes: BookingUpdateRequest) -> Booking:
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError()

        provided = changes.model_fields_set
        for name in _BUYER_FIELDS:
            if name in provided:
                value = getattr(changes, name)
                setattr(booking, name, str(value) if value is not None and name.endswith("email") else value)
        if "invoicing_type" in provided and changes.invoicing_type is not None:
            booking.invoicing_type = InvoicingType(changes.invoicing_type)
        if "participants" in provided and changes.participants is not None:
            booking.participants = [p.to_participant() for p in changes.participants]
        if "voucher_code" in provided:
            booking.voucher_code = changes.voucher_code or None

        booking.validate()

        if provided & _PRICING_FIELDS or booking.pricing is None:
            booking.apply_pricing(self._reprice(booking, changes))
        return self.bookings.update(booking)

    def _reprice(self, booking: Booking, changes: BookingUpdateRequest):
        vat_override: Optional[bool] = changes.vat_applicable
        if changes.price_gross is not None or changes.price_net is not None:
            if changes.price_gross is not None and changes.price_net is not None:
                raise PricingError("Un seul prix (brut ou net) peut être fourni", code="ambiguous_price")
            if vat_override is None:
                vat_override = booking.pricing.vat_applicable if booking.pricing else True
            # Prix saisi à la main: devis indicatif, n'autorise jamais le passage à "payé"
            return derive_pricing(
                booking.participant_count,
                gross=changes.price_gross,
                net=changes.price_net,
                vat_applicable=vat_override,
                vat_rate=self.pricing.settings.vat_rate,
            )
        if vat_override is None and booking.pricing is not None:
            vat_override = booking.pricing.vat_applicable
        quote = self.pricing.quote(booking.session_id, booking.participant_count, booking.voucher_code, vat_override)
        return quote.breakdown

    def get_public_booking(self, booking_id: int) -> dict:
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError()
        return booking.public_view()
