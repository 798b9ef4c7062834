"""
Agrégat Réservation (Booking).

Cycle de vie: DRAFT -> OPEN -> PAID, sans retour arrière.
- DRAFT n'existe qu'en mémoire pendant la validation de la requête (jamais persisté);
- OPEN: tarif calculé côté serveur, en attente de paiement;
- PAID: uniquement après une vérification de montant/devise réussie (vérificateur ou webhook).
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from seminar_backend.errors import BookingError, PricingError, ValidationError
from seminar_backend.pricing.money import PricingBreakdown


class InvoicingType(str, Enum):
    PRIVATE = "private"
    COMPANY = "company"


class BookingStatus(str, Enum):
    DRAFT = "draft"
    OPEN = "open"
    PAID = "paid"


COMPANY_REQUIRED_FIELDS = {
    "company_name": "nom de la société",
    "invoice_email": "e-mail de facturation",
    "street": "rue",
    "postal_code": "code postal",
    "city": "ville",
    "country": "pays",
}


@dataclass
class Participant:
    first_name: str
    last_name: str
    email: Optional[str] = None
    birthdate: Optional[str] = None
    candidate_number: Optional[str] = None
    special_needs: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "birthdate": self.birthdate,
            "candidate_number": self.candidate_number,
            "special_needs": self.special_needs,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Participant":
        return cls(
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            email=data.get("email"),
            birthdate=data.get("birthdate"),
            candidate_number=data.get("candidate_number"),
            special_needs=data.get("special_needs"),
        )


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


@dataclass
class Booking:
    session_id: int
    participants: List[Participant] = field(default_factory=list)
    invoicing_type: InvoicingType = InvoicingType.PRIVATE
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    invoice_email: Optional[str] = None
    street: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    voucher_code: Optional[str] = None
    terms_accepted: bool = False
    privacy_acknowledged: bool = False
    newsletter_opt_in: bool = False
    notes: Optional[str] = None
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    customer_id: Optional[int] = None
    pricing: Optional[PricingBreakdown] = None
    status: BookingStatus = BookingStatus.DRAFT
    id: Optional[int] = None

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def is_company(self) -> bool:
        return self.invoicing_type == InvoicingType.COMPANY

    @property
    def customer_email(self) -> Optional[str]:
        """E-mail de rattachement client: e-mail de facturation pour une société, sinon e-mail de contact."""
        if self.is_company:
            return (self.invoice_email or self.email or "").strip() or None
        return (self.email or "").strip() or None

    # -- validation -------------------------------------------------------

    def validate(self) -> None:
        if not self.participants:
            raise ValidationError("Au moins un participant est requis", code="participants_required")
        for index, p in enumerate(self.participants, start=1):
            if _blank(p.first_name) or _blank(p.last_name):
                raise ValidationError(
                    f"Le participant {index} doit avoir un prénom et un nom",
                    code="participant_name_required",
                )
        if self.is_company:
            for attr, label in COMPANY_REQUIRED_FIELDS.items():
                if _blank(getattr(self, attr)):
                    raise ValidationError(
                        f"Champ société obligatoire manquant: {label}",
                        code="company_field_required",
                    )
        if not self.terms_accepted:
            raise ValidationError("Les conditions générales doivent être acceptées", code="terms_required")

    # -- tarif et statut --------------------------------------------------

    def apply_pricing(self, breakdown: PricingBreakdown) -> None:
        if breakdown.participant_count != self.participant_count:
            raise PricingError("Nombre de places incohérent avec les participants", code="participant_count_mismatch")
        self.pricing = breakdown

    def open(self) -> bool:
        """DRAFT -> OPEN. Sans effet (False) si la réservation est déjà ouverte ou payée."""
        if self.status != BookingStatus.DRAFT:
            return False
        if self.pricing is None:
            raise BookingError("Tarif non calculé", code="pricing_missing")
        self.status = BookingStatus.OPEN
        return True

    def mark_paid(self, payment_method: str, payment_reference: Optional[str]) -> bool:
        """OPEN -> PAID. Idempotent: une réservation déjà payée reste inchangée (False)."""
        if self.status == BookingStatus.PAID:
            return False
        if self.status != BookingStatus.OPEN:
            raise BookingError("Une réservation non ouverte ne peut pas être payée", code="invalid_transition")
        self.status = BookingStatus.PAID
        self.payment_method = payment_method
        if payment_reference:
            self.payment_reference = payment_reference
        return True

    # -- persistance / projections ----------------------------------------

    def to_row(self) -> Dict[str, Any]:
        pricing = self.pricing.to_dict() if self.pricing else {}
        row = {
            "session_id": self.session_id,
            "participants": [p.to_dict() for p in self.participants],
            "invoicing_type": self.invoicing_type.value,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "company_name": self.company_name,
            "tax_id": self.tax_id,
            "invoice_email": self.invoice_email,
            "street": self.street,
            "postal_code": self.postal_code,
            "city": self.city,
            "country": self.country,
            "voucher_code": self.voucher_code,
            "terms_accepted": self.terms_accepted,
            "privacy_acknowledged": self.privacy_acknowledged,
            "newsletter_opt_in": self.newsletter_opt_in,
            "notes": self.notes,
            "payment_method": self.payment_method,
            "payment_reference": self.payment_reference,
            "customer_id": self.customer_id,
            "status": self.status.value,
        }
        row.update(pricing)
        return row

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Booking":
        participants = [Participant.from_dict(p) for p in (row.get("participants") or []) if isinstance(p, dict)]
        pricing = None
        if row.get("total_gross") is not None:
            pricing = PricingBreakdown(
                vat_applicable=bool(row.get("vat_applicable")),
                vat_rate=float(row.get("vat_rate") or 0),
                price_gross_per_seat=float(row.get("price_gross_per_seat") or 0),
                price_net_per_seat=float(row.get("price_net_per_seat") or 0),
                vat_amount_per_seat=float(row.get("vat_amount_per_seat") or 0),
                total_gross=float(row.get("total_gross") or 0),
                total_net=float(row.get("total_net") or 0),
                total_vat_amount=float(row.get("total_vat_amount") or 0),
                participant_count=int(row.get("participant_count") or len(participants)),
            )
        return cls(
            id=row.get("id"),
            session_id=row.get("session_id"),
            participants=participants,
            invoicing_type=InvoicingType(row.get("invoicing_type") or "private"),
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            email=row.get("email"),
            phone=row.get("phone"),
            company_name=row.get("company_name"),
            tax_id=row.get("tax_id"),
            invoice_email=row.get("invoice_email"),
            street=row.get("street"),
            postal_code=row.get("postal_code"),
            city=row.get("city"),
            country=row.get("country"),
            voucher_code=row.get("voucher_code"),
            terms_accepted=bool(row.get("terms_accepted")),
            privacy_acknowledged=bool(row.get("privacy_acknowledged")),
            newsletter_opt_in=bool(row.get("newsletter_opt_in")),
            notes=row.get("notes"),
            payment_method=row.get("payment_method"),
            payment_reference=row.get("payment_reference"),
            customer_id=row.get("customer_id"),
            pricing=pricing,
            status=BookingStatus(row.get("status") or "open"),
        )

    def public_view(self) -> Dict[str, Any]:
        """Projection publique minimale (pas de données personnelles)."""
        pricing = self.pricing
        return {
            "id": self.id,
            "status": self.status.value,
            "paymentMethod": self.payment_method,
            "participantCount": self.participant_count,
            "totalGross": pricing.total_gross if pricing else None,
            "totalNet": pricing.total_net if pricing else None,
            "totalVatAmount": pricing.total_vat_amount if pricing else None,
        }

    def to_response(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "sessionId": self.session_id}
        if self.pricing:
            data.update(self.pricing.to_public())
        data["participantCount"] = self.participant_count
        data["status"] = self.status.value
        return data
