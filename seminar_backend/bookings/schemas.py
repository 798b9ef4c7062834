"""
Schémas d'entrée de l'API publique (pydantic).
- Champs en camelCase côté client (alias), snake_case côté Python.
- Les champs inconnus (status, totaux, prix...) sont ignorés: le serveur recalcule tout.
- normalize_session_ref: point unique de normalisation des références de session.
"""
from dataclasses import dataclass
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from seminar_backend.bookings.models import Booking, InvoicingType, Participant
from seminar_backend.errors import ValidationError


class _PublicModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _empty_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v.strip() if isinstance(v, str) else v


class ParticipantIn(_PublicModel):
    first_name: str = ""
    last_name: str = ""
    email: Optional[EmailStr] = None
    birthdate: Optional[str] = None
    candidate_number: Optional[str] = None
    special_needs: Optional[str] = None

    @field_validator("email", "birthdate", "candidate_number", "special_needs", mode="before")
    @classmethod
    def _optional_text(cls, v):
        return _empty_to_none(v)

    def to_participant(self) -> Participant:
        return Participant(
            first_name=(self.first_name or "").strip(),
            last_name=(self.last_name or "").strip(),
            email=str(self.email) if self.email else None,
            birthdate=self.birthdate,
            candidate_number=self.candidate_number,
            special_needs=self.special_needs,
        )


class _BuyerFields(_PublicModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    invoice_email: Optional[EmailStr] = None
    street: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None

    @field_validator(
        "first_name", "last_name", "email", "phone", "company_name", "tax_id",
        "invoice_email", "street", "postal_code", "city", "country",
        mode="before",
    )
    @classmethod
    def _optional_text(cls, v):
        return _empty_to_none(v)


class BookingCreateRequest(_BuyerFields):
    invoicing_type: InvoicingType = InvoicingType.PRIVATE
    participants: List[ParticipantIn] = Field(default_factory=list)
    # Référence de session: id, "12", {"id": 12} ou {"connect": [{"id": 12}]}
    session_id: Any = None
    session: Any = None
    # Commande PayPal: permet de retrouver la session si aucune référence n'est fournie
    order_id: Optional[str] = None
    voucher_code: Optional[str] = None
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    capture_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("paypalCaptureId", "captureId", "capture_id"))
    terms_accepted: bool = False
    privacy_acknowledged: bool = False
    newsletter_opt_in: bool = False
    notes: Optional[str] = None

    @field_validator("order_id", "voucher_code", "payment_method", "payment_reference", "capture_id", "notes", mode="before")
    @classmethod
    def _optional_refs(cls, v):
        return _empty_to_none(v)

    @property
    def raw_session_ref(self) -> Any:
        return self.session_id if self.session_id is not None else self.session

    def to_draft(self, session_id: int) -> Booking:
        return Booking(
            session_id=session_id,
            participants=[p.to_participant() for p in self.participants],
            invoicing_type=self.invoicing_type,
            first_name=self.first_name,
            last_name=self.last_name,
            email=str(self.email) if self.email else None,
            phone=self.phone,
            company_name=self.company_name,
            tax_id=self.tax_id,
            invoice_email=str(self.invoice_email) if self.invoice_email else None,
            street=self.street,
            postal_code=self.postal_code,
            city=self.city,
            country=self.country,
            voucher_code=self.voucher_code,
            terms_accepted=self.terms_accepted,
            privacy_acknowledged=self.privacy_acknowledged,
            newsletter_opt_in=self.newsletter_opt_in,
            notes=self.notes,
        )


class BookingUpdateRequest(_BuyerFields):
    """Modification d'une réservation existante (back-office). Le statut n'est jamais modifiable."""
    invoicing_type: Optional[InvoicingType] = None
    participants: Optional[List[ParticipantIn]] = None
    voucher_code: Optional[str] = None
    vat_applicable: Optional[bool] = None
    # Prix d'amorçage explicite: un seul des deux, l'autre est dérivé
    price_gross: Optional[float] = None
    price_net: Optional[float] = None
    notes: Optional[str] = None


class VoucherValidateRequest(_PublicModel):
    session_id: Any = None
    session: Any = None
    participant_count: Any = 1
    code: Optional[str] = None
    voucher_code: Optional[str] = None

    @property
    def raw_session_ref(self) -> Any:
        return self.session_id if self.session_id is not None else self.session

    @property
    def effective_code(self) -> Optional[str]:
        return _empty_to_none(self.code or self.voucher_code)


@dataclass(frozen=True)
class SessionRef:
    id: int


def normalize_session_ref(raw: Any) -> Optional[SessionRef]:
    """
    Ramène les différentes formes de référence à un SessionRef strict.
    None/"" -> None; forme reconnue mais invalide -> ValidationError.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if isinstance(raw, bool):
        raise ValidationError("Référence de session invalide", code="invalid_session_ref")
    if isinstance(raw, int):
        if raw < 1:
            raise ValidationError("Référence de session invalide", code="invalid_session_ref")
        return SessionRef(raw)
    if isinstance(raw, str):
        value = raw.strip()
        if value.isdigit() and int(value) > 0:
            return SessionRef(int(value))
        raise ValidationError("Référence de session invalide", code="invalid_session_ref")
    if isinstance(raw, dict):
        if "id" in raw:
            return normalize_session_ref(raw["id"])
        for key in ("connect", "set"):
            if key in raw:
                inner = raw[key]
                if isinstance(inner, list):
                    if len(inner) != 1:
                        raise ValidationError("Une seule session peut être réservée", code="invalid_session_ref")
                    inner = inner[0]
                return normalize_session_ref(inner)
    raise ValidationError("Référence de session invalide", code="invalid_session_ref")
