import pytest

from seminar_backend.bookings.models import Booking, BookingStatus, InvoicingType, Participant
from seminar_backend.bookings.schemas import BookingCreateRequest, SessionRef, normalize_session_ref
from seminar_backend.errors import BookingError, PricingError, ValidationError
from seminar_backend.pricing.money import derive_pricing


def _booking(**kwargs) -> Booking:
    data = dict(
        session_id=1,
        participants=[Participant("Anna", "Muster"), Participant("Ben", "Beispiel")],
        email="anna@example.com",
        terms_accepted=True,
    )
    data.update(kwargs)
    return Booking(**data)


def _company(**kwargs) -> Booking:
    data = dict(
        invoicing_type=InvoicingType.COMPANY,
        company_name="Weinhandel GmbH",
        invoice_email="rechnung@weinhandel.de",
        street="Hauptstr. 1",
        postal_code="50667",
        city="Köln",
        country="DE",
    )
    data.update(kwargs)
    return _booking(**data)


def test_validate_requires_participants():
    with pytest.raises(ValidationError) as exc:
        _booking(participants=[]).validate()
    assert exc.value.code == "participants_required"


@pytest.mark.parametrize("first,last", [("", "Muster"), ("Anna", " "), ("", "")])
def test_validate_requires_participant_names(first, last):
    with pytest.raises(ValidationError) as exc:
        _booking(participants=[Participant(first, last)]).validate()
    assert exc.value.code == "participant_name_required"


@pytest.mark.parametrize("missing", ["company_name", "invoice_email", "street", "postal_code", "city", "country"])
def test_company_fields_are_required(missing):
    with pytest.raises(ValidationError) as exc:
        _company(**{missing: ""}).validate()
    assert exc.value.code == "company_field_required"


def test_company_booking_with_all_fields_is_valid():
    _company().validate()


def test_terms_must_be_accepted():
    with pytest.raises(ValidationError) as exc:
        _booking(terms_accepted=False).validate()
    assert exc.value.code == "terms_required"


def test_customer_email_prefers_invoice_email_for_companies():
    assert _company().customer_email == "rechnung@weinhandel.de"
    assert _company(invoice_email=None).customer_email == "anna@example.com"
    assert _booking(invoice_email="x@y.de").customer_email == "anna@example.com"
    assert _booking(email=None).customer_email is None


def test_apply_pricing_rejects_count_mismatch():
    booking = _booking()
    with pytest.raises(PricingError):
        booking.apply_pricing(derive_pricing(3, gross=10))


def test_status_is_monotonic():
    booking = _booking()
    booking.apply_pricing(derive_pricing(2, gross=119))
    assert booking.open() is True
    assert booking.status == BookingStatus.OPEN
    assert booking.mark_paid("paypal", "CAP-1") is True
    assert booking.status == BookingStatus.PAID

    # Ni réouverture ni second paiement
    assert booking.open() is False
    assert booking.mark_paid("paypal", "CAP-2") is False
    assert booking.status == BookingStatus.PAID
    assert booking.payment_reference == "CAP-1"


def test_open_requires_pricing():
    with pytest.raises(BookingError):
        _booking().open()


def test_draft_cannot_be_paid():
    with pytest.raises(BookingError):
        _booking().mark_paid("paypal", "CAP-1")


def test_row_round_trip_keeps_pricing_and_participants():
    booking = _company()
    booking.participants[0].candidate_number = "WSET-1"
    booking.apply_pricing(derive_pricing(2, gross=119))
    booking.open()
    row = booking.to_row()
    row["id"] = 7

    restored = Booking.from_row(row)
    assert restored.id == 7
    assert restored.status == BookingStatus.OPEN
    assert restored.invoicing_type == InvoicingType.COMPANY
    assert restored.pricing == booking.pricing
    assert restored.participants[0].candidate_number == "WSET-1"
    assert row["participant_count"] == 2
    assert row["total_gross"] == 238.0


def test_public_view_has_no_personal_data():
    booking = _booking(id=3)
    booking.apply_pricing(derive_pricing(2, gross=119))
    booking.open()
    view = booking.public_view()
    assert view == {
        "id": 3,
        "status": "open",
        "paymentMethod": None,
        "participantCount": 2,
        "totalGross": 238.0,
        "totalNet": 200.0,
        "totalVatAmount": 38.0,
    }


@pytest.mark.parametrize("raw,expected", [
    (12, SessionRef(12)),
    ("12", SessionRef(12)),
    (" 7 ", SessionRef(7)),
    ({"id": 3}, SessionRef(3)),
    ({"id": "3"}, SessionRef(3)),
    ({"connect": [{"id": 4}]}, SessionRef(4)),
    ({"connect": {"id": 5}}, SessionRef(5)),
    ({"set": [6]}, SessionRef(6)),
    (None, None),
    ("", None),
])
def test_normalize_session_ref_accepts_known_shapes(raw, expected):
    assert normalize_session_ref(raw) == expected


@pytest.mark.parametrize("raw", [0, -1, True, "abc", "1.5", {"connect": []}, {"connect": [{"id": 1}, {"id": 2}]}, {"foo": 1}, [1], 1.5])
def test_normalize_session_ref_rejects_malformed(raw):
    with pytest.raises(ValidationError):
        normalize_session_ref(raw)


def test_create_request_ignores_client_status_and_prices():
    req = BookingCreateRequest.model_validate({
        "sessionId": 1,
        "participants": [{"firstName": "Anna", "lastName": "Muster", "email": ""}],
        "email": "anna@example.com",
        "termsAccepted": True,
        "status": "paid",
        "totalGross": 1,
        "paypalCaptureId": "CAP-9",
    })
    draft = req.to_draft(1)
    assert draft.status == BookingStatus.DRAFT
    assert draft.pricing is None
    assert draft.participants[0].email is None
    assert req.capture_id == "CAP-9"
    assert req.raw_session_ref == 1
