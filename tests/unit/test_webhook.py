import json
import pytest

from seminar_backend.bookings.schemas import BookingCreateRequest
from seminar_backend.errors import PaymentProviderError


def _event(capture_id="CAP-1", value="238.00", currency="EUR", event_type="PAYMENT.CAPTURE.COMPLETED"):
    return json.dumps({
        "id": "WH-EVT-1",
        "event_type": event_type,
        "resource": {
            "id": capture_id,
            "status": "COMPLETED",
            "amount": {"value": value, "currency_code": currency},
        },
    }).encode()


async def _open_booking(booking_service, reference="CAP-1"):
    request = BookingCreateRequest.model_validate({
        "sessionId": 1,
        "email": "anna@example.com",
        "participants": [
            {"firstName": "Anna", "lastName": "Muster"},
            {"firstName": "Ben", "lastName": "Beispiel"},
        ],
        "termsAccepted": True,
        "paymentMethod": "paypal",
        "paymentReference": reference,
    })
    return await booking_service.create_booking(request)


@pytest.mark.asyncio
async def test_completed_capture_marks_booking_paid(reconciler, booking_service, booking_store):
    booking = await _open_booking(booking_service)

    res = await reconciler.handle_event(_event(), {})

    assert res == {"ok": True, "verified": True, "outcome": "paid"}
    assert booking_store.rows[booking.id]["status"] == "paid"
    assert booking_store.paid_transitions == 1


@pytest.mark.asyncio
async def test_duplicate_delivery_is_idempotent(reconciler, booking_service, booking_store):
    await _open_booking(booking_service)

    first = await reconciler.handle_event(_event(), {})
    second = await reconciler.handle_event(_event(), {})

    assert first["outcome"] == "paid"
    assert second["outcome"] == "already_paid"
    assert booking_store.paid_transitions == 1


@pytest.mark.asyncio
async def test_booking_paid_synchronously_is_left_alone(reconciler, booking_service, booking_store, customer_store, paypal):
    # Scénario E: capture vérifiée à la création, puis webhook
    paypal.add_capture("CAP-E", "238.00")
    request = BookingCreateRequest.model_validate({
        "sessionId": 1,
        "email": "anna@example.com",
        "participants": [
            {"firstName": "Anna", "lastName": "Muster"},
            {"firstName": "Ben", "lastName": "Beispiel"},
        ],
        "termsAccepted": True,
        "paypalCaptureId": "CAP-E",
    })
    booking = await booking_service.create_booking(request)
    customers_before = list(customer_store.rows)

    res = await reconciler.handle_event(_event("CAP-E"), {})

    assert res["outcome"] == "already_paid"
    assert booking_store.paid_transitions == 1
    assert booking_store.rows[booking.id]["status"] == "paid"
    assert customer_store.rows == customers_before


@pytest.mark.asyncio
async def test_unverified_event_changes_nothing(reconciler, booking_service, booking_store, paypal):
    booking = await _open_booking(booking_service)
    paypal.signature_ok = False

    res = await reconciler.handle_event(_event(), {})

    assert res == {"ok": True, "verified": False}
    assert booking_store.rows[booking.id]["status"] == "open"


@pytest.mark.asyncio
async def test_signature_check_failure_counts_as_unverified(reconciler, booking_service, booking_store, paypal):
    booking = await _open_booking(booking_service)
    paypal.fail_with = PaymentProviderError("PayPal token: HTTP 500", status_code=500)

    res = await reconciler.handle_event(_event(), {})

    assert res == {"ok": True, "verified": False}
    assert booking_store.rows[booking.id]["status"] == "open"


@pytest.mark.asyncio
@pytest.mark.parametrize("value,currency,outcome", [
    ("238.01", "EUR", "amount_mismatch"),
    ("100.00", "EUR", "amount_mismatch"),
    ("238.00", "USD", "currency_mismatch"),
    (None, "EUR", "amount_mismatch"),
])
async def test_mismatching_capture_is_not_applied(reconciler, booking_service, booking_store, value, currency, outcome):
    booking = await _open_booking(booking_service)

    res = await reconciler.handle_event(_event(value=value, currency=currency), {})

    assert res["outcome"] == outcome
    assert booking_store.rows[booking.id]["status"] == "open"
    assert booking_store.paid_transitions == 0


@pytest.mark.asyncio
async def test_unknown_capture_and_other_events(reconciler, booking_service):
    await _open_booking(booking_service)

    assert (await reconciler.handle_event(_event("CAP-404"), {}))["outcome"] == "not_found"
    assert (await reconciler.handle_event(_event(capture_id=None), {}))["outcome"] == "missing_capture_id"
    other = await reconciler.handle_event(_event(event_type="CHECKOUT.ORDER.APPROVED"), {})
    assert other == {"ok": True, "verified": True, "outcome": "ignored"}


@pytest.mark.asyncio
async def test_internal_errors_are_still_acknowledged(reconciler, booking_store, monkeypatch):
    def boom(reference):
        raise RuntimeError("supabase down")

    monkeypatch.setattr(booking_store, "find_by_payment_reference", boom)
    assert await reconciler.handle_event(_event(), {}) == {"ok": True}


@pytest.mark.asyncio
async def test_unreadable_body_is_acknowledged(reconciler, paypal):
    assert await reconciler.handle_event(b"{not json", {}) == {"ok": True}
    assert await reconciler.handle_event(b"[1, 2]", {}) == {"ok": True, "verified": False}
    assert paypal.calls == []
