import os

# Pas de Redis pendant les tests: doit être positionné avant l'import de l'app
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Any, Dict, Generator, List, Optional
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from seminar_backend.app import app as fastapi_app
from seminar_backend import dependencies
from seminar_backend.bookings.hooks import customer_link_hook, session_title_hook
from seminar_backend.bookings.models import Booking, BookingStatus
from seminar_backend.bookings.repository import BookingStore
from seminar_backend.bookings.service import BookingService
from seminar_backend.catalog.models import Course, Location, Session, SessionDay
from seminar_backend.catalog.repository import CatalogStore
from seminar_backend.config import Settings
from seminar_backend.customers.repository import CustomerStore
from seminar_backend.customers.service import CustomerLinker
from seminar_backend.errors import PaymentProviderError
from seminar_backend.payments.verifier import PaymentVerifier
from seminar_backend.payments.webhook import WebhookReconciler
from seminar_backend.pricing.quote import PricingService
from seminar_backend.vouchers.evaluator import VoucherEvaluator
from seminar_backend.vouchers.models import Voucher
from seminar_backend.vouchers.repository import VoucherStore, code_variants

TODAY = "2025-06-15"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "tests/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)


# --- Stores en mémoire (mêmes règles que les implémentations Supabase) ---

class InMemoryCatalogStore(CatalogStore):
    def __init__(self):
        self.sessions: Dict[int, Session] = {}
        self.courses: Dict[int, Course] = {}
        self.locations: Dict[int, Location] = {}
        self.title_updates: List[tuple] = []

    def get_session(self, session_id):
        return self.sessions.get(session_id)

    def get_course(self, course_id):
        return self.courses.get(course_id)

    def get_location(self, location_id):
        return self.locations.get(location_id)

    def update_session_title(self, session_id, title):
        from dataclasses import replace
        self.title_updates.append((session_id, title))
        self.sessions[session_id] = replace(self.sessions[session_id], title=title)
        return True


class InMemoryVoucherStore(VoucherStore):
    def __init__(self, vouchers: Optional[List[Voucher]] = None):
        self.vouchers = {v.code: v for v in (vouchers or [])}
        self.lookups: List[str] = []

    def find_by_code(self, code):
        self.lookups.append(code)
        for variant in code_variants(code):
            if variant in self.vouchers:
                return self.vouchers[variant]
        return None


class InMemoryBookingStore(BookingStore):
    def __init__(self):
        self.rows: Dict[int, Dict[str, Any]] = {}
        self.paid_transitions = 0
        self._next_id = 1

    def create(self, booking):
        booking.id = self._next_id
        self._next_id += 1
        self.rows[booking.id] = booking.to_row()
        self.rows[booking.id]["id"] = booking.id
        if booking.status == BookingStatus.PAID:
            self.paid_transitions += 1
        return booking

    def get(self, booking_id):
        row = self.rows.get(booking_id)
        return Booking.from_row(row) if row else None

    def find_by_payment_reference(self, reference):
        for row in self.rows.values():
            if reference and row.get("payment_reference") == reference:
                return Booking.from_row(row)
        return None

    def update(self, booking):
        row = booking.to_row()
        row.pop("status", None)
        self.rows[booking.id].update(row)
        return booking

    def mark_paid(self, booking_id, payment_method, payment_reference):
        row = self.rows.get(booking_id)
        if not row or row.get("status") != BookingStatus.OPEN.value:
            return False
        row.update({"status": "paid", "payment_method": payment_method, "payment_reference": payment_reference})
        self.paid_transitions += 1
        return True

    def set_customer(self, booking_id, customer_id):
        self.rows[booking_id]["customer_id"] = customer_id


class InMemoryCustomerStore(CustomerStore):
    def __init__(self):
        self.rows: List[Dict[str, Any]] = []

    def find_by_email(self, email):
        return next((r for r in self.rows if r["email"] == email), None)

    def create(self, data):
        row = dict(data, id=len(self.rows) + 1)
        self.rows.append(row)
        return row


class FakePayPal:
    """Double du PayPalClient: captures/commandes préparées par les tests, appels enregistrés."""

    def __init__(self):
        self.captures: Dict[str, Dict[str, Any]] = {}
        self.orders: Dict[str, Dict[str, Any]] = {}
        self.signature_ok = True
        self.fail_with: Optional[Exception] = None
        self.calls: List[tuple] = []

    def add_capture(self, capture_id, value, currency="EUR", status="COMPLETED"):
        self.captures[capture_id] = {
            "id": capture_id,
            "status": status,
            "amount": {"value": value, "currency_code": currency},
        }

    async def get_capture(self, capture_id):
        self.calls.append(("capture", capture_id))
        if self.fail_with:
            raise self.fail_with
        if capture_id not in self.captures:
            raise PaymentProviderError("PayPal capture: HTTP 404", status_code=404)
        return self.captures[capture_id]

    async def get_order(self, order_id):
        self.calls.append(("order", order_id))
        if self.fail_with:
            raise self.fail_with
        if order_id not in self.orders:
            raise PaymentProviderError("PayPal order: HTTP 404", status_code=404)
        return self.orders[order_id]

    async def verify_webhook_signature(self, headers, event):
        self.calls.append(("verify", event.get("id")))
        if self.fail_with:
            raise self.fail_with
        return self.signature_ok


# --- Données catalogue de référence ---

def _seed_catalog(catalog: InMemoryCatalogStore) -> None:
    catalog.courses[10] = Course(id=10, name="WSET Level 2", slug="wset-2", default_price=99.0, vat_applicable=True)
    catalog.courses[20] = Course(id=20, name="Weinseminar", slug="wein", default_price=50.0, vat_applicable=False)
    catalog.courses[30] = Course(id=30, name="Sans prix", slug="sans-prix", default_price=None)
    catalog.locations[5] = Location(id=5, site_name="", venue="Weinkeller", city="Köln")
    catalog.sessions[1] = Session(
        id=1, course_id=10, price=119.0, capacity=12, location_id=5,
        days=[SessionDay("2025-09-21"), SessionDay("2025-09-20", "09:00:00")],
    )
    catalog.sessions[2] = Session(id=2, course_id=10, price=None, capacity=12, title="Déjà titré")
    catalog.sessions[3] = Session(id=3, course_id=20, price=0, capacity=8)
    catalog.sessions[4] = Session(id=4, course_id=30, price=None, capacity=8)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        vat_rate=19.0,
        prices_include_vat=True,
        paypal_mode="sandbox",
        paypal_client_id="client-id",
        paypal_client_secret="client-secret",
        paypal_webhook_id="WH-123",
    )


@pytest.fixture
def catalog() -> InMemoryCatalogStore:
    store = InMemoryCatalogStore()
    _seed_catalog(store)
    return store


@pytest.fixture
def voucher_store() -> InMemoryVoucherStore:
    return InMemoryVoucherStore([
        Voucher(code="MINUS50", kind="fixed-amount", value=50),
        Voucher(code="FREE100", kind="percentage", value=100),
        Voucher(code="SOMMER15", kind="percentage", value=15, valid_from="2025-06-01", valid_to="2025-08-31"),
        Voucher(code="OLD", kind="percentage", value=10, valid_to="2024-12-31"),
        Voucher(code="LATER", kind="percentage", value=10, valid_from="2026-01-01"),
        Voucher(code="OFF", kind="fixed-amount", value=20, active=False),
        Voucher(code="HUGE", kind="fixed-amount", value=10_000),
        Voucher(code="ONCE", kind="fixed-amount", value=10, usage_limit=1),
    ])


@pytest.fixture
def booking_store() -> InMemoryBookingStore:
    return InMemoryBookingStore()


@pytest.fixture
def customer_store() -> InMemoryCustomerStore:
    return InMemoryCustomerStore()


@pytest.fixture
def paypal() -> FakePayPal:
    return FakePayPal()


@pytest.fixture
def evaluator(voucher_store) -> VoucherEvaluator:
    return VoucherEvaluator(voucher_store, today=lambda: TODAY)


@pytest.fixture
def pricing(settings, catalog, evaluator) -> PricingService:
    return PricingService(settings, catalog, evaluator)


@pytest.fixture
def verifier(paypal, pricing) -> PaymentVerifier:
    return PaymentVerifier(paypal, pricing)


@pytest.fixture
def booking_service(booking_store, pricing, verifier, customer_store, catalog) -> BookingService:
    hooks = [
        customer_link_hook(CustomerLinker(customer_store), booking_store),
        session_title_hook(catalog),
    ]
    return BookingService(booking_store, pricing, verifier, hooks)


@pytest.fixture
def reconciler(paypal, booking_store) -> WebhookReconciler:
    return WebhookReconciler(paypal, booking_store)


# --- App FastAPI ---

@pytest.fixture(scope="session")
def app():
    return fastapi_app


@pytest.fixture()
def client(app, settings, catalog, evaluator, booking_store, customer_store, paypal) -> Generator[TestClient, None, None]:
    """Client API avec stores en mémoire et PayPal simulé (aucun accès réseau ni Supabase)."""
    app.dependency_overrides[dependencies.get_app_settings] = lambda: settings
    app.dependency_overrides[dependencies.get_catalog_store] = lambda: catalog
    app.dependency_overrides[dependencies.get_voucher_store] = lambda: evaluator.store
    app.dependency_overrides[dependencies.get_booking_store] = lambda: booking_store
    app.dependency_overrides[dependencies.get_customer_store] = lambda: customer_store
    app.dependency_overrides[dependencies.get_paypal_client] = lambda: paypal
    # Date figée pour les fenêtres de validité des bons
    app.dependency_overrides[dependencies.get_pricing_service] = lambda: PricingService(settings, catalog, evaluator)
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


# Aucun test ne doit joindre Supabase
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("seminar_backend.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("seminar_backend.infra.supabase_client.get_service_supabase", lambda: MagicMock())
    monkeypatch.setattr("seminar_backend.health.service.health_supabase_info", lambda: {"connect_ok": True})
