"""
Câblage des services via les dépendances FastAPI.
Chaque requête reçoit des services neufs construits à partir de `Settings` et des stores Supabase;
les tests remplacent les stores via app.dependency_overrides.
"""
from typing import List

from fastapi import Depends

from seminar_backend.bookings.hooks import PostCommitHook, customer_link_hook, session_title_hook
from seminar_backend.bookings.repository import BookingStore, SupabaseBookingStore
from seminar_backend.bookings.service import BookingService
from seminar_backend.catalog.repository import CatalogStore, SupabaseCatalogStore
from seminar_backend.config import Settings, get_settings
from seminar_backend.customers.repository import CustomerStore, SupabaseCustomerStore
from seminar_backend.customers.service import CustomerLinker
from seminar_backend.payments.paypal_client import PayPalClient
from seminar_backend.payments.verifier import PaymentVerifier
from seminar_backend.payments.webhook import WebhookReconciler
from seminar_backend.pricing.quote import PricingService
from seminar_backend.vouchers.evaluator import VoucherEvaluator
from seminar_backend.vouchers.repository import SupabaseVoucherStore, VoucherStore


def get_app_settings() -> Settings:
    return get_settings()


def get_catalog_store() -> CatalogStore:
    return SupabaseCatalogStore()


def get_voucher_store() -> VoucherStore:
    return SupabaseVoucherStore()


def get_booking_store() -> BookingStore:
    return SupabaseBookingStore()


def get_customer_store() -> CustomerStore:
    return SupabaseCustomerStore()


def get_paypal_client(settings: Settings = Depends(get_app_settings)) -> PayPalClient:
    return PayPalClient(settings)


def get_pricing_service(
    settings: Settings = Depends(get_app_settings),
    catalog: CatalogStore = Depends(get_catalog_store),
    vouchers: VoucherStore = Depends(get_voucher_store),
) -> PricingService:
    return PricingService(settings, catalog, VoucherEvaluator(vouchers))


def get_payment_verifier(
    paypal: PayPalClient = Depends(get_paypal_client),
    pricing: PricingService = Depends(get_pricing_service),
) -> PaymentVerifier:
    return PaymentVerifier(paypal, pricing)


def get_post_commit_hooks(
    bookings: BookingStore = Depends(get_booking_store),
    customers: CustomerStore = Depends(get_customer_store),
    catalog: CatalogStore = Depends(get_catalog_store),
) -> List[PostCommitHook]:
    return [
        customer_link_hook(CustomerLinker(customers), bookings),
        session_title_hook(catalog),
    ]


def get_booking_service(
    bookings: BookingStore = Depends(get_booking_store),
    pricing: PricingService = Depends(get_pricing_service),
    verifier: PaymentVerifier = Depends(get_payment_verifier),
    hooks: List[PostCommitHook] = Depends(get_post_commit_hooks),
) -> BookingService:
    return BookingService(bookings, pricing, verifier, hooks)


def get_webhook_reconciler(
    paypal: PayPalClient = Depends(get_paypal_client),
    bookings: BookingStore = Depends(get_booking_store),
) -> WebhookReconciler:
    return WebhookReconciler(paypal, bookings)
