"""
Module 'payments' (feature-first): point d'entrée public.
Réunit le client PayPal, le jeton de contexte de commande, la vérification des captures
et la réconciliation des webhooks.
"""

from .context import OrderContext, parse_context_token, context_from_order
from .paypal_client import PayPalClient
from .verifier import PaymentContext, PaymentVerifier, VerificationResult
from .webhook import WebhookReconciler

__all__ = [
    # context
    "OrderContext",
    "parse_context_token",
    "context_from_order",
    # paypal
    "PayPalClient",
    # verification
    "PaymentContext",
    "PaymentVerifier",
    "VerificationResult",
    # webhook
    "WebhookReconciler",
]
