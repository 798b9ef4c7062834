import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from seminar_backend.dependencies import get_webhook_reconciler
from seminar_backend.payments.webhook import WebhookReconciler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/public", tags=["Payments"])

# module seminar_backend.payments.views
@router.post("/payment-webhook", include_in_schema=False)
async def paypal_webhook(request: Request, reconciler: WebhookReconciler = Depends(get_webhook_reconciler)):
    """
    Webhook PayPal.
    - Lit le corps brut (la vérification de signature porte sur l'événement reçu)
    - Délègue au réconciliateur (vérification PayPal, open -> paid si montant/devise conformes)
    - Répond toujours 200: une erreur interne est journalisée, jamais renvoyée à PayPal
    """
    try:
        raw = await request.body()
        ack = await reconciler.handle_event(raw, request.headers)
    except Exception:
        logger.exception("Erreur paypal_webhook")
        ack = {"ok": True}
    return JSONResponse(ack, status_code=200)
