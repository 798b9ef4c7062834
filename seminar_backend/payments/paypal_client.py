"""
Adaptateur PayPal REST: centralise les appels sortants (httpx asynchrone).
- get_access_token: échange client-credentials (OAuth2)
- get_order / get_capture: lecture commande / capture
- verify_webhook_signature: vérification déléguée à PayPal
Aucun retry interne: toute erreur remonte en PaymentProviderError.
Un client httpx est ouvert par appel (pas d'état partagé entre requêtes).
"""
from typing import Any, Dict, Mapping, Optional
import logging

import httpx

from seminar_backend.config import Settings
from seminar_backend.errors import PaymentProviderError

logger = logging.getLogger(__name__)

# En-têtes de transmission envoyés par PayPal avec chaque webhook
WEBHOOK_HEADERS = {
    "transmission_id": "paypal-transmission-id",
    "transmission_time": "paypal-transmission-time",
    "cert_url": "paypal-cert-url",
    "auth_algo": "paypal-auth-algo",
    "transmission_sig": "paypal-transmission-sig",
}


class PayPalClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.paypal_base_url,
            timeout=self.settings.http_timeout,
            transport=self._transport,
        )

    @staticmethod
    def _json(res: httpx.Response, what: str) -> Dict[str, Any]:
        if res.status_code >= 400:
            raise PaymentProviderError(f"PayPal {what}: HTTP {res.status_code}", status_code=res.status_code)
        try:
            data = res.json()
        except ValueError:
            raise PaymentProviderError(f"PayPal {what}: réponse illisible", status_code=res.status_code)
        if not isinstance(data, dict):
            raise PaymentProviderError(f"PayPal {what}: réponse inattendue", status_code=res.status_code)
        return data

    async def _send(self, method: str, path: str, what: str, **kwargs) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                res = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise PaymentProviderError(f"PayPal {what}: {e.__class__.__name__}") from e
        return self._json(res, what)

    async def get_access_token(self) -> str:
        if not self.settings.paypal_client_id or not self.settings.paypal_client_secret:
            raise PaymentProviderError("Identifiants PayPal manquants")
        data = await self._send(
            "POST",
            "/v1/oauth2/token",
            "token",
            data={"grant_type": "client_credentials"},
            auth=(self.settings.paypal_client_id, self.settings.paypal_client_secret),
            headers={"Accept": "application/json"},
        )
        token = data.get("access_token")
        if not token:
            raise PaymentProviderError("PayPal token: access_token absent")
        return token

    async def _authorized_get(self, path: str, what: str) -> Dict[str, Any]:
        token = await self.get_access_token()
        return await self._send("GET", path, what, headers={"Authorization": f"Bearer {token}"})

    async def get_order(self, order_id: str) -> Dict[str, Any]:
        return await self._authorized_get(f"/v2/checkout/orders/{order_id}", "order")

    async def get_capture(self, capture_id: str) -> Dict[str, Any]:
        return await self._authorized_get(f"/v2/payments/captures/{capture_id}", "capture")

    async def verify_webhook_signature(self, headers: Mapping[str, str], event: Dict[str, Any]) -> bool:
        """
        True uniquement si PayPal répond verification_status == "SUCCESS".
        En-têtes manquants ou PAYPAL_WEBHOOK_ID absent: False sans appel réseau.
        """
        lowered = {str(k).lower(): v for k, v in (headers or {}).items()}
        payload: Dict[str, Any] = {}
        for field, header in WEBHOOK_HEADERS.items():
            value = lowered.get(header)
            if not value:
                logger.warning("Webhook PayPal: en-tête %s manquant", header)
                return False
            payload[field] = value
        if not self.settings.paypal_webhook_id:
            logger.warning("Webhook PayPal: PAYPAL_WEBHOOK_ID non configuré")
            return False
        payload["webhook_id"] = self.settings.paypal_webhook_id
        payload["webhook_event"] = event

        token = await self.get_access_token()
        data = await self._send(
            "POST",
            "/v1/notifications/verify-webhook-signature",
            "verify-webhook-signature",
            json=payload,
            headers={"Authorization": f"Bearer {token}"},
        )
        return data.get("verification_status") == "SUCCESS"
