from urllib.parse import urlparse
import socket
from seminar_backend.config import SUPABASE_URL, Settings
from seminar_backend.infra.supabase_client import get_supabase

TABLES = ["bookings", "sessions", "courses", "locations", "vouchers", "customers"]


def _check_table(client, name: str):
    try:
        res = client.table(name).select("*").limit(1).execute()
        cnt = len(res.data or [])
        return {"ok": True, "rows": cnt}
    except Exception as e:
        return {"ok": False, "error": str(e)}


def health_supabase_info():
    effective_url = SUPABASE_URL
    parsed = urlparse(effective_url) if effective_url else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            dns_ok = True
        except Exception as e:
            dns_ok = False
            dns_error = str(e)

    info = {
        "supabase_url": effective_url,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "tables": {}
    }
    try:
        client = get_supabase()
        for t in TABLES:
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(e)
    return info


def health_paypal_info(settings: Settings):
    """Configuration PayPal effective, sans jamais exposer les secrets."""
    return {
        "mode": settings.paypal_mode,
        "base_url": settings.paypal_base_url,
        "client_id_set": bool(settings.paypal_client_id),
        "client_secret_set": bool(settings.paypal_client_secret),
        "webhook_id_set": bool(settings.paypal_webhook_id),
        "vat_rate": settings.vat_rate,
        "prices_include_vat": settings.prices_include_vat,
    }
