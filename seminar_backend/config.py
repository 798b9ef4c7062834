# seminar_backend.config
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Expose les constantes d'infrastructure (Supabase, CORS/hosts, cookies)
- Construit une fois pour toutes les réglages métier (TVA, PayPal) dans `Settings`,
  injecté ensuite dans les services (jamais relu depuis l'environnement dans la logique métier)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")


def _env_flag(name: str, default: bool) -> bool:
    raw = _clean_env(os.getenv(name) or "").lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    raw = _clean_env(os.getenv(name) or "")
    if not raw:
        return default
    try:
        return float(raw.replace(",", "."))
    except ValueError:
        return default


# Supabase: URLs et clés (public/anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

PAYPAL_LIVE_URL = "https://api-m.paypal.com"
PAYPAL_SANDBOX_URL = "https://api-m.sandbox.paypal.com"


@dataclass(frozen=True)
class Settings:
    """
    Réglages métier figés au démarrage.
    - vat_rate: taux de TVA par défaut en pourcents (ex: 19)
    - prices_include_vat: les prix du catalogue sont-ils saisis TTC (brut) ?
    - paypal_*: identifiants et mode (sandbox|live) du fournisseur de paiement
    """
    vat_rate: float = 19.0
    prices_include_vat: bool = True
    paypal_mode: str = "sandbox"
    paypal_client_id: str = ""
    paypal_client_secret: str = ""
    paypal_webhook_id: str = ""
    http_timeout: float = 10.0

    @property
    def paypal_base_url(self) -> str:
        return PAYPAL_LIVE_URL if self.paypal_mode == "live" else PAYPAL_SANDBOX_URL

    @classmethod
    def from_env(cls) -> "Settings":
        mode = _clean_env(os.getenv("PAYPAL_MODE") or "sandbox").lower()
        return cls(
            vat_rate=_env_float("VAT_RATE", 19.0),
            prices_include_vat=_env_flag("PRICES_INCLUDE_VAT", True),
            paypal_mode="live" if mode == "live" else "sandbox",
            paypal_client_id=_clean_env(os.getenv("PAYPAL_CLIENT_ID") or ""),
            # PAYPAL_SECRET: ancien nom encore présent sur certains déploiements
            paypal_client_secret=_clean_env(os.getenv("PAYPAL_CLIENT_SECRET") or os.getenv("PAYPAL_SECRET") or ""),
            paypal_webhook_id=_clean_env(os.getenv("PAYPAL_WEBHOOK_ID") or ""),
            http_timeout=_env_float("PAYPAL_HTTP_TIMEOUT", 10.0),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
