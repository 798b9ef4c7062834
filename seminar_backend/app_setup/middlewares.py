"""
Middlewares transverses de l'application.
- register_basic_middlewares: CORS, TrustedHost et confiance en X-Forwarded-*.
- register_security_middleware: en-têtes de sécurité (API JSON uniquement, CSP stricte).
- register_force_https_middleware: force la redirection HTTPS (utile derrière proxy).
Notes:
- L'ordre d'ajout est important: le middleware HTTPS est ajouté en dernier pour s'exécuter en premier.
- Aucun cookie de session ni CSRF: l'API publique est sans état côté navigateur.
"""
from fastapi import Request, FastAPI
from fastapi.responses import RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
from seminar_backend.config import COOKIE_SECURE, CORS_ORIGINS, ALLOWED_HOSTS

def register_basic_middlewares(app: FastAPI) -> None:
    """
    Ajoute les middlewares « de base »:
    - CORSMiddleware: autorise les origines définies (front public du site de séminaires).
    - TrustedHostMiddleware: limite les hôtes acceptés (défense host header).
    - ProxyHeadersMiddleware: fait confiance aux en-têtes du proxy (x-forwarded-*).
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=ALLOWED_HOSTS + ["*"] if "*" in CORS_ORIGINS else ALLOWED_HOSTS,
    )
    # Fait confiance aux en-têtes X-Forwarded-* (Render, Nginx, etc.)
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

def register_security_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
        if COOKIE_SECURE:
            response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")
        # /docs charge Swagger UI depuis un CDN: CSP stricte sur le reste de l'API
        if not request.url.path.startswith(("/docs", "/redoc")):
            response.headers.setdefault("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")
        # Réponses de réservation: jamais mises en cache (statut de paiement changeant)
        if request.url.path.startswith("/public/bookings"):
            response.headers["Cache-Control"] = "no-store"
        return response


def register_force_https_middleware(app: FastAPI) -> None:
    """
    Force la redirection HTTP -> HTTPS lorsqu'un proxy place x-forwarded-proto=http.
    - Ajouté en dernier afin qu'il s'exécute en premier dans la pile des middlewares.
    """
    @app.middleware("http")
    async def force_https(request: Request, call_next):
        if request.headers.get("x-forwarded-proto") == "http":
            url = str(request.url).replace("http://", "https://", 1)
            return RedirectResponse(url, status_code=301)
        return await call_next(request)
