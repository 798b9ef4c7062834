from typing import Dict, Any
from fastapi import Request, Response, HTTPException
import os
import time

def _client_key(req: Request) -> str:
    # API publique sans session: clé = IP (après ProxyHeaders) + chemin
    ip = req.client.host if req.client else "local"
    return f"ip:{ip}:{req.url.path}"

def optional_rate_limit(times: int, seconds: int):
    async def _dep(request: Request, response: Response):
        # Forcer le fallback mémoire en DEV si demandé
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            now = time.time()
            key = _client_key(request)
            store = getattr(request.app.state, "_rl_store", {})
            hits = [t for t in store.get(key, []) if now - t < seconds]
            if len(hits) >= times:
                raise HTTPException(status_code=429, detail="Too Many Requests")
            hits.append(now)
            store[key] = hits
            request.app.state._rl_store = store
            return

        # Respecter le flag global
        disabled_flag = getattr(request.app.state, "rate_limit_enabled", None) is False
        if disabled_flag:
            return

        # Utiliser fastapi-limiter si initialisé
        from fastapi_limiter import FastAPILimiter
        from fastapi_limiter.depends import RateLimiter
        if getattr(FastAPILimiter, "redis", None) is None:
            return

        async def _identifier(req: Request) -> str:
            return _client_key(req)
        try:
            return await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, response)
        except HTTPException:
            raise
        except Exception:
            # Si Redis échoue (ex: SCRIPT non supporté), pas de 429 en prod;
            # en dev, activer LOCAL_RATE_LIMIT_FALLBACK=1
            return
    return _dep

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)

    from fastapi_limiter import FastAPILimiter
    limiter_ready = getattr(FastAPILimiter, "redis", None) is not None
    backend = "redis" if limiter_ready else None

    info: Dict[str, Any] = {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": backend,
    }

    if backend == "redis":
        from urllib.parse import urlparse
        redis_url = os.getenv("RATE_LIMIT_REDIS_URL")
        if redis_url:
            p = urlparse(redis_url)
            info["redis"] = {
                "scheme": p.scheme,
                "host": p.hostname,
                "port": p.port,
            }

    return info
