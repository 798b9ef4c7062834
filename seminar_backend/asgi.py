"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn/uvicorn-workers) importe `seminar_backend.asgi:app`.
- Toute la configuration FastAPI est centralisée dans seminar_backend.app_setup, ce fichier
  ne fait qu'exposer l'instance `app`.
"""

from seminar_backend.app import app

if __name__ == "__main__":
    # Exécution directe utile en développement local (uvicorn standalone).
    import os
    import uvicorn
    uvicorn.run(
        "seminar_backend.asgi:app",
        host="0.0.0.0",  # écoute toutes interfaces (Docker/VM)
        port=int(os.getenv("PORT", "8000")),
        reload=True,     # rechargement automatique en dev
    )
