"""
Factory d'application recommandée pour les entrypoints (ex: seminar_backend.asgi).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware, register_force_https_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares de base puis en-têtes de sécurité
      - gestionnaires d'exceptions (erreurs métier -> 400/404 JSON)
      - tous les routers (public, health)
      - redirection HTTPS en dernier (s'exécute en premier)
    Retour:
      FastAPI prêt à être utilisé par le serveur ASGI.
    """
    app = FastAPI(title="Seminar Booking API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    register_force_https_middleware(app)
    return app
