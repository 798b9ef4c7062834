# module seminar_backend.app
"""
Instance FastAPI globale construite par la factory (seminar_backend.app_setup.factory).
Toute la configuration (middlewares, exceptions, routers, lifespan) y est centralisée.
"""
from seminar_backend.app_setup.factory import create_app

app = create_app()
