"""
Application principale FastAPI.

Ce module assemble tous les composants de l'application : middlewares,
routes, métriques et gestion des erreurs de l'historique des versions.

Responsabilités du module:
- Initialiser le logging structuré
- Construire l'application FastAPI avec son titre/debug
- Ajouter les middlewares (request id, métriques)
- Monter les routers (santé, versions, métriques)
"""

from __future__ import annotations

from fastapi import FastAPI

from pitch_history.api.errors import register_error_handlers
from pitch_history.api.routes_health import router as health_router
from pitch_history.api.routes_versions import router as versions_router
from pitch_history.app.metrics import PrometheusMiddleware, metrics_router
from pitch_history.core.container import container
from pitch_history.core.logging import setup_logging
from pitch_history.middlewares.request_id import RequestIDMiddleware


def create_app() -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog)
    - Crée le schéma hors production (la production passe par Alembic)
    - Ajoute les middlewares utiles au debug/traçabilité
    - Publie les routes de santé, de versions et de métriques
    """
    setup_logging()
    settings = container.settings
    if settings.APP_ENV != "prod":
        container.init_schema()
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(versions_router)
    app.include_router(metrics_router)
    return app


app = create_app()
