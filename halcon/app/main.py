"""
Application principale FastAPI.

Responsabilités du module:
- Initialiser le logging structuré
- Construire l'application FastAPI avec son titre/debug
- Ajouter le middleware d'identifiant de requête
- Enregistrer les handlers d'erreurs du cœur temporel
- Monter les routers (santé, profils, thèmes, progressions)
"""

from __future__ import annotations

from fastapi import FastAPI

from halcon.api.errors import (
    APIError,
    handle_api_error,
    handle_date_error,
    handle_generic_exception,
    handle_temporal_error,
)
from halcon.api.routes_charts import router as charts_router
from halcon.api.routes_health import router as health_router
from halcon.core.container import container
from halcon.core.logging import setup_logging
from halcon.domain.errors import DateValidationError, TemporalInputError
from halcon.middlewares.request_id import RequestIDMiddleware


def create_app() -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog)
    - Lit les paramètres d'exécution
    - Ajoute le middleware d'identifiant de requête
    - Publie les routes
    """
    settings = container.settings
    setup_logging(settings.LOG_LEVEL)
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG)
    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(APIError, handle_api_error)
    app.add_exception_handler(TemporalInputError, handle_temporal_error)
    app.add_exception_handler(DateValidationError, handle_date_error)
    app.add_exception_handler(Exception, handle_generic_exception)
    app.include_router(health_router)
    app.include_router(charts_router)
    return app


app = create_app()
