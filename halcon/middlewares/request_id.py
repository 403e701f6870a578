"""Middleware Starlette pour identifier chaque requête.

L'identifiant (en-tête X-Request-ID reçu, sinon UUID) est placé dans `request.state.trace_id` pour
les enveloppes d'erreur, lié au contexte structlog pour les logs, puis renvoyé dans la réponse.
"""

from collections.abc import Callable
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware pour ajouter et propager un identifiant de requête."""

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next: Callable):
        """Traite une requête en liant son identifiant aux logs et à la réponse."""
        request_id = request.headers.get(self.header_name) or str(uuid4())
        request.state.trace_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
        response.headers[self.header_name] = request_id
        return response
