"""Enveloppes d'erreur de l'API.

Les échecs du cœur temporel (`TemporalInputError`, `DateValidationError`) deviennent des réponses
JSON `{code, message, trace_id, details}`: 404 pour un profil introuvable (avec la liste des
profils disponibles), 422 pour toute entrée invalide, 500 pour le reste.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from halcon.domain.errors import (
    DateValidationError,
    DateValidationKind,
    ResolveErrorKind,
    TemporalInputError,
)

log = logging.getLogger(__name__)


@dataclass
class ErrorEnvelope:
    """Corps JSON d'une réponse d'erreur."""

    code: str
    message: str
    trace_id: str | None = None
    details: dict[str, Any] | None = None

    def to_content(self) -> dict[str, Any]:
        content = asdict(self)
        if not self.details:
            content.pop("details")
        return content


class APIError(HTTPException):
    """Erreur HTTP portant un code métier stable et des détails optionnels."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        trace_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message)
        self.code = code
        self.message = message
        self.trace_id = trace_id
        self.details = details

    def envelope(self, trace_id: str | None = None) -> ErrorEnvelope:
        return ErrorEnvelope(self.code, self.message, trace_id or self.trace_id, self.details)


class ErrorCodes:
    """Codes d'erreur hors catégories de résolution (celles-ci réutilisent `ResolveErrorKind`)."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATE_INVALID = "DATE_INVALID"
    DATE_IN_FUTURE = "DATE_IN_FUTURE"


HTTP_NOT_FOUND = 404
HTTP_UNPROCESSABLE = 422
HTTP_INTERNAL_ERROR = 500

_DATE_CODES = {
    DateValidationKind.INVALID: ErrorCodes.DATE_INVALID,
    DateValidationKind.FUTURE: ErrorCodes.DATE_IN_FUTURE,
}


def from_temporal_error(err: TemporalInputError) -> APIError:
    """Traduit un échec de résolution; le 404 liste les profils disponibles."""
    if err.kind is ResolveErrorKind.PROFILE_NOT_FOUND:
        return APIError(
            HTTP_NOT_FOUND,
            err.kind.value,
            str(err),
            details={"available_profiles": err.available_profiles},
        )
    return APIError(HTTP_UNPROCESSABLE, err.kind.value, str(err))


def from_date_error(err: DateValidationError) -> APIError:
    """Traduit un échec de `validate` (instant invalide ou futur)."""
    return APIError(
        HTTP_UNPROCESSABLE, _DATE_CODES[err.kind], err.message, details={"field": err.field_name}
    )


def extract_trace_id(request: Request) -> str | None:
    """Identifiant posé par `RequestIDMiddleware`, à défaut l'en-tête reçu."""
    return getattr(request.state, "trace_id", None) or request.headers.get("X-Request-ID")


def error_response(status_code: int, envelope: ErrorEnvelope) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope.to_content())


def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    envelope = exc.envelope(extract_trace_id(request))
    log.warning(
        "API error returned",
        extra={"code": exc.code, "status_code": exc.status_code, "trace_id": envelope.trace_id},
    )
    return error_response(exc.status_code, envelope)


def handle_temporal_error(request: Request, exc: TemporalInputError) -> JSONResponse:
    return handle_api_error(request, from_temporal_error(exc))


def handle_date_error(request: Request, exc: DateValidationError) -> JSONResponse:
    return handle_api_error(request, from_date_error(exc))


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    """Dernier recours: 500 sans divulguer le détail de l'exception."""
    trace_id = extract_trace_id(request)
    log.error(
        "Unhandled error",
        extra={"trace_id": trace_id, "exception_type": type(exc).__name__},
        exc_info=True,
    )
    return error_response(
        HTTP_INTERNAL_ERROR,
        ErrorEnvelope(ErrorCodes.INTERNAL_ERROR, "An unexpected error occurred", trace_id),
    )
