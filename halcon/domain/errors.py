"""Erreurs du cœur temporel.

Les catégories d'erreur sont fermées (`Enum`) afin que les appelants puissent les filtrer de manière
déterministe. `ResolutionFailure` est la variante "échec" renvoyée par
`TemporalInputResolver.try_resolve`; `TemporalInputError` l'enveloppe pour les appelants qui
préfèrent lever une exception.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ResolveErrorKind(str, Enum):
    """Catégories d'échec de la résolution d'une entrée temporelle."""

    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    INVALID_TIME_FORMAT = "INVALID_TIME_FORMAT"
    INVALID_COORDINATES = "INVALID_COORDINATES"
    INVALID_DATETIME = "INVALID_DATETIME"
    MISSING_COORDINATES = "MISSING_COORDINATES"


@dataclass(frozen=True)
class ProfileSummary:
    """Couple nom/lieu proposé à l'utilisateur quand un profil est introuvable."""

    name: str
    location: str

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "location": self.location}


@dataclass(frozen=True)
class ResolutionFailure:
    """Échec de résolution: catégorie, message lisible et profils disponibles éventuels."""

    kind: ResolveErrorKind
    message: str
    available_profiles: tuple[ProfileSummary, ...] = field(default_factory=tuple)


class TemporalInputError(ValueError):
    """Exception levée par `TemporalInputResolver.resolve`."""

    def __init__(self, failure: ResolutionFailure) -> None:
        super().__init__(failure.message)
        self.failure = failure

    @property
    def kind(self) -> ResolveErrorKind:
        return self.failure.kind

    @property
    def available_profiles(self) -> list[dict[str, str]]:
        return [p.as_dict() for p in self.failure.available_profiles]


class DateValidationKind(str, Enum):
    """Échecs possibles de `validate`."""

    INVALID = "INVALID"
    FUTURE = "FUTURE"


class DateValidationError(ValueError):
    """Instant invalide ou situé dans le futur."""

    def __init__(self, kind: DateValidationKind, field_name: str) -> None:
        if kind is DateValidationKind.FUTURE:
            message = f"{field_name} cannot be in the future"
        else:
            message = f"{field_name} is invalid"
        super().__init__(message)
        self.kind = kind
        self.field_name = field_name
        self.message = message
