from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import structlog

from halcon.domain.entities import ResolvedTemporalInput, ResolveOptions
from halcon.domain.errors import DateValidationError, DateValidationKind
from halcon.domain.progressions import ProgressionCalculator, to_instant
from halcon.domain.temporal_resolver import TemporalInputResolver

log = structlog.get_logger(__name__)


def _wrap_degrees(delta: float) -> float:
    """Ramène un écart angulaire dans ]-180, 180]."""
    if delta > 180:
        delta -= 360
    if delta <= -180:
        delta += 360
    return delta


def _resolved_payload(resolved: ResolvedTemporalInput) -> dict[str, Any]:
    return {
        "instant": resolved.instant.isoformat(),
        "location": resolved.location.model_dump(),
        "profile_name": resolved.profile_name,
        "timezone": resolved.timezone,
        "utc_offset": resolved.utc_offset,
        "has_timezone_warning": resolved.has_timezone_warning,
    }


class ProgressionService:
    """Service métier pour thèmes natals et progressions secondaires.

    Responsabilités:
    - Résoudre l'entrée (profil ou arguments) via `resolver`.
    - Choisir l'instant cible (âge, date explicite ou maintenant) et calculer l'instant progressé.
    - Interroger le moteur d'éphémérides pour l'instant natal et l'instant progressé, au lieu natal.
    """

    def __init__(self, resolver: TemporalInputResolver, ephemeris, calculator=None):
        """Initialise le service avec ses dépendances.

        Paramètres:
        - resolver: `TemporalInputResolver` (dépôt de profils injecté).
        - ephemeris: composant exposant `compute_positions(instant, location)`.
        - calculator: `ProgressionCalculator` (par défaut, instance neuve).
        """
        self.resolver = resolver
        self.ephemeris = ephemeris
        self.calculator = calculator or ProgressionCalculator()

    def natal(self, options: ResolveOptions) -> dict[str, Any]:
        """Résout l'entrée et calcule les positions à l'instant natal."""
        resolved = self.resolver.resolve(options)
        chart = self.ephemeris.compute_positions(resolved.instant, resolved.location)
        return {"input": _resolved_payload(resolved), "chart": chart}

    def target_instant(
        self,
        birth: datetime,
        to: str | None = None,
        age: float | None = None,
        now: datetime | None = None,
    ) -> datetime:
        """Détermine l'instant cible d'une progression.

        Priorité: `age` (avance calendaire depuis la naissance), puis `to` (date ou instant ISO),
        sinon l'instant courant.

        Raises:
            DateValidationError: si l'âge ou la date cible ne donnent pas d'instant valide.
        """
        if age is not None:
            target = self.calculator.date_from_age(birth, age)
        elif to:
            target = to_instant(to)
        else:
            return to_instant(now) if now is not None else datetime.now(UTC)
        if target is None:
            raise DateValidationError(DateValidationKind.INVALID, "Target date")
        return target

    def progressions(
        self,
        options: ResolveOptions,
        to: str | None = None,
        age: float | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Calcule natal, progressé et mouvement de chaque corps.

        Retour: dict avec `input`, `progression`, `natal`, `progressed`, `movement`.
        """
        resolved = self.resolver.resolve(options)
        birth = resolved.instant
        self.calculator.validate(birth, "Birth date", now=now)
        target = self.target_instant(birth, to=to, age=age, now=now)
        progression = self.calculator.progressed_date(birth, target)
        log.info(
            "progression_computed",
            profile=resolved.profile_name,
            age_in_years=round(progression.age_in_years, 4),
        )

        natal = self.ephemeris.compute_positions(birth, resolved.location)
        progressed = self.ephemeris.compute_positions(
            progression.progressed_instant, resolved.location
        )
        movement = {}
        for key, body in natal["bodies"].items():
            moved = progressed["bodies"].get(key)
            if moved is None:
                continue
            movement[key] = round(_wrap_degrees(moved["longitude"] - body["longitude"]), 6)

        return {
            "input": _resolved_payload(resolved),
            "progression": progression.as_dict(),
            "natal": natal,
            "progressed": progressed,
            "movement": movement,
        }
