"""Progressions secondaires: arithmétique pure sur des instants UTC.

Règle "un jour pour un an": chaque jour écoulé après la naissance correspond à une année de vie.

Deux manières distinctes d'avancer dans le temps coexistent ici et ne doivent jamais être
confondues:

- `advance_by_progressed_days`: décalage en jours (fractionnaires) depuis la naissance, utilisé
  pour situer l'instant progressé;
- `advance_by_calendar_years`: avance calendaire (année civile, mois/jour conservés), utilisée pour
  trouver l'instant où un âge donné est atteint.

Les fonctions arithmétiques ne lèvent jamais d'exception: une entrée invalide produit `nan` ou
`None`. Seule `validate` sert de garde explicite.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from halcon.domain.errors import DateValidationError, DateValidationKind

MS_PER_DAY = 86_400_000
DAYS_PER_YEAR = 365.25
# Longueur d'année "casual" appliquée à la fraction d'année lors d'une avance calendaire
CALENDAR_FRACTION_YEAR_DAYS = 365

_ONE_MS = timedelta(milliseconds=1)

InstantLike = datetime | str | None


def to_instant(value: InstantLike) -> datetime | None:
    """Normalise une valeur en instant UTC conscient du fuseau.

    - `datetime` naïf: interprété comme UTC;
    - `datetime` avec fuseau: converti en UTC;
    - chaîne ISO-8601 (`Z` accepté): analysée puis normalisée;
    - toute autre valeur (ou chaîne illisible): `None`, l'instant invalide.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
        return to_instant(parsed)
    return None


@dataclass(frozen=True)
class ProgressionResult:
    """Résultat d'un calcul de progression.

    `age_in_days` est strictement égal à `age_in_years`: même nombre, nommé selon l'usage (âge en
    années, ou nombre de jours à ajouter à la naissance).
    """

    birth: datetime | None
    target: datetime | None
    age_in_years: float
    age_in_days: float
    progressed_instant: datetime | None

    def as_dict(self) -> dict[str, Any]:
        def _iso(value: datetime | None) -> str | None:
            return value.isoformat() if value is not None else None

        return {
            "birth": _iso(self.birth),
            "target": _iso(self.target),
            "progressed": _iso(self.progressed_instant),
            "age_in_years": self.age_in_years,
            "age_in_days": self.age_in_days,
        }


def age(birth: InstantLike, target: InstantLike) -> float:
    """Âge fractionnaire en années moyennes de 365,25 jours.

    Peut être négatif (naissance postérieure à la cible) ou `nan` si l'un des instants est invalide.
    """
    start = to_instant(birth)
    end = to_instant(target)
    if start is None or end is None:
        return math.nan
    elapsed_ms = (end - start) / _ONE_MS
    return elapsed_ms / MS_PER_DAY / DAYS_PER_YEAR


def advance_by_progressed_days(birth: datetime, days: float) -> datetime | None:
    """Décale `birth` d'un nombre de jours fractionnaire (règle un jour = un an)."""
    if not math.isfinite(days):
        return None
    try:
        return birth + timedelta(days=days)
    except OverflowError:
        return None


def advance_by_calendar_years(birth: datetime, years: float) -> datetime | None:
    """Avance `birth` d'un nombre d'années civiles.

    La partie entière change l'année en conservant mois, jour et heure; un 29 février tombe au
    28 février d'une année non bissextile. La fraction restante est ajoutée en jours
    (`fraction * 365`).
    """
    if not math.isfinite(years):
        return None
    whole = math.trunc(years)
    fraction = years - whole
    target_year = birth.year + whole
    if not datetime.min.year <= target_year <= datetime.max.year:
        return None
    try:
        advanced = birth.replace(year=target_year)
    except ValueError:
        # 29 février -> année cible non bissextile
        advanced = birth.replace(year=target_year, day=28)
    if not fraction:
        return advanced
    try:
        return advanced + timedelta(days=fraction * CALENDAR_FRACTION_YEAR_DAYS)
    except OverflowError:
        return None


def progressed_date(birth: InstantLike, target: InstantLike) -> ProgressionResult:
    """Calcule l'instant progressé: naissance + (âge en années) jours.

    Si la naissance est invalide, les valeurs numériques valent `nan` et l'instant progressé est
    `None`; aucune exception n'est levée.
    """
    start = to_instant(birth)
    end = to_instant(target)
    age_in_years = age(start, end)
    age_in_days = age_in_years
    progressed = None
    if start is not None:
        progressed = advance_by_progressed_days(start, age_in_days)
    return ProgressionResult(
        birth=start,
        target=end,
        age_in_years=age_in_years,
        age_in_days=age_in_days,
        progressed_instant=progressed,
    )


def date_from_age(birth: InstantLike, target_age_years: float) -> datetime | None:
    """Instant civil auquel l'âge `target_age_years` est atteint.

    `0` renvoie la naissance inchangée. Une naissance invalide, un âge non fini ou un résultat hors
    de la plage représentable donnent `None`.
    """
    start = to_instant(birth)
    if start is None:
        return None
    if target_age_years == 0:
        return start
    return advance_by_calendar_years(start, target_age_years)


def validate(instant: InstantLike, field_name: str = "Date", now: datetime | None = None) -> None:
    """Rejette un instant invalide ou futur.

    Raises:
        DateValidationError: `"<field_name> is invalid"` ou `"<field_name> cannot be in the future"`.
    """
    parsed = to_instant(instant)
    if parsed is None:
        raise DateValidationError(DateValidationKind.INVALID, field_name)
    current = to_instant(now) if now is not None else datetime.now(UTC)
    if parsed > current:
        raise DateValidationError(DateValidationKind.FUTURE, field_name)


class ProgressionCalculator:
    """Façade sans état regroupant les opérations de progression (injectable dans les services)."""

    def age(self, birth: InstantLike, target: InstantLike) -> float:
        return age(birth, target)

    def progressed_date(self, birth: InstantLike, target: InstantLike) -> ProgressionResult:
        return progressed_date(birth, target)

    def date_from_age(self, birth: InstantLike, target_age_years: float) -> datetime | None:
        return date_from_age(birth, target_age_years)

    def validate(
        self, instant: InstantLike, field_name: str = "Date", now: datetime | None = None
    ) -> None:
        validate(instant, field_name, now=now)
