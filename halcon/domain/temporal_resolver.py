"""Résolution d'une entrée temporelle: profil enregistré ou arguments bruts -> instant UTC + lieu.

Démarche
--------
1. Classer le premier argument: nom de profil ou donnée de date (`is_profile_name`).
2. Profil: lecture dans le dépôt injecté, validation des champs stockés, conversion de l'heure
   locale du fuseau IANA vers UTC (profil sans fuseau = donnée héritée, traitée comme UTC avec
   avertissement).
3. Arguments bruts: coordonnées obligatoires et bornées, date/heure lues directement en UTC
   (aucune inférence de fuseau), `"now"` = instant courant.

Les échecs sont exprimés par `ResolutionFailure` (`try_resolve`) ou `TemporalInputError`
(`resolve`), chacun portant une catégorie `ResolveErrorKind`.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from halcon.domain.entities import BirthProfile, GeoLocation, ResolvedTemporalInput, ResolveOptions
from halcon.domain.errors import (
    ProfileSummary,
    ResolutionFailure,
    ResolveErrorKind,
    TemporalInputError,
)
from halcon.infra.civil_calendar import InvalidCivilTime, ZoneInfoCalendar
from halcon.infra.repositories import ProfileRepository

log = structlog.get_logger(__name__)

NOW_TOKEN = "now"
DEFAULT_LOCATION_LABEL = "Unknown"

# Chiffres ASCII uniquement, correspondance sur la chaîne entière (pas de `\n` final toléré)
_DATE_SHAPED = re.compile(r"[0-9]+-[0-9]+")
_PROFILE_NAME = re.compile(r"[a-zA-Z0-9_-]+")
_PROFILE_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_PROFILE_TIME = re.compile(r"[0-9]{2}:[0-9]{2}:[0-9]{2}")


def is_profile_name(token: str) -> bool:
    """Heuristique: le jeton désigne-t-il un profil plutôt qu'une date ?

    - `"now"` (ou vide) n'est jamais un profil;
    - tout jeton contenant chiffres-tiret-chiffres (`2024-01-01`, `run-2024-1`) n'est pas un profil;
    - sinon, lettres, chiffres, `_` et `-` uniquement.
    """
    if not token or token == NOW_TOKEN:
        return False
    if _DATE_SHAPED.search(token):
        return False
    return _PROFILE_NAME.fullmatch(token) is not None


def _in_range(value: float, bound: float) -> bool:
    return math.isfinite(value) and -bound <= value <= bound


def _coordinate_failure(latitude: float, longitude: float) -> ResolutionFailure | None:
    if not _in_range(latitude, 90):
        return ResolutionFailure(
            ResolveErrorKind.INVALID_COORDINATES,
            f"Invalid latitude: {latitude}. Must be between -90 and 90",
        )
    if not _in_range(longitude, 180):
        return ResolutionFailure(
            ResolveErrorKind.INVALID_COORDINATES,
            f"Invalid longitude: {longitude}. Must be between -180 and 180",
        )
    return None


def validate_profile_fields(profile: BirthProfile) -> ResolutionFailure | None:
    """Vérifie les formats fixes (date, heure) et les bornes des coordonnées d'un profil."""
    if _PROFILE_DATE.fullmatch(profile.date) is None:
        return ResolutionFailure(
            ResolveErrorKind.INVALID_DATE_FORMAT,
            f"Invalid date format in profile: {profile.date!r}. Expected YYYY-MM-DD",
        )
    if _PROFILE_TIME.fullmatch(profile.time) is None:
        return ResolutionFailure(
            ResolveErrorKind.INVALID_TIME_FORMAT,
            f"Invalid time format in profile: {profile.time!r}. Expected HH:MM:SS",
        )
    return _coordinate_failure(profile.latitude, profile.longitude)


def _missing(value: str | float | None) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_coordinate(value: str | float) -> float | None:
    """Valeur numérique (les infinis sont rejetés par les bornes); None si illisible ou NaN."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


class TemporalInputResolver:
    """Transforme un nom de profil ou des arguments bruts en `ResolvedTemporalInput`.

    Paramètres:
    - repository: dépôt de profils (lecture seule ici).
    - calendar: utilitaire de conversion heure civile -> UTC.
    - clock: fournit l'instant courant pour `"now"` (UTC conscient du fuseau).
    """

    def __init__(
        self,
        repository: ProfileRepository,
        calendar: ZoneInfoCalendar | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.profiles = repository
        self.calendar = calendar or ZoneInfoCalendar()
        self.clock = clock or (lambda: datetime.now(UTC))

    def resolve(self, options: ResolveOptions) -> ResolvedTemporalInput:
        """Résout l'entrée ou lève `TemporalInputError`."""
        outcome = self.try_resolve(options)
        if isinstance(outcome, ResolutionFailure):
            raise TemporalInputError(outcome)
        return outcome

    def try_resolve(self, options: ResolveOptions) -> ResolvedTemporalInput | ResolutionFailure:
        """Résout l'entrée; renvoie un `ResolutionFailure` plutôt que de lever."""
        if is_profile_name(options.date_or_name):
            outcome = self._from_profile(options.date_or_name)
        else:
            outcome = self._from_arguments(options)
        if isinstance(outcome, ResolutionFailure):
            log.info("temporal_input_rejected", kind=outcome.kind.value, token=options.date_or_name)
        return outcome

    def _from_profile(self, name: str) -> ResolvedTemporalInput | ResolutionFailure:
        profile = self.profiles.get(name)
        if profile is None:
            return ResolutionFailure(
                ResolveErrorKind.PROFILE_NOT_FOUND,
                f'Profile "{name}" not found',
                available_profiles=tuple(
                    ProfileSummary(name=p.name, location=p.location) for p in self.profiles.list()
                ),
            )

        invalid = validate_profile_fields(profile)
        if invalid is not None:
            return invalid

        if profile.timezone:
            try:
                instant = self.calendar.to_utc(profile.date, profile.time, profile.timezone)
            except InvalidCivilTime as err:
                return ResolutionFailure(
                    ResolveErrorKind.INVALID_DATETIME, f"Invalid datetime in profile: {err}"
                )
        else:
            instant = self._parse_utc(profile.date, profile.time)
            if instant is None:
                return ResolutionFailure(
                    ResolveErrorKind.INVALID_DATETIME,
                    f"Invalid datetime in profile: {profile.date} {profile.time}",
                )
            log.warning("profile_timezone_missing", profile=profile.name)

        log.debug("profile_resolved", profile=profile.name, instant=instant.isoformat())
        return ResolvedTemporalInput(
            instant=instant,
            location=GeoLocation(
                latitude=profile.latitude, longitude=profile.longitude, label=profile.location
            ),
            profile_name=profile.name,
            timezone=profile.timezone or None,
            utc_offset=profile.utc_offset or None,
            has_timezone_warning=not profile.timezone,
        )

    def _from_arguments(self, options: ResolveOptions) -> ResolvedTemporalInput | ResolutionFailure:
        if _missing(options.latitude) or _missing(options.longitude):
            return ResolutionFailure(
                ResolveErrorKind.MISSING_COORDINATES,
                "Missing required coordinates: latitude and longitude are required when not "
                "using a profile",
            )
        lat = _parse_coordinate(options.latitude)
        lon = _parse_coordinate(options.longitude)
        if lat is None or lon is None:
            return ResolutionFailure(
                ResolveErrorKind.INVALID_COORDINATES,
                f'Invalid coordinate values: latitude="{options.latitude}", '
                f'longitude="{options.longitude}"',
            )
        out_of_range = _coordinate_failure(lat, lon)
        if out_of_range is not None:
            return out_of_range

        if options.date_or_name == NOW_TOKEN:
            instant = self.clock()
        else:
            instant = self._parse_utc(options.date_or_name, options.time)
            if instant is None:
                return ResolutionFailure(
                    ResolveErrorKind.INVALID_DATETIME,
                    f'Invalid date/time format: "{options.date_or_name}" "{options.time}"',
                )

        return ResolvedTemporalInput(
            instant=instant,
            location=GeoLocation(
                latitude=lat, longitude=lon, label=options.location or DEFAULT_LOCATION_LABEL
            ),
        )

    @staticmethod
    def _parse_utc(date: str, time: str) -> datetime | None:
        """Lit `date` + `time` comme un instant UTC; None si illisible ou porteur d'un offset."""
        if not date or not time:
            return None
        try:
            parsed = datetime.fromisoformat(f"{date.strip()}T{time.strip()}")
        except ValueError:
            return None
        if parsed.tzinfo is not None:
            return None
        return parsed.replace(tzinfo=UTC)
