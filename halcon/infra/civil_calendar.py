"""Conversion d'une heure civile locale vers UTC via la base IANA (`zoneinfo`).

Les règles historiques du fuseau (heure d'été, changements d'offset) sont appliquées pour la date
donnée, et non l'offset actuel du fuseau.
"""

from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

CIVIL_FORMAT = "%Y-%m-%d %H:%M:%S"


class InvalidCivilTime(ValueError):
    """Heure civile impossible à convertir (date inexistante, fuseau inconnu, trou DST...)."""


class ZoneInfoCalendar:
    """Utilitaire calendaire adossé à `zoneinfo`."""

    def zone(self, timezone: str) -> ZoneInfo:
        """Retourne le fuseau IANA, ou lève `InvalidCivilTime` s'il est inconnu."""
        # un nom de répertoire de la base (ex. "America") lève OSError selon la version
        try:
            return ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError, OSError) as err:
            raise InvalidCivilTime(f"unsupported zone: {timezone}") from err

    def to_utc(self, date: str, time: str, timezone: str) -> datetime:
        """Convertit `date` + `time` (heure locale de `timezone`) en instant UTC.

        Les heures ambiguës (retour à l'heure d'hiver) prennent la première occurrence; les heures
        inexistantes (passage à l'heure d'été) sont rejetées.

        Raises:
            InvalidCivilTime: si la date/heure ou le fuseau sont invalides.
        """
        try:
            naive = datetime.strptime(f"{date} {time}", CIVIL_FORMAT)
        except ValueError as err:
            raise InvalidCivilTime(f"unparsable civil time: {date} {time}") from err
        tz = self.zone(timezone)
        local = naive.replace(tzinfo=tz)
        instant = local.astimezone(UTC)
        if instant.astimezone(tz).replace(tzinfo=None) != naive:
            raise InvalidCivilTime(f"{date} {time} does not exist in {timezone}")
        return instant

    def utc_offset(self, instant: datetime, timezone: str) -> str:
        """Offset `±HH:MM` du fuseau à l'instant donné."""
        offset = instant.astimezone(self.zone(timezone)).utcoffset()
        total_minutes = int(offset.total_seconds() // 60) if offset is not None else 0
        sign = "+" if total_minutes >= 0 else "-"
        hours, minutes = divmod(abs(total_minutes), 60)
        return f"{sign}{hours:02d}:{minutes:02d}"
