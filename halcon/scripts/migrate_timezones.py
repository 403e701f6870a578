"""
Migration des profils hérités vers un fuseau IANA.

Les profils enregistrés sans fuseau sont interprétés comme UTC par le résolveur (avec
avertissement). Ce script leur attribue un fuseau déduit des coordonnées (table grossière par
bandes de longitude/latitude), calcule l'offset UTC en vigueur à la date de naissance, sauvegarde
une copie du fichier puis enregistre les profils mis à jour.

Usage:
    python -m halcon.scripts.migrate_timezones
    python -m halcon.scripts.migrate_timezones --dry-run
"""

from __future__ import annotations

import argparse
import os
import shutil
from dataclasses import dataclass

import structlog

from halcon.core.logging import setup_logging
from halcon.core.settings import get_settings
from halcon.infra.civil_calendar import InvalidCivilTime, ZoneInfoCalendar
from halcon.infra.repositories import JSONFileProfileRepo, ProfileRepository

log = structlog.get_logger(__name__)

# (longitude min, longitude max, latitude min/max ou None, fuseau); la première bande qui
# correspond l'emporte. Panama et Laredo suivent la bande New York et ne sont donc jamais atteints.
TIMEZONE_BANDS: list[tuple[float, float, tuple[float, float] | None, str]] = [
    (-180, -140, None, "Pacific/Honolulu"),
    (-140, -120, None, "America/Los_Angeles"),
    (-120, -105, None, "America/Denver"),
    (-105, -90, None, "America/Chicago"),
    (-90, -60, None, "America/New_York"),
    (-60, -45, None, "America/Caracas"),
    (-90, -75, (7, 10), "America/Panama"),
    (-90, -75, (25, 30), "America/Chicago"),
    (-45, -30, None, "America/Sao_Paulo"),
    (-30, 15, None, "Europe/London"),
    (15, 30, None, "Europe/Paris"),
    (30, 45, None, "Europe/Moscow"),
    (45, 90, None, "Asia/Kolkata"),
    (90, 105, None, "Asia/Bangkok"),
    (105, 135, None, "Asia/Shanghai"),
    (135, 150, None, "Asia/Tokyo"),
    (150, 180, None, "Australia/Sydney"),
]

FALLBACK_TIMEZONE = "UTC"


@dataclass
class MigrationEntry:
    name: str
    timezone: str
    utc_offset: str


def detect_timezone(latitude: float, longitude: float) -> str:
    """Fuseau IANA approximatif pour des coordonnées; `UTC` hors table (longitude 180 comprise)."""
    for lon_min, lon_max, lat_band, tz in TIMEZONE_BANDS:
        if not lon_min <= longitude < lon_max:
            continue
        if lat_band is not None and not lat_band[0] <= latitude <= lat_band[1]:
            continue
        return tz
    return FALLBACK_TIMEZONE


def migrate(
    repo: ProfileRepository,
    calendar: ZoneInfoCalendar | None = None,
    dry_run: bool = False,
) -> list[MigrationEntry]:
    """Attribue un fuseau aux profils qui n'en ont pas.

    Retour: les entrées migrées (ou qui le seraient, en `dry_run`).
    """
    calendar = calendar or ZoneInfoCalendar()
    migrated = []
    for profile in repo.list():
        if profile.timezone:
            continue
        tz = detect_timezone(profile.latitude, profile.longitude)
        if tz == FALLBACK_TIMEZONE:
            log.warning("timezone_not_detected", profile=profile.name)
        try:
            instant = calendar.to_utc(profile.date, profile.time, tz)
        except InvalidCivilTime as err:
            log.warning("timezone_migration_skipped", profile=profile.name, reason=str(err))
            continue
        offset = calendar.utc_offset(instant, tz)
        migrated.append(MigrationEntry(name=profile.name, timezone=tz, utc_offset=offset))
        if not dry_run:
            repo.save(profile.model_copy(update={"timezone": tz, "utc_offset": offset}))
    return migrated


def backup_file(path: str) -> str | None:
    """Copie `profiles.json` vers `profiles.backup.json` à côté; None si absent."""
    if not os.path.exists(path):
        return None
    root, ext = os.path.splitext(path)
    backup = f"{root}.backup{ext}"
    shutil.copyfile(path, backup)
    return backup


def main() -> None:
    """Point d'entrée: migre le fichier de profils configuré (`PROFILES_PATH`)."""
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Add IANA timezones to legacy profiles")
    parser.add_argument("--path", default=settings.PROFILES_PATH, help="profiles.json location")
    parser.add_argument("--dry-run", action="store_true", help="Preview without saving")
    args = parser.parse_args()

    setup_logging(settings.LOG_LEVEL)
    repo = JSONFileProfileRepo(args.path)
    if not args.dry_run:
        backup = backup_file(repo.path)
        if backup:
            log.info("profiles_backup_written", path=backup)
    entries = migrate(repo, dry_run=args.dry_run)
    for entry in entries:
        print(f"{entry.name}: {entry.timezone} ({entry.utc_offset})")
    suffix = " (dry run)" if args.dry_run else ""
    print(f"migrated {len(entries)} profile(s){suffix}")


if __name__ == "__main__":  # pragma: no cover - script entry
    main()
