"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, dépôt de profils, moteur d'éphémérides, résolveur,
service de progressions) et expose un singleton `container` utilisé par le reste de l'application.
"""

import structlog

from halcon.core.settings import Settings, get_settings
from halcon.domain.progressions import ProgressionCalculator
from halcon.domain.services import ProgressionService
from halcon.domain.temporal_resolver import TemporalInputResolver
from halcon.infra.astro.fake_deterministic import FakeDeterministicEphemeris
from halcon.infra.repositories import (
    InMemoryProfileRepo,
    JSONFileProfileRepo,
    ProfileRepository,
    RedisProfileRepo,
)

log = structlog.get_logger(__name__)


def build_profile_repo(settings: Settings) -> tuple[ProfileRepository, str]:
    """Construit le dépôt de profils selon `PROFILES_BACKEND`.

    Retour: (dépôt, nom du backend effectif).
    """
    backend = settings.PROFILES_BACKEND.lower()
    if backend == "redis":
        if not settings.REDIS_URL:
            if settings.REQUIRE_REDIS:
                raise RuntimeError("Redis required but REDIS_URL not set")
            return InMemoryProfileRepo(), "memory"
        try:
            return RedisProfileRepo(settings.REDIS_URL), "redis"
        except Exception as err:
            if settings.REQUIRE_REDIS:
                raise RuntimeError("Redis required but unavailable") from err
            log.warning("profiles_redis_unavailable", error=str(err))
            return InMemoryProfileRepo(), "memory-fallback"
    if backend == "memory":
        return InMemoryProfileRepo(), "memory"
    return JSONFileProfileRepo(settings.PROFILES_PATH), "json"


class Container:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.profile_repo, self.storage_backend = build_profile_repo(self.settings)
        self.ephemeris = FakeDeterministicEphemeris()
        self.calculator = ProgressionCalculator()
        self.resolver = TemporalInputResolver(self.profile_repo)
        self.progression_service = ProgressionService(
            self.resolver, self.ephemeris, self.calculator
        )


container = Container()
