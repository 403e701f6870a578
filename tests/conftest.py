"""Configuration de test pour pytest avec gestion des chemins.

Ce module ajoute la racine du projet au sys.path, force un dépôt de profils en mémoire (aucune
écriture dans `~/.halcon`) et fournit des profils et un résolveur prêts à l'emploi.
"""

import os
import sys
from datetime import UTC, datetime

import pytest

# Ensure project root is on sys.path so that
# imports like `from halcon...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ["PROFILES_BACKEND"] = "memory"

from halcon.domain.entities import BirthProfile  # noqa: E402
from halcon.domain.temporal_resolver import TemporalInputResolver  # noqa: E402
from halcon.infra.repositories import InMemoryProfileRepo  # noqa: E402

FIXED_NOW = datetime(2025, 11, 19, 0, 0, tzinfo=UTC)


@pytest.fixture
def manu_profile() -> BirthProfile:
    """Profil de référence: Kurnool, heure locale indienne."""
    return BirthProfile(
        name="manu",
        date="1990-03-10",
        time="12:55:00",
        timezone="Asia/Kolkata",
        utc_offset="+05:30",
        latitude=15.83,
        longitude=78.04,
        location="Kurnool, India",
    )


@pytest.fixture
def legacy_profile() -> BirthProfile:
    """Profil hérité sans fuseau (interprété comme UTC)."""
    return BirthProfile(
        name="legacy",
        date="1985-06-21",
        time="09:15:00",
        latitude=41.88,
        longitude=-87.63,
        location="Chicago, USA",
    )


@pytest.fixture
def profile_repo(manu_profile: BirthProfile, legacy_profile: BirthProfile) -> InMemoryProfileRepo:
    return InMemoryProfileRepo([manu_profile, legacy_profile])


@pytest.fixture
def resolver(profile_repo: InMemoryProfileRepo) -> TemporalInputResolver:
    return TemporalInputResolver(profile_repo, clock=lambda: FIXED_NOW)


@pytest.fixture
def fixed_now() -> datetime:
    """Instant courant figé (2025-11-19T00:00Z)."""
    return FIXED_NOW
