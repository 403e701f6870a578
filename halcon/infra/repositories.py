"""
Repositories pour les profils de naissance.

Ce module fournit l'interface de lecture utilisée par le résolveur temporel (`get`, `list`) et
trois implémentations: en mémoire, fichier JSON (`~/.halcon/profiles.json`) et Redis. Les noms de
profil sont des clés insensibles à la casse.
"""

from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any

import redis
import structlog

from halcon.domain.entities import BirthProfile

log = structlog.get_logger(__name__)


def _key(name: str) -> str:
    return name.lower()


def _now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _stamped(profile: BirthProfile, existing: BirthProfile | None) -> BirthProfile:
    """Renseigne `created_at` (conservé si le profil existait) et `updated_at`."""
    now = _now_iso()
    created = existing.created_at if existing and existing.created_at else now
    return profile.model_copy(update={"created_at": created, "updated_at": now})


class ProfileRepository(ABC):
    """Interface d'accès aux profils; le résolveur n'utilise que la lecture."""

    @abstractmethod
    def get(self, name: str) -> BirthProfile | None:
        """Retourne le profil `name` (insensible à la casse), ou None."""

    @abstractmethod
    def list(self) -> list[BirthProfile]:
        """Retourne tous les profils enregistrés."""

    @abstractmethod
    def save(self, profile: BirthProfile) -> BirthProfile:
        """Crée ou met à jour un profil et le renvoie horodaté."""

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Supprime un profil; False s'il n'existait pas."""


class InMemoryProfileRepo(ProfileRepository):
    """
    Dépôt de profils en mémoire (utilisé pour dev/tests).

    Stocke les profils dans un dict local, non persistant.
    """

    def __init__(self, profiles: list[BirthProfile] | None = None):
        """Initialise la base mémoire, éventuellement pré-remplie (sans horodatage)."""
        self._db: dict[str, BirthProfile] = {_key(p.name): p for p in profiles or []}

    def get(self, name: str) -> BirthProfile | None:
        return self._db.get(_key(name))

    def list(self) -> list[BirthProfile]:
        return list(self._db.values())

    def save(self, profile: BirthProfile) -> BirthProfile:
        record = _stamped(profile, self._db.get(_key(profile.name)))
        self._db[_key(profile.name)] = record
        return record

    def delete(self, name: str) -> bool:
        return self._db.pop(_key(name), None) is not None


class JSONFileProfileRepo(ProfileRepository):
    """Dépôt de profils dans un fichier JSON `{nom_minuscule: profil}`.

    Le fichier est relu à chaque appel: aucune mise en cache.
    """

    def __init__(self, path: str):
        """Paramètres:
        - path: chemin du fichier (le répertoire parent est créé si besoin).
        """
        self.path = os.path.expanduser(path)
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)

    def _load(self) -> dict[str, dict[str, Any]]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)

    def _dump(self, data: dict[str, dict[str, Any]]) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def get(self, name: str) -> BirthProfile | None:
        raw = self._load().get(_key(name))
        return BirthProfile.model_validate(raw) if raw else None

    def list(self) -> list[BirthProfile]:
        return [BirthProfile.model_validate(raw) for raw in self._load().values()]

    def save(self, profile: BirthProfile) -> BirthProfile:
        data = self._load()
        raw = data.get(_key(profile.name))
        existing = BirthProfile.model_validate(raw) if raw else None
        record = _stamped(profile, existing)
        data[_key(profile.name)] = record.model_dump(by_alias=True, exclude_none=True)
        self._dump(data)
        log.info("profile_saved", name=record.name, path=self.path)
        return record

    def delete(self, name: str) -> bool:
        data = self._load()
        if data.pop(_key(name), None) is None:
            return False
        self._dump(data)
        return True


class RedisProfileRepo(ProfileRepository):
    """Dépôt de profils adossé à Redis (clé: `profile:{nom}`, index: set `profile:idx`)."""

    def __init__(self, url: str):
        """Crée un client Redis à partir de l'URL fournie."""
        self.client = redis.Redis.from_url(url, decode_responses=True)
        self.idx_key = "profile:idx"

    def get(self, name: str) -> BirthProfile | None:
        raw = self.client.get(f"profile:{_key(name)}")
        return BirthProfile.model_validate_json(raw) if raw else None

    def list(self) -> list[BirthProfile]:
        profiles = []
        for key in sorted(self.client.smembers(self.idx_key) or []):
            profile = self.get(key)
            if profile is not None:
                profiles.append(profile)
        return profiles

    def save(self, profile: BirthProfile) -> BirthProfile:
        """Sérialise en JSON et met à jour l'index des noms."""
        record = _stamped(profile, self.get(profile.name))
        pipe = self.client.pipeline()
        pipe.set(f"profile:{_key(record.name)}", record.model_dump_json(by_alias=True))
        pipe.sadd(self.idx_key, _key(record.name))
        pipe.execute()
        return record

    def delete(self, name: str) -> bool:
        removed = self.client.delete(f"profile:{_key(name)}")
        self.client.srem(self.idx_key, _key(name))
        return bool(removed)
