"""Paramètres de configuration de halcon (environnement + fichier .env).

Le fichier .env lu est choisi au chargement du module, dans cet ordre:
`ENV_FILE` (chemin explicite), puis `.env.{APP_ENV}` s'il existe dans le répertoire courant,
sinon `.env`. Les variables déjà présentes dans l'environnement priment sur le fichier.
"""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _resolve_env_file() -> str:
    explicit = os.getenv("ENV_FILE")
    if explicit:
        return explicit
    per_env = Path.cwd() / f".env.{os.getenv('APP_ENV', 'dev')}"
    if per_env.exists():
        return str(per_env)
    return str(Path.cwd() / ".env")


_ENV_FILE_PATH = _resolve_env_file()


def _default_profiles_path() -> str:
    return str(Path.home() / ".halcon" / "profiles.json")


class Settings(BaseSettings):
    """Configuration applicative: API, journalisation et stockage des profils."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "halcon"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Profils de naissance
    PROFILES_BACKEND: str = "json"  # "json" | "memory" | "redis"
    PROFILES_PATH: str = _default_profiles_path()
    REDIS_URL: str | None = None
    REQUIRE_REDIS: bool = False


def get_settings() -> Settings:
    """Relit l'environnement et retourne une configuration neuve."""
    return Settings()
