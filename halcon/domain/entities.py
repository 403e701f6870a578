"""
Entités du domaine métier.

Ce module définit les modèles de données principaux: profils de naissance enregistrés, lieux
géographiques et entrées temporelles résolues (instant UTC + lieu).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BirthProfile(BaseModel):
    """Profil de naissance enregistré sous un nom court.

    Les formats ne sont pas contraints ici: un profil corrompu doit pouvoir être lu pour que le
    résolveur signale l'erreur précise (format de date, d'heure ou coordonnées).

    Les alias camelCase correspondent au fichier `profiles.json` historique.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    date: str  # YYYY-MM-DD
    time: str  # HH:MM:SS
    timezone: str | None = None  # IANA TZ; absent = donnée héritée, traitée comme UTC
    utc_offset: str | None = Field(default=None, alias="utcOffset")  # informatif, ex. "+05:30"
    latitude: float
    longitude: float
    location: str = ""
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")


class GeoLocation(BaseModel):
    """Coordonnées géographiques et libellé du lieu."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    label: str = "Unknown"


class ResolveOptions(BaseModel):
    """Arguments bruts d'une résolution: nom de profil ou date, heure, lieu optionnel.

    Les coordonnées sont acceptées sous forme de texte (arguments de ligne de commande, champs de
    formulaire) et analysées par le résolveur.
    """

    date_or_name: str
    time: str = ""
    latitude: str | float | None = None
    longitude: str | float | None = None
    location: str | None = None


class ResolvedTemporalInput(BaseModel):
    """Instant universel et lieu canoniques, prêts pour le moteur d'éphémérides."""

    model_config = ConfigDict(frozen=True)

    instant: datetime
    location: GeoLocation
    profile_name: str | None = None
    timezone: str | None = None
    utc_offset: str | None = None
    has_timezone_warning: bool = Field(
        default=False, description="True when the profile had no timezone and UTC was assumed"
    )
