# Schémas Pydantic exposés par l'API (requêtes et réponses).

from pydantic import BaseModel, Field

from halcon.domain.entities import ResolveOptions


class ResolveRequest(BaseModel):
    """Entrée temporelle: nom de profil, ou date/heure UTC avec coordonnées.

    Champs:
    - date_or_name: str (nom de profil, "now" ou YYYY-MM-DD)
    - time: str (HH:MM:SS, ignoré pour un profil)
    - latitude / longitude: str | float | None (obligatoires hors profil)
    - location: str | None (libellé du lieu)
    """

    date_or_name: str
    time: str = ""
    latitude: str | float | None = None
    longitude: str | float | None = None
    location: str | None = None

    def to_options(self) -> ResolveOptions:
        return ResolveOptions(**self.model_dump())


class ProgressionRequest(ResolveRequest):
    """Requête de progression: `age` prime sur `to`; sans l'un ni l'autre, cible = maintenant."""

    to: str | None = Field(default=None, description="Target date YYYY-MM-DD or ISO instant")
    age: float | None = Field(default=None, description="Target age in years")


class ProfileItem(BaseModel):
    """Résumé d'un profil enregistré."""

    name: str
    location: str
    timezone: str | None = None


class NatalResponse(BaseModel):
    """Entrée résolue et positions natales."""

    input: dict
    chart: dict


class ProgressionResponse(BaseModel):
    """Entrée résolue, données de progression, positions natales/progressées et mouvement."""

    input: dict
    progression: dict
    natal: dict
    progressed: dict
    movement: dict[str, float]
