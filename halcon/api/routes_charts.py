"""Routes de calcul: thème natal, progressions secondaires et liste des profils.

Les erreurs du cœur temporel remontent telles quelles et sont converties en enveloppes par les
handlers enregistrés dans `halcon.app.main`.
"""

from fastapi import APIRouter

from halcon.api.schemas import (
    NatalResponse,
    ProfileItem,
    ProgressionRequest,
    ProgressionResponse,
    ResolveRequest,
)
from halcon.core.container import container

router = APIRouter(tags=["charts"])


@router.get("/profiles", response_model=list[ProfileItem])
def list_profiles():
    """Liste les profils enregistrés (nom, lieu, fuseau)."""
    return [
        ProfileItem(name=p.name, location=p.location, timezone=p.timezone)
        for p in container.profile_repo.list()
    ]


@router.post("/charts/natal", response_model=NatalResponse)
def natal_chart(payload: ResolveRequest):
    """Résout l'entrée puis calcule les positions natales."""
    return container.progression_service.natal(payload.to_options())


@router.post("/progressions", response_model=ProgressionResponse)
def progressions(payload: ProgressionRequest):
    """
    Calcule une progression secondaire (un jour = un an).

    Paramètres:
    - payload: entrée temporelle + `to` (date cible) ou `age` (âge cible).

    Retour: `ProgressionResponse`.
    """
    return container.progression_service.progressions(
        payload.to_options(), to=payload.to, age=payload.age
    )
