"""
Endpoint de santé pour vérifier la disponibilité de l'API et du dépôt de profils.
"""

from fastapi import APIRouter

from halcon.core.container import container

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Vérifie la disponibilité de l'API et le backend de stockage des profils."""
    return {
        "status": "ok",
        "storage": getattr(container, "storage_backend", "unknown"),
    }
