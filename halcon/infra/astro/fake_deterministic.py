"""Moteur d'éphémérides déterministe pour les tests et le développement.

Ce module implémente un moteur factice qui produit des longitudes écliptiques par mouvement moyen
(longitude moyenne à J2000 + vitesse moyenne quotidienne). Les résultats sont reproductibles et
suffisent pour exercer la chaîne natal/progressé sans moteur astronomique réel.
"""

from datetime import UTC, datetime
from typing import Any

from halcon.domain.entities import GeoLocation

J2000 = datetime(2000, 1, 1, 12, 0, tzinfo=UTC)

SIGNS = [
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
]

# (clé, nom, longitude moyenne à J2000 en degrés, vitesse moyenne en degrés/jour)
MEAN_ELEMENTS = [
    ("sun", "Sun", 280.460, 0.9856474),
    ("moon", "Moon", 218.316, 13.176396),
    ("mercury", "Mercury", 252.251, 4.0923344),
    ("venus", "Venus", 181.980, 1.6021302),
    ("mars", "Mars", 355.433, 0.5240208),
    ("jupiter", "Jupiter", 34.351, 0.0830853),
    ("saturn", "Saturn", 50.078, 0.0334442),
    ("uranus", "Uranus", 314.055, 0.0117308),
    ("neptune", "Neptune", 304.349, 0.0059818),
    ("pluto", "Pluto", 238.929, 0.0039700),
]

BODY_ORDER = [key for key, *_ in MEAN_ELEMENTS]


class FakeDeterministicEphemeris:
    """Moteur d'éphémérides factice déterministe.

    Le moteur ignore si l'instant demandé est natal ou progressé: il calcule simplement des
    positions pour l'instant fourni.
    """

    def compute_positions(self, instant: datetime, location: GeoLocation) -> dict[str, Any]:
        """Calculate mean-motion positions for an instant.

        Args:
            instant: Instant UTC.
            location: Lieu d'observation (repris tel quel dans le résultat).

        Returns:
            dict[str, Any]: `instant`, `location` et `bodies` (longitude, signe, degré dans le signe).
        """
        days = (instant - J2000).total_seconds() / 86400.0
        bodies = {}
        for key, name, lon0, rate in MEAN_ELEMENTS:
            longitude = (lon0 + rate * days) % 360.0
            bodies[key] = {
                "name": name,
                "longitude": round(longitude, 6),
                "sign": SIGNS[int(longitude // 30) % 12],
                "sign_degree": round(longitude % 30, 6),
                "retrograde": False,
            }
        return {
            "instant": instant.isoformat(),
            "location": location.model_dump(),
            "bodies": bodies,
        }
