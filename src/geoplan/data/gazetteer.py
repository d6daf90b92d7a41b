"""Static gazetteer of Mauritian settlements and administrative regions.

The entry order matters: address matching and region classification both
return the first entry that qualifies.
"""

from __future__ import annotations

import functools

from ..models.domain import Coordinate, GazetteerEntry

MAURITIUS_BOUNDS = {
    "north": -19.9802,
    "south": -20.5259,
    "east": 57.8130,
    "west": 57.3051,
}

# name, latitude, longitude, region
_SETTLEMENTS: tuple[tuple[str, float, float, str], ...] = (
    ("port louis", -20.1609, 57.4989, "port-louis"),
    ("curepipe", -20.3159, 57.5242, "plaines-wilhems"),
    ("quatre bornes", -20.2669, 57.4791, "plaines-wilhems"),
    ("vacoas", -20.2988, 57.4784, "plaines-wilhems"),
    ("phoenix", -20.3006, 57.4963, "plaines-wilhems"),
    ("rose hill", -20.2383, 57.4683, "plaines-wilhems"),
    ("beau bassin", -20.2333, 57.4667, "plaines-wilhems"),
    ("mahebourg", -20.4073, 57.7003, "grand-port"),
    ("centre de flacq", -20.1897, 57.7183, "flacq"),
    ("triolet", -20.0547, 57.5453, "pamplemousses"),
    ("goodlands", -20.0350, 57.6553, "riviere-du-rempart"),
    ("grand baie", -20.0064, 57.5805, "riviere-du-rempart"),
    ("le morne", -20.4490, 57.3102, "riviere-noire"),
    ("flic en flac", -20.2744, 57.3631, "riviere-noire"),
    ("tamarin", -20.3257, 57.3705, "riviere-noire"),
    ("belle mare", -20.1897, 57.7613, "flacq"),
    ("trou d'eau douce", -20.2369, 57.7897, "flacq"),
    ("souillac", -20.5167, 57.5167, "savanne"),
    ("chemin grenier", -20.4886, 57.4658, "savanne"),
    ("moka", -20.2333, 57.5833, "moka"),
    ("saint pierre", -20.2178, 57.5208, "moka"),
    ("pamplemousses", -20.1039, 57.5703, "pamplemousses"),
    ("grand gaube", -20.0064, 57.6608, "riviere-du-rempart"),
    ("cap malheureux", -19.9847, 57.6144, "riviere-du-rempart"),
    ("blue bay", -20.4447, 57.7133, "grand-port"),
    ("pereybere", -19.9950, 57.5894, "riviere-du-rempart"),
    ("poste de flacq", -20.1628, 57.7303, "flacq"),
    ("bel ombre", -20.5011, 57.4058, "savanne"),
    ("rodrigues", -19.7245, 63.4278, "rodrigues"),
)

REGIONS: dict[str, str] = {
    "port-louis": "Port Louis",
    "plaines-wilhems": "Plaines Wilhems",
    "moka": "Moka",
    "flacq": "Flacq",
    "grand-port": "Grand Port",
    "pamplemousses": "Pamplemousses",
    "riviere-du-rempart": "Rivière du Rempart",
    "savanne": "Savanne",
    "riviere-noire": "Rivière Noire",
    "rodrigues": "Rodrigues",
}


@functools.lru_cache(maxsize=1)
def load_gazetteer() -> tuple[GazetteerEntry, ...]:
    """Return the gazetteer entries in their fixed order."""

    return tuple(
        GazetteerEntry(name=name, coordinate=Coordinate(lat=lat, lng=lng), region=region)
        for name, lat, lng, region in _SETTLEMENTS
    )


def region_label(slug: str) -> str:
    """Display label for a region slug, title-casing unknown slugs."""

    if slug in REGIONS:
        return REGIONS[slug]
    return slug.replace("-", " ").title()
