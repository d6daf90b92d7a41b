"""Region classification and address formatting."""

from __future__ import annotations

import functools
import logging
from typing import Sequence

from ..config import settings
from ..data.gazetteer import load_gazetteer, region_label
from ..models.domain import Coordinate, GazetteerEntry
from .geospatial import distance

logger = logging.getLogger(__name__)


class RegionClassifier:
    """Tags coordinates with the region of the nearest gazetteer entry."""

    def __init__(
        self,
        entries: Sequence[GazetteerEntry] | None = None,
        default_region: str | None = None,
    ) -> None:
        self.entries = tuple(entries) if entries is not None else load_gazetteer()
        self.default_region = default_region or settings.default_region
        if not self.entries:
            logger.warning(f"Region classifier has no gazetteer entries; every lookup returns '{self.default_region}'")

    def nearest_region(self, coordinate: Coordinate) -> str:
        """Return the region of the closest entry; earlier entries win ties."""

        best_region = self.default_region
        best_distance = float("inf")
        for entry in self.entries:
            candidate = distance(coordinate, entry.coordinate)
            if candidate < best_distance:
                best_distance = candidate
                best_region = entry.region
        return best_region


@functools.lru_cache(maxsize=1)
def get_region_classifier() -> RegionClassifier:
    return RegionClassifier()


def nearest_region(coordinate: Coordinate) -> str:
    return get_region_classifier().nearest_region(coordinate)


def format_address(
    street: str | None = None,
    city: str | None = None,
    postal_code: str | int | None = None,
    region: str | None = None,
) -> str:
    """Build a comma-separated postal address ending with the country name."""

    components: list[str] = []
    if street:
        components.append(street)
    if city:
        components.append(city)
    if postal_code:
        components.append(str(postal_code))
    if region and region != settings.default_region:
        components.append(region_label(region))
    components.append(settings.country_name)
    return ", ".join(components)
