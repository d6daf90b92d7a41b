"""Free-text address to coordinate resolution.

Known settlement names are answered from the gazetteer without any network
traffic; everything else goes to Nominatim through the shared rate limiter.
An address that cannot be resolved yields ``None``, which callers treat as
"no coordinate available" rather than an error.
"""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass
from typing import Callable, Sequence

import httpx

from ...config import settings
from ...data.gazetteer import MAURITIUS_BOUNDS, load_gazetteer
from ...models.domain import Coordinate, GazetteerEntry
from ..geospatial import within_bounds
from ..providers.rate_limiter import RateLimiter, get_rate_limiter
from ..regions import RegionClassifier

logger = logging.getLogger(__name__)


def normalize_address(address: str) -> str:
    """Lowercase, strip diacritics and trim an address for gazetteer matching."""

    decomposed = unicodedata.normalize("NFKD", address.lower())
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.strip()


@dataclass(slots=True)
class GeocodeOutcome:
    address: str
    coordinate: Coordinate | None


class GeocodingResolver:
    def __init__(
        self,
        http_client: httpx.Client | None = None,
        rate_limiter: RateLimiter | None = None,
        gazetteer: Sequence[GazetteerEntry] | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = base_url or settings.nominatim_url
        self.timeout = timeout if timeout is not None else settings.provider_timeout_seconds
        self.rate_limiter = rate_limiter or get_rate_limiter()
        self.gazetteer = tuple(gazetteer) if gazetteer is not None else load_gazetteer()
        self._client = http_client
        self._classifier = RegionClassifier(self.gazetteer)

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=httpx.Timeout(self.timeout, connect=5.0))
        return self._client

    def match_gazetteer(self, address: str) -> GazetteerEntry | None:
        """First gazetteer entry whose name appears in the normalized address."""

        normalized = normalize_address(address)
        for entry in self.gazetteer:
            if entry.name in normalized:
                return entry
        return None

    def resolve(self, address: str) -> Coordinate | None:
        entry = self.match_gazetteer(address)
        if entry is not None:
            logger.debug(f"Geocoded '{address}' from gazetteer entry '{entry.name}'")
            return entry.coordinate
        return self._query_provider(address)

    def resolve_with_region(self, address: str) -> tuple[Coordinate, str] | None:
        coordinate = self.resolve(address)
        if coordinate is None:
            return None
        return coordinate, self._classifier.nearest_region(coordinate)

    def resolve_batch(
        self,
        addresses: Sequence[str],
        on_progress: Callable[[int, int], None] | None = None,
    ) -> list[GeocodeOutcome]:
        """Resolve addresses one after another, reporting ``(done, total)`` progress."""

        outcomes: list[GeocodeOutcome] = []
        total = len(addresses)
        for index, address in enumerate(addresses, start=1):
            outcomes.append(GeocodeOutcome(address=address, coordinate=self.resolve(address)))
            if on_progress:
                on_progress(index, total)
        resolved = sum(1 for outcome in outcomes if outcome.coordinate is not None)
        logger.info(f"Geocoded {resolved}/{total} addresses")
        return outcomes

    def _query_provider(self, address: str) -> Coordinate | None:
        bounds = MAURITIUS_BOUNDS
        params = {
            "q": f"{address}, {settings.country_name}",
            "format": "json",
            "limit": "1",
            "countrycodes": settings.country_code,
            "viewbox": f"{bounds['west']},{bounds['north']},{bounds['east']},{bounds['south']}",
            "bounded": "1",
        }
        self.rate_limiter.acquire()
        logger.info(f"Geocoding via Nominatim: {address}")
        try:
            response = self._get_client().get(
                self.base_url,
                params=params,
                headers={"User-Agent": settings.nominatim_user_agent},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Geocoding failed for '{address}': HTTP {e.response.status_code}")
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Geocoding failed for '{address}': {e}")
            return None

        if not isinstance(data, list) or not data:
            logger.warning(f"No geocoding result for '{address}'")
            return None
        try:
            coordinate = Coordinate(lat=float(data[0]["lat"]), lng=float(data[0]["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed geocoding result for '{address}': {e}")
            return None
        if not within_bounds(coordinate, bounds):
            logger.warning(f"Discarding geocoding result for '{address}' outside {settings.country_name}: {coordinate}")
            return None
        return coordinate

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
