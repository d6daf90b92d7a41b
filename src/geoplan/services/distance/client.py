"""HTTP client for the Google Distance Matrix service.

Every request goes through the shared rate limiter, successful pairs are kept
in a ``GeoCache``, and any provider trouble degrades to a constant estimate
tagged ``method=fallback`` instead of raising.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Sequence

import httpx

from ...config import settings
from ...errors import ProviderError, ProviderStatusError
from ...models.domain import (
    Coordinate,
    DistanceMethod,
    DistanceResult,
    DistanceStatus,
    EdgeCost,
)
from ...persistence.cache_store import build_cache_store
from ..providers.rate_limiter import RateLimiter, get_rate_limiter
from .cache import GeoCache

logger = logging.getLogger(__name__)

_COORDINATE_LITERAL = re.compile(r"^\s*-?\d+(\.\d+)?\s*,\s*-?\d+(\.\d+)?\s*$")


def normalize_address(address: str) -> str:
    """Trim an address and qualify it with the country name when missing.

    ``"lat,lng"`` literals are passed through untouched.
    """

    normalized = address.strip()
    if _COORDINATE_LITERAL.match(normalized):
        return normalized.replace(" ", "")
    lowered = normalized.lower()
    if not any(alias in lowered for alias in settings.country_aliases):
        normalized = f"{normalized}, {settings.country_name}"
    return normalized


def fallback_result(status: DistanceStatus) -> DistanceResult:
    """Constant estimate used when the provider has no usable answer."""

    km = settings.fallback_distance_km
    minutes = settings.fallback_duration_min
    return DistanceResult(
        distance_km=km,
        duration_min=minutes,
        distance_text=f"~{km:g} km",
        duration_text=f"~{minutes} min",
        status=status,
        method=DistanceMethod.FALLBACK,
        route="Estimate (provider unavailable)",
    )


def parse_element(element: dict[str, Any]) -> DistanceResult:
    """Build a result from one OK matrix element."""

    distance = element["distance"]
    duration = element["duration"]
    in_traffic = element.get("duration_in_traffic")
    return DistanceResult(
        distance_km=math.floor(distance["value"] / 100 + 0.5) / 10,
        duration_min=math.ceil(duration["value"] / 60),
        distance_text=distance["text"],
        duration_text=duration["text"],
        status=DistanceStatus.OK,
        method=DistanceMethod.PROVIDER,
        duration_in_traffic_min=math.ceil(in_traffic["value"] / 60) if in_traffic else None,
        route=f"{distance['text']} - {duration['text']}",
    )


@dataclass(slots=True)
class DistanceOptions:
    """Optional request modifiers forwarded to the provider."""

    departure_time: datetime | None = None
    traffic_model: str | None = None
    avoid_tolls: bool = False
    avoid_highways: bool = False

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.departure_time is not None:
            params["departure_time"] = str(int(self.departure_time.timestamp()))
            if self.traffic_model:
                params["traffic_model"] = self.traffic_model
        avoid = [name for name, flag in (("tolls", self.avoid_tolls), ("highways", self.avoid_highways)) if flag]
        if avoid:
            params["avoid"] = "|".join(avoid)
        return params


@dataclass(slots=True)
class ClientStats:
    requests_today: int
    cache_size: int


class DistanceMatrixClient:
    def __init__(
        self,
        api_key: str | None = None,
        cache: GeoCache | None = None,
        rate_limiter: RateLimiter | None = None,
        http_client: httpx.Client | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        block_size: int | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        if not self.api_key:
            raise ValueError("Google Maps API key is not configured.")
        self.base_url = base_url or settings.distance_matrix_url
        self.timeout = timeout if timeout is not None else settings.provider_timeout_seconds
        self.block_size = block_size or settings.matrix_block_size
        self.cache = cache if cache is not None else GeoCache(store=build_cache_store())
        self.rate_limiter = rate_limiter or get_rate_limiter()
        self._client = http_client
        self._today = today
        self._counter_day = today()
        self.request_count = 0

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=httpx.Timeout(self.timeout, connect=5.0))
        return self._client

    def _roll_day(self) -> None:
        today = self._today()
        if today != self._counter_day:
            logger.info(f"Resetting provider request counter for {today.isoformat()}")
            self._counter_day = today
            self.request_count = 0

    def _count_request(self) -> None:
        self._roll_day()
        self.request_count += 1

    def _request(
        self,
        origins: Sequence[str],
        destinations: Sequence[str],
        options: DistanceOptions | None = None,
    ) -> dict[str, Any]:
        """Issue one rate-limited matrix request and return the decoded payload.

        Raises ``ProviderError`` on transport failures, malformed payloads or a
        non-OK top-level status.
        """
        params = {
            "origins": "|".join(origins),
            "destinations": "|".join(destinations),
            "mode": "driving",
            "units": "metric",
            "region": settings.country_code,
            "language": settings.provider_language,
            "key": self.api_key,
        }
        if options is not None:
            params.update(options.to_params())

        self.rate_limiter.acquire()
        self._count_request()
        try:
            response = self._get_client().get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"Distance Matrix HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Distance Matrix request failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Distance Matrix returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ProviderError("Distance Matrix returned an unexpected payload.")
        status = data.get("status")
        if status != "OK":
            raise ProviderStatusError(str(status), data.get("error_message"))
        return data

    def distance(
        self,
        origin: str,
        destination: str,
        options: DistanceOptions | None = None,
    ) -> DistanceResult:
        """Driving distance and duration from ``origin`` to ``destination``."""

        normalized_origin = normalize_address(origin)
        normalized_destination = normalize_address(destination)

        cached = self.cache.get(normalized_origin, normalized_destination)
        if cached is not None:
            logger.debug(f"Distance from cache: {normalized_origin} → {normalized_destination}")
            return cached

        logger.info(f"Calling Distance Matrix: {normalized_origin} → {normalized_destination}")
        try:
            data = self._request([normalized_origin], [normalized_destination], options)
            element = data["rows"][0]["elements"][0]
            if not isinstance(element, dict):
                raise ProviderError(f"Distance Matrix element is not an object: {element!r}")
            element_status = element.get("status")
            if element_status == "OK":
                result = parse_element(element)
            elif element_status == "ZERO_RESULTS":
                logger.warning(f"No route found between {origin} and {destination}; using estimate")
                return fallback_result(DistanceStatus.ZERO_RESULTS)
            else:
                raise ProviderStatusError(str(element_status))
        except ProviderError as e:
            logger.error(f"Distance Matrix error for {origin} → {destination}: {e}; using estimate")
            return fallback_result(DistanceStatus.ERROR)
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Malformed Distance Matrix response for {origin} → {destination}: {e}; using estimate")
            return fallback_result(DistanceStatus.ERROR)

        self.cache.put(normalized_origin, normalized_destination, result)
        logger.info(f"Distance computed: {result.distance_text} in {result.duration_text}")
        return result

    def distance_matrix(
        self,
        origins: Sequence[str],
        destinations: Sequence[str],
        options: DistanceOptions | None = None,
    ) -> list[list[DistanceResult]]:
        """Full ``len(origins) x len(destinations)`` matrix of results.

        The provider accepts at most ``block_size`` origins and destinations
        per request, so the matrix is filled block by block, one request at a
        time. Failures only affect the cells of the block they occurred in.
        """
        normalized_origins = [normalize_address(item) for item in origins]
        normalized_destinations = [normalize_address(item) for item in destinations]
        matrix: list[list[DistanceResult | None]] = [[None] * len(destinations) for _ in origins]

        step = self.block_size
        for row_start in range(0, len(origins), step):
            for col_start in range(0, len(destinations), step):
                self._fill_block(
                    matrix,
                    normalized_origins,
                    normalized_destinations,
                    row_start,
                    min(row_start + step, len(origins)),
                    col_start,
                    min(col_start + step, len(destinations)),
                    options,
                )
        return matrix  # type: ignore[return-value]

    def _fill_block(
        self,
        matrix: list[list[DistanceResult | None]],
        origins: list[str],
        destinations: list[str],
        row_start: int,
        row_end: int,
        col_start: int,
        col_end: int,
        options: DistanceOptions | None,
    ) -> None:
        missing = False
        for i in range(row_start, row_end):
            for j in range(col_start, col_end):
                matrix[i][j] = self.cache.get(origins[i], destinations[j])
                missing = missing or matrix[i][j] is None
        if not missing:
            logger.debug(f"Matrix block [{row_start}:{row_end}] x [{col_start}:{col_end}] served from cache")
            return

        block_origins = origins[row_start:row_end]
        block_destinations = destinations[col_start:col_end]
        logger.info(
            f"Calling Distance Matrix for block [{row_start}:{row_end}] x [{col_start}:{col_end}] "
            f"({len(block_origins)}x{len(block_destinations)} elements)"
        )
        try:
            rows = self._request(block_origins, block_destinations, options).get("rows")
            if not isinstance(rows, list):
                raise ProviderError("Distance Matrix response has no rows.")
        except ProviderError as e:
            logger.error(f"Distance Matrix block failed: {e}; using estimates for uncached cells")
            rows = []

        failed = 0
        for i in range(row_start, row_end):
            for j in range(col_start, col_end):
                if matrix[i][j] is not None:
                    continue
                result = self._parse_cell(rows, i - row_start, j - col_start)
                if result.method is DistanceMethod.PROVIDER:
                    self.cache.put(origins[i], destinations[j], result)
                else:
                    failed += 1
                matrix[i][j] = result
        if failed:
            logger.warning(f"{failed} matrix cells in block [{row_start}:{row_end}] x [{col_start}:{col_end}] use estimates")

    @staticmethod
    def _parse_cell(rows: list[Any], row: int, col: int) -> DistanceResult:
        try:
            element = rows[row]["elements"][col]
            status = element.get("status")
            if status == "OK":
                return parse_element(element)
            if status == "ZERO_RESULTS":
                return fallback_result(DistanceStatus.ZERO_RESULTS)
            return fallback_result(DistanceStatus.ERROR)
        except (KeyError, IndexError, TypeError, ValueError, AttributeError):
            return fallback_result(DistanceStatus.ERROR)

    def cost_function(self, options: DistanceOptions | None = None) -> Callable[[Coordinate, Coordinate], EdgeCost]:
        """Adapt ``distance`` to the route optimizer's cost function signature."""

        def cost(a: Coordinate, b: Coordinate) -> EdgeCost:
            result = self.distance(a.as_query(), b.as_query(), options)
            return EdgeCost(distance_km=result.distance_km, duration_min=result.duration_min, method=result.method)

        return cost

    def stats(self) -> ClientStats:
        self._roll_day()
        return ClientStats(requests_today=self.request_count, cache_size=len(self.cache))

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Distance cache cleared")

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
