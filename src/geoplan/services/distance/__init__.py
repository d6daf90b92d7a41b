"""Distance services."""

from .cache import GeoCache, cache_key
from .client import DistanceMatrixClient, DistanceOptions, fallback_result

__all__ = ["GeoCache", "cache_key", "DistanceMatrixClient", "DistanceOptions", "fallback_result"]
