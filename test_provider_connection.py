#!/usr/bin/env python3
"""Manual check that the geocoding and distance providers answer."""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from geoplan import configure_logging
from geoplan.config import settings
from geoplan.models.domain import DistanceMethod
from geoplan.persistence.cache_store import MemoryCacheStore
from geoplan.services.distance.cache import GeoCache
from geoplan.services.distance.client import DistanceMatrixClient
from geoplan.services.geocoding.resolver import GeocodingResolver


def main():
    configure_logging()
    print("=" * 60)
    print("Provider Connection Test")
    print("=" * 60)
    print()

    print("1. Testing Nominatim geocoding...")
    resolver = GeocodingResolver()
    try:
        # not in the gazetteer, so this goes to the provider
        coordinate = resolver.resolve("Ebene Cybercity")
    finally:
        resolver.close()
    if coordinate is None:
        print("   [ERROR] Nominatim returned no coordinate")
        return 1
    print(f"   [OK] Ebene Cybercity -> {coordinate.lat:.4f}, {coordinate.lng:.4f}")
    print()

    print("2. Checking Distance Matrix configuration...")
    if not settings.google_maps_api_key:
        print("   [ERROR] Google Maps API key is not configured")
        print("   Please set GEOPLAN_GOOGLE_MAPS_API_KEY in your .env file")
        return 1
    print(f"   [OK] Endpoint: {settings.distance_matrix_url}")
    print()

    print("3. Testing Distance Matrix request...")
    # keep the check out of the durable cache
    client = DistanceMatrixClient(cache=GeoCache(store=MemoryCacheStore()))
    try:
        result = client.distance("Port Louis", "Curepipe")
    finally:
        client.close()
    if result.method is DistanceMethod.FALLBACK:
        print(f"   [ERROR] Provider did not answer (status {result.status.value}); got the fallback estimate")
        return 1
    print(f"   [OK] Port Louis -> Curepipe: {result.distance_text}, {result.duration_text}")
    print()

    print("=" * 60)
    print("[SUCCESS] Providers are reachable!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
