"""Geocoding service exports."""

from .resolver import GeocodeOutcome, GeocodingResolver, normalize_address

__all__ = ["GeocodeOutcome", "GeocodingResolver", "normalize_address"]
