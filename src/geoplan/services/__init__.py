"""Geo services: geometry, geocoding, distances, regions and routing."""
