"""Export services."""

from .geojson import route_to_geojson

__all__ = [
    "route_to_geojson",
]
