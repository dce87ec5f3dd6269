# spurilo/analyze/geodesic.py
"""
Distance between two waypoints, in meters.
"""

from __future__ import annotations

from typing import Callable

from geopy.distance import geodesic
from haversine import haversine, Unit

from spurilo.errors import ConfigurationError
from spurilo.formats.gpx import Waypoint

DistanceFunction = Callable[[Waypoint, Waypoint], float]


def geodesic_distance(a: Waypoint, b: Waypoint) -> float:
    """Ellipsoidal (WGS-84) distance between two waypoints."""
    return geodesic((a.lat, a.lon), (b.lat, b.lon)).meters


def haversine_distance(a: Waypoint, b: Waypoint) -> float:
    """Great-circle distance on a spherical earth; faster, slightly less accurate."""
    return haversine((a.lat, a.lon), (b.lat, b.lon), unit=Unit.METERS)


_METHODS: dict[str, DistanceFunction] = {
    "geodesic": geodesic_distance,
    "haversine": haversine_distance,
}


def distance_function(method: str = "geodesic") -> DistanceFunction:
    try:
        return _METHODS[method]
    except KeyError:
        raise ConfigurationError(f"unknown distance method: {method!r}") from None
