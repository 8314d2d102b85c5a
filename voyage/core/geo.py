"""Great-circle distance and straight-line interpolation helpers."""

from __future__ import annotations

from math import asin, cos, radians, sin, sqrt

from voyage.schemas import Coordinate

EARTH_RADIUS_KM = 6371.0


def _haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the spherical distance in kilometres between two coordinates."""

    d_lat = radians(lat2 - lat1)
    d_lon = radians(lon2 - lon1)
    a = sin(d_lat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(d_lon / 2) ** 2
    # Rounding can push ``a`` a hair above 1 for antipodal points.
    c = 2 * asin(sqrt(min(1.0, a)))
    return EARTH_RADIUS_KM * c


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in kilometres."""

    return _haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def interpolate(a: Coordinate, b: Coordinate, fraction: float) -> Coordinate:
    """Blend latitude and longitude independently.

    This is a planar approximation meant for short hops between adjacent stops;
    it does not follow the great circle.
    """

    if not 0.0 < fraction < 1.0:
        raise ValueError(f"fraction must be strictly between 0 and 1, got {fraction}")
    return Coordinate(
        latitude=a.latitude + (b.latitude - a.latitude) * fraction,
        longitude=a.longitude + (b.longitude - a.longitude) * fraction,
    )


__all__ = ["EARTH_RADIUS_KM", "distance_km", "interpolate"]
