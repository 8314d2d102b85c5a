"""Derive the coordinates used to query POIs along a route."""

from __future__ import annotations

from typing import List, Optional

from voyage.core.geo import interpolate
from voyage.core.stops import StopSequence
from voyage.schemas import Coordinate


def sample_route(
    stops: StopSequence,
    points_per_segment: int,
    *,
    fallback: Optional[Coordinate] = None,
) -> List[Coordinate]:
    """Return every stop plus evenly spaced waypoints between consecutive stops.

    With no stops the ``fallback`` coordinate (usually the chosen destination)
    is returned on its own, if there is one.
    """

    if points_per_segment < 0:
        raise ValueError("points_per_segment must not be negative")

    coordinates = stops.coordinates()
    if not coordinates:
        return [fallback] if fallback is not None else []

    samples: List[Coordinate] = [coordinates[0]]
    divisor = points_per_segment + 1
    for start, end in zip(coordinates, coordinates[1:]):
        for step in range(1, points_per_segment + 1):
            samples.append(interpolate(start, end, step / divisor))
        samples.append(end)
    return samples


__all__ = ["sample_route"]
