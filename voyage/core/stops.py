"""Ordered, mutable route stops with position-derived roles and labels."""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from voyage.core.geo import distance_km
from voyage.schemas import Coordinate, Stop, StopRole

_LOGGER = logging.getLogger(__name__)


class StopIndexError(IndexError):
    """Raised when a stop index does not refer to an existing stop."""


def stop_label(index: int) -> str:
    """Return the spreadsheet-style label for ``index`` (A..Z, AA, AB, ...)."""

    if index < 0:
        raise ValueError("index must not be negative")
    label = ""
    value = index + 1
    while value:
        value, remainder = divmod(value - 1, 26)
        label = chr(ord("A") + remainder) + label
    return label


def stop_role(index: int, length: int) -> StopRole:
    if index == 0:
        return StopRole.START
    if index == length - 1 and length > 1:
        return StopRole.END
    return StopRole.MID


class StopSequence:
    """The route as an ordered list of :class:`Stop` values.

    Roles and labels are never stored independently of order: every mutation
    rebuilds them from the current positions.
    """

    def __init__(self) -> None:
        self._stops: List[Stop] = []

    def __len__(self) -> int:
        return len(self._stops)

    def __iter__(self) -> Iterator[Stop]:
        return iter(list(self._stops))

    def __getitem__(self, index: int) -> Stop:
        self._check_index(index)
        return self._stops[index]

    def __repr__(self) -> str:
        names = ", ".join(f"{stop.label}:{stop.display_name}" for stop in self._stops)
        return f"StopSequence([{names}])"

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._stops):
            raise StopIndexError(
                f"Stop index {index} is out of range for a route with {len(self._stops)} stops"
            )

    def _relabel(self) -> None:
        length = len(self._stops)
        self._stops = [
            stop.model_copy(update={"role": stop_role(index, length), "label": stop_label(index)})
            for index, stop in enumerate(self._stops)
        ]

    def append(
        self,
        coordinate: Coordinate,
        name: str,
        role_hint: Optional[StopRole] = None,
    ) -> Stop:
        """Add a stop at the end of the route and return it with its derived role."""

        self._stops.append(Stop(coordinate=coordinate, display_name=name))
        self._relabel()
        added = self._stops[-1]
        if role_hint is not None and role_hint != added.role:
            _LOGGER.debug(
                "Stop %s added with role hint %s; derived role is %s",
                added.label,
                role_hint.value,
                added.role.value,
            )
        return added

    def update(self, index: int, coordinate: Coordinate, name: str) -> Stop:
        """Replace the location of an existing stop, keeping its position."""

        self._check_index(index)
        current = self._stops[index]
        self._stops[index] = current.model_copy(
            update={"coordinate": coordinate, "display_name": name}
        )
        return self._stops[index]

    def remove(self, index: int) -> Stop:
        """Remove a stop and relabel the remaining ones."""

        self._check_index(index)
        removed = self._stops.pop(index)
        self._relabel()
        return removed

    def clear(self) -> None:
        self._stops = []

    def stops(self) -> List[Stop]:
        return list(self._stops)

    def coordinates(self) -> List[Coordinate]:
        return [stop.coordinate for stop in self._stops]

    def first(self) -> Optional[Stop]:
        return self._stops[0] if self._stops else None

    def last(self) -> Optional[Stop]:
        return self._stops[-1] if self._stops else None

    def segment_count(self) -> int:
        return max(0, len(self._stops) - 1)

    def total_distance_km(self) -> float:
        """Sum of great-circle distances between consecutive stops."""

        coordinates = self.coordinates()
        return sum(distance_km(a, b) for a, b in zip(coordinates, coordinates[1:]))


__all__ = ["StopIndexError", "StopSequence", "stop_label", "stop_role"]
