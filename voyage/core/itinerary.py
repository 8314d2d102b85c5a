"""Distribute discovered POIs across the days of a trip."""

from __future__ import annotations

import logging
from math import ceil
from typing import List, Literal, Union

from voyage.config import MAX_TRIP_DAYS, MIN_TRIP_DAYS
from voyage.core.catalog import POICatalog
from voyage.core.stops import StopSequence
from voyage.schemas import ItineraryDay, ItineraryPlace, NothingToPlan, POIRecord

_LOGGER = logging.getLogger(__name__)

PlanOrder = Literal["ingestion", "stable"]
PlanResult = Union[List[ItineraryDay], NothingToPlan]


def _stable_key(record: POIRecord) -> tuple:
    return (record.coordinate.latitude, record.coordinate.longitude, record.name)


def plan_itinerary(
    stops: StopSequence,
    catalog: POICatalog,
    trip_days: int,
    *,
    order: PlanOrder = "ingestion",
) -> PlanResult:
    """Split the catalogue into contiguous daily chunks.

    Day 1 opens with the route's start stop and the last planned day closes
    with its end stop. An empty catalogue yields :class:`NothingToPlan` rather
    than an empty list so callers can tell the two apart.
    """

    if not MIN_TRIP_DAYS <= trip_days <= MAX_TRIP_DAYS:
        raise ValueError(
            f"trip_days must be between {MIN_TRIP_DAYS} and {MAX_TRIP_DAYS}, got {trip_days}"
        )

    records = catalog.all()
    if not records:
        _LOGGER.info("Nothing to plan: catalog is empty")
        return NothingToPlan()

    if order == "stable":
        records.sort(key=_stable_key)

    per_day = ceil(len(records) / trip_days)
    days: List[ItineraryDay] = []
    for day_index in range(trip_days):
        chunk = records[day_index * per_day : (day_index + 1) * per_day]
        places = [ItineraryPlace.from_record(record) for record in chunk]
        if day_index == 0 and len(stops) > 0:
            places.insert(0, ItineraryPlace.from_stop(stops[0], "start"))
        if not places:
            continue
        days.append(ItineraryDay(day_number=day_index + 1, places=places))

    if len(stops) > 1:
        last_stop = stops[len(stops) - 1]
        days[-1].places.append(ItineraryPlace.from_stop(last_stop, "end"))

    _LOGGER.info(
        "Planned %d POIs over %d of %d days (%d per day)",
        len(records),
        len(days),
        trip_days,
        per_day,
    )
    return days


def total_distance_km(stops: StopSequence) -> int:
    """Route length rounded to the nearest whole kilometre for display."""

    return int(round(stops.total_distance_km()))


__all__ = ["PlanOrder", "PlanResult", "plan_itinerary", "total_distance_km"]
