"""Session-level planning context and the command interface used by the UI."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Iterable, List, Optional, Set, Tuple

import httpx

from voyage.config import (
    DEFAULT_BUDGET_LEVEL,
    DEFAULT_CATEGORIES,
    DEFAULT_TRIP_DAYS,
    MAX_TRIP_DAYS,
    MIN_TRIP_DAYS,
    PlannerSettings,
)
from voyage.core import overpass
from voyage.core.catalog import BudgetAssigner, POICatalog
from voyage.core.itinerary import PlanOrder, PlanResult, plan_itinerary, total_distance_km
from voyage.core.sampler import sample_route
from voyage.core.stops import StopSequence
from voyage.schemas import (
    MAX_BUDGET_LEVEL,
    MIN_BUDGET_LEVEL,
    Coordinate,
    ExploreOutcome,
    ItineraryDay,
    NothingToPlan,
    POICategory,
    POIRecord,
    RawPOI,
    SearchCandidate,
    Stop,
    StopRole,
)

_LOGGER = logging.getLogger(__name__)

POISource = Callable[[Coordinate, POICategory], Awaitable[Optional[List[RawPOI]]]]
StopsListener = Callable[[List[Stop]], None]
CatalogListener = Callable[[List[POIRecord]], None]
PlanListener = Callable[[PlanResult], None]

_NO_RESULTS_MESSAGE = (
    "No places found near this route. OpenStreetMap coverage can be sparse in some "
    "regions; try more categories or stops closer to towns."
)
_MISSING_DESTINATION_MESSAGE = "Please select a destination first."


def _log_stage(stage: str, duration: float, **details: object) -> None:
    suffix = " ".join(f"{key}={value}" for key, value in details.items())
    _LOGGER.info("%s stage completed in %.2fs [%s]", stage.capitalize(), duration, suffix)


def _settled(
    job: Tuple[Coordinate, POICategory], outcome: object
) -> Optional[List[RawPOI]]:
    if isinstance(outcome, BaseException):
        if not isinstance(outcome, Exception):
            raise outcome
        sample, category = job
        _LOGGER.warning(
            "POI query for %s near %s failed: %s", category.value, sample.as_tuple(), outcome
        )
        return None
    return outcome  # type: ignore[return-value]


class PlanningContext:
    """All mutable state for one planning session.

    The presentation layer holds one instance per session and drives it only
    through the command methods below. Mutations are single-writer.
    """

    def __init__(
        self,
        *,
        settings: Optional[PlannerSettings] = None,
        budget_assigner: Optional[BudgetAssigner] = None,
    ) -> None:
        self.settings = settings or PlannerSettings()
        self.stops = StopSequence()
        self.catalog = POICatalog(budget_assigner)
        self.selected_categories: Set[POICategory] = set(DEFAULT_CATEGORIES)
        self.trip_days = DEFAULT_TRIP_DAYS
        self.budget_level = DEFAULT_BUDGET_LEVEL
        self.origin: Optional[SearchCandidate] = None
        self.destination: Optional[SearchCandidate] = None
        self._generation = 0
        self.stops_listeners: List[StopsListener] = []
        self.catalog_listeners: List[CatalogListener] = []
        self.plan_listeners: List[PlanListener] = []

    @property
    def generation(self) -> int:
        return self._generation

    # -- presentation signals -------------------------------------------------

    def _emit_stops(self) -> None:
        current = self.stops.stops()
        for listener in self.stops_listeners:
            listener(current)

    def _emit_catalog(self) -> None:
        visible = self.visible_pois()
        for listener in self.catalog_listeners:
            listener(visible)

    # -- stop commands --------------------------------------------------------

    def add_stop(
        self,
        coordinate: Coordinate,
        name: str,
        role_hint: Optional[StopRole] = None,
    ) -> Stop:
        stop = self.stops.append(coordinate, name, role_hint)
        _LOGGER.info("Added stop %s (%s)", stop.label, name)
        self._emit_stops()
        return stop

    def update_stop(self, index: int, coordinate: Coordinate, name: str) -> Stop:
        stop = self.stops.update(index, coordinate, name)
        _LOGGER.info("Updated stop %s (%s)", stop.label, name)
        self._emit_stops()
        return stop

    def remove_stop(self, index: int) -> Stop:
        removed = self.stops.remove(index)
        _LOGGER.info("Removed stop %s (%s)", removed.label, removed.display_name)
        self._emit_stops()
        return removed

    def select_origin(self, candidate: SearchCandidate) -> Stop:
        """Use a search result as the first stop of the route."""

        self.origin = candidate
        if len(self.stops) == 0:
            return self.add_stop(candidate.coordinate, candidate.short_name, StopRole.START)
        return self.update_stop(0, candidate.coordinate, candidate.short_name)

    def select_destination(self, candidate: SearchCandidate) -> Stop:
        """Use a search result as the final stop of the route."""

        self.destination = candidate
        count = len(self.stops)
        if count == 0:
            return self.add_stop(candidate.coordinate, candidate.short_name, StopRole.START)
        if count == 1:
            return self.add_stop(candidate.coordinate, candidate.short_name, StopRole.END)
        return self.update_stop(count - 1, candidate.coordinate, candidate.short_name)

    # -- preference commands --------------------------------------------------

    def set_selected_categories(self, categories: Iterable[POICategory]) -> None:
        self.selected_categories = {POICategory(category) for category in categories}
        self._emit_catalog()

    def toggle_category(self, category: POICategory) -> bool:
        """Flip membership of ``category`` and return whether it is now selected."""

        if category in self.selected_categories:
            self.selected_categories.discard(category)
            selected = False
        else:
            self.selected_categories.add(category)
            selected = True
        self._emit_catalog()
        return selected

    def set_trip_days(self, days: int) -> int:
        self.trip_days = max(MIN_TRIP_DAYS, min(MAX_TRIP_DAYS, int(days)))
        return self.trip_days

    def adjust_trip_days(self, delta: int) -> int:
        return self.set_trip_days(self.trip_days + delta)

    def set_budget_filter(self, level: int) -> None:
        if not MIN_BUDGET_LEVEL <= level <= MAX_BUDGET_LEVEL:
            raise ValueError(f"Budget level must be between 1 and 4, got {level}")
        self.budget_level = level
        self._emit_catalog()

    # -- queries --------------------------------------------------------------

    def visible_pois(self) -> List[POIRecord]:
        return [
            record
            for record, shown in self.catalog.visibility(self.budget_level, self.selected_categories)
            if shown
        ]

    def poi_visibility(self) -> List[Tuple[POIRecord, bool]]:
        return self.catalog.visibility(self.budget_level, self.selected_categories)

    def total_distance_km(self) -> int:
        return total_distance_km(self.stops)

    def plan(self, *, order: PlanOrder = "ingestion") -> PlanResult:
        result = plan_itinerary(self.stops, self.catalog, self.trip_days, order=order)
        for listener in self.plan_listeners:
            listener(result)
        return result

    def clear_pois(self) -> None:
        """Drop discovered POIs and invalidate any explore still in flight."""

        self._generation += 1
        self.catalog.clear()
        self._emit_catalog()

    # -- explore --------------------------------------------------------------

    def _sample_points(self, points_per_segment: Optional[int]) -> List[Coordinate]:
        fallback = self.destination.coordinate if self.destination else None
        per_segment = (
            self.settings.points_per_segment if points_per_segment is None else points_per_segment
        )
        return sample_route(self.stops, per_segment, fallback=fallback)

    async def explore(
        self,
        source: Optional[POISource] = None,
        *,
        points_per_segment: Optional[int] = None,
    ) -> ExploreOutcome:
        """Query POIs around every sample point for every selected category.

        Queries run concurrently; individual failures are counted and skipped.
        If another explore or :meth:`clear_pois` happens before this one
        finishes, its results are discarded.
        """

        if len(self.stops) == 0 and self.destination is None:
            _LOGGER.info("Explore skipped: no destination selected")
            return ExploreOutcome(status="missing_destination", message=_MISSING_DESTINATION_MESSAGE)

        self.clear_pois()
        token = self._generation

        samples = self._sample_points(points_per_segment)
        categories = sorted(self.selected_categories, key=lambda category: category.value)
        jobs = [(sample, category) for sample in samples for category in categories]

        start = time.perf_counter()
        if source is None:
            results = await self._run_with_default_source(jobs)
        else:
            gathered = await asyncio.gather(
                *(source(sample, category) for sample, category in jobs),
                return_exceptions=True,
            )
            results = [_settled(job, outcome) for job, outcome in zip(jobs, gathered)]
        _log_stage("explore", time.perf_counter() - start, samples=len(samples), queries=len(jobs))

        failed = sum(1 for result in results if result is None)
        if token != self._generation:
            _LOGGER.info("Discarding explore results from generation %d", token)
            return ExploreOutcome(
                status="stale",
                sample_count=len(samples),
                query_count=len(jobs),
                failed_queries=failed,
            )

        for (_, category), result in zip(jobs, results):
            if result:
                self.catalog.ingest(result, category)
        self._emit_catalog()

        poi_count = self.catalog.size()
        if poi_count == 0:
            _LOGGER.info("Explore found no POIs (%d of %d queries failed)", failed, len(jobs))
            return ExploreOutcome(
                status="no_results",
                sample_count=len(samples),
                query_count=len(jobs),
                failed_queries=failed,
                message=_NO_RESULTS_MESSAGE,
            )

        return ExploreOutcome(
            status="ok",
            sample_count=len(samples),
            query_count=len(jobs),
            failed_queries=failed,
            poi_count=poi_count,
        )

    async def _run_with_default_source(
        self, jobs: List[Tuple[Coordinate, POICategory]]
    ) -> List[Optional[List[RawPOI]]]:
        async with httpx.AsyncClient() as client:
            gathered = await asyncio.gather(
                *(
                    overpass.fetch_pois_safe(client, sample, category, settings=self.settings)
                    for sample, category in jobs
                ),
                return_exceptions=True,
            )
        return [_settled(job, outcome) for job, outcome in zip(jobs, gathered)]

    def explore_sync(
        self,
        source: Optional[POISource] = None,
        *,
        points_per_segment: Optional[int] = None,
    ) -> ExploreOutcome:
        """Blocking wrapper around :meth:`explore` for synchronous callers."""

        return asyncio.run(self.explore(source, points_per_segment=points_per_segment))


def is_nothing_to_plan(result: PlanResult) -> bool:
    return isinstance(result, NothingToPlan)


def planned_days(result: PlanResult) -> List[ItineraryDay]:
    return [] if isinstance(result, NothingToPlan) else list(result)


__all__ = [
    "POISource",
    "PlanningContext",
    "is_nothing_to_plan",
    "planned_days",
]
