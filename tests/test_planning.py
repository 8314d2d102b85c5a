from __future__ import annotations

import asyncio
from typing import List, Optional, Tuple

import httpx
import pytest

from voyage.config import PlannerSettings
from voyage.core import overpass
from voyage.core.stops import StopIndexError
from voyage.schemas import (
    Coordinate,
    NothingToPlan,
    POICategory,
    RawPOI,
    SearchCandidate,
    StopRole,
)
from voyage.workflows import PlanningContext, planned_days

DELHI = Coordinate(latitude=28.6139, longitude=77.2090)
AGRA = Coordinate(latitude=27.1767, longitude=78.0081)
JAIPUR = Coordinate(latitude=26.9124, longitude=75.7873)


def _candidate(name: str, coordinate: Coordinate) -> SearchCandidate:
    return SearchCandidate(display_name=f"{name}, India", coordinate=coordinate)


def _context(points_per_segment: int = 1) -> PlanningContext:
    return PlanningContext(settings=PlannerSettings(points_per_segment=points_per_segment))


class RecordingSource:
    """Fake POI source returning one POI per query, with optional failures."""

    def __init__(self, failing: Optional[set] = None, raising: Optional[set] = None):
        self.calls: List[Tuple[Coordinate, POICategory]] = []
        self.failing = failing or set()
        self.raising = raising or set()

    async def __call__(self, coordinate: Coordinate, category: POICategory) -> Optional[List[RawPOI]]:
        self.calls.append((coordinate, category))
        if category in self.raising:
            raise RuntimeError("boom")
        if category in self.failing:
            return None
        return [RawPOI(latitude=coordinate.latitude, longitude=coordinate.longitude, name=f"{category.value}")]


def test_origin_and_destination_selection() -> None:
    context = _context()

    context.select_origin(_candidate("Delhi", DELHI))
    context.select_destination(_candidate("Agra", AGRA))
    context.select_destination(_candidate("Jaipur", JAIPUR))

    stops = context.stops.stops()
    assert [stop.display_name for stop in stops] == ["Delhi", "Jaipur"]
    assert [stop.role for stop in stops] == [StopRole.START, StopRole.END]


def test_origin_replaces_first_stop() -> None:
    context = _context()
    context.select_destination(_candidate("Agra", AGRA))

    context.select_origin(_candidate("Delhi", DELHI))

    assert [stop.display_name for stop in context.stops] == ["Delhi"]
    assert context.origin is not None and context.destination is not None


def test_destination_updates_last_of_many_stops() -> None:
    context = _context()
    context.add_stop(DELHI, "Delhi")
    context.add_stop(JAIPUR, "Jaipur")
    context.add_stop(AGRA, "Agra")

    context.select_destination(_candidate("Varanasi", Coordinate(latitude=25.3176, longitude=82.9739)))

    assert [stop.display_name for stop in context.stops] == ["Delhi", "Jaipur", "Varanasi"]


def test_remove_stop_propagates_index_errors() -> None:
    context = _context()

    with pytest.raises(StopIndexError):
        context.remove_stop(0)


def test_stop_listeners_receive_full_list() -> None:
    context = _context()
    seen: List[List[str]] = []
    context.stops_listeners.append(lambda stops: seen.append([stop.label for stop in stops]))

    context.add_stop(DELHI, "Delhi")
    context.add_stop(AGRA, "Agra")
    context.remove_stop(0)

    assert seen == [["A"], ["A", "B"], ["A"]]


def test_trip_days_are_clamped() -> None:
    context = _context()

    assert context.set_trip_days(0) == 1
    assert context.set_trip_days(45) == 30
    assert context.adjust_trip_days(-1) == 29


def test_budget_filter_validates_level() -> None:
    context = _context()

    context.set_budget_filter(4)
    assert context.budget_level == 4
    with pytest.raises(ValueError):
        context.set_budget_filter(0)


def test_toggle_category() -> None:
    context = _context()

    assert context.toggle_category(POICategory.HOTEL) is True
    assert POICategory.HOTEL in context.selected_categories
    assert context.toggle_category(POICategory.HOTEL) is False
    assert POICategory.HOTEL not in context.selected_categories


def test_explore_without_destination_is_rejected() -> None:
    context = _context()
    source = RecordingSource()

    outcome = asyncio.run(context.explore(source))

    assert outcome.status == "missing_destination"
    assert source.calls == []


def test_explore_fans_out_over_samples_and_categories() -> None:
    context = _context(points_per_segment=1)
    context.add_stop(DELHI, "Delhi")
    context.add_stop(AGRA, "Agra")
    context.set_selected_categories([POICategory.FOOD, POICategory.LANDMARK])
    source = RecordingSource()

    outcome = asyncio.run(context.explore(source))

    assert outcome.status == "ok"
    assert outcome.sample_count == 3
    assert outcome.query_count == 6
    assert outcome.poi_count == 6
    assert len(source.calls) == 6
    assert context.catalog.counts_by_category() == {POICategory.FOOD: 3, POICategory.LANDMARK: 3}


def test_explore_uses_destination_when_route_is_empty() -> None:
    context = _context()
    context.destination = _candidate("Agra", AGRA)
    context.set_selected_categories([POICategory.CAFE])
    source = RecordingSource()

    outcome = asyncio.run(context.explore(source))

    assert outcome.sample_count == 1
    assert source.calls == [(AGRA, POICategory.CAFE)]


def test_partial_failures_do_not_block_successes() -> None:
    context = _context(points_per_segment=0)
    context.add_stop(DELHI, "Delhi")
    context.set_selected_categories([POICategory.FOOD, POICategory.CAFE, POICategory.SHOP])
    source = RecordingSource(failing={POICategory.CAFE}, raising={POICategory.SHOP})

    outcome = asyncio.run(context.explore(source))

    assert outcome.status == "ok"
    assert outcome.failed_queries == 2
    assert [record.category for record in context.catalog.all()] == [POICategory.FOOD]


def test_no_results_is_distinct_from_failure() -> None:
    context = _context(points_per_segment=0)
    context.add_stop(DELHI, "Delhi")

    async def empty_source(coordinate: Coordinate, category: POICategory) -> List[RawPOI]:
        return []

    outcome = asyncio.run(context.explore(empty_source))

    assert outcome.status == "no_results"
    assert outcome.failed_queries == 0
    assert outcome.message
    assert isinstance(context.plan(), NothingToPlan)


def test_explore_replaces_previous_results() -> None:
    context = _context(points_per_segment=0)
    context.add_stop(DELHI, "Delhi")
    context.set_selected_categories([POICategory.FOOD])

    asyncio.run(context.explore(RecordingSource()))
    asyncio.run(context.explore(RecordingSource()))

    assert context.catalog.size() == 1


def test_late_results_are_discarded_after_clear() -> None:
    context = _context(points_per_segment=0)
    context.add_stop(DELHI, "Delhi")
    context.set_selected_categories([POICategory.FOOD])

    async def slow_source(coordinate: Coordinate, category: POICategory) -> List[RawPOI]:
        context.clear_pois()
        await asyncio.sleep(0)
        return [RawPOI(latitude=1.0, longitude=1.0, name="late")]

    outcome = asyncio.run(context.explore(slow_source))

    assert outcome.status == "stale"
    assert context.catalog.size() == 0


def test_explore_default_source_uses_overpass(monkeypatch: pytest.MonkeyPatch) -> None:
    context = _context(points_per_segment=0)
    context.add_stop(DELHI, "Delhi")
    context.set_selected_categories([POICategory.HOTEL])
    calls: List[POICategory] = []

    async def fake_fetch(client, coordinate, category, *, settings=None):
        calls.append(category)
        return [RawPOI(latitude=coordinate.latitude, longitude=coordinate.longitude, name="The Imperial")]

    monkeypatch.setattr(overpass, "fetch_pois_safe", fake_fetch)

    outcome = context.explore_sync()

    assert outcome.status == "ok"
    assert calls == [POICategory.HOTEL]
    assert context.catalog.all()[0].name == "The Imperial"


def test_visible_pois_follow_budget_and_categories() -> None:
    context = _context(points_per_segment=0)
    context.add_stop(DELHI, "Delhi")
    context.set_selected_categories([POICategory.FOOD, POICategory.CAFE])
    asyncio.run(context.explore(RecordingSource()))

    context.set_budget_filter(1)
    assert context.visible_pois() == []

    context.set_budget_filter(2)
    context.toggle_category(POICategory.CAFE)
    assert [record.category for record in context.visible_pois()] == [POICategory.FOOD]
    assert context.catalog.size() == 2


def test_end_to_end_delhi_to_agra() -> None:
    context = _context(points_per_segment=2)
    context.select_origin(_candidate("Delhi", DELHI))
    context.select_destination(_candidate("Agra", AGRA))
    context.set_trip_days(1)

    assert 175 <= context.total_distance_km() <= 181
    assert isinstance(context.plan(), NothingToPlan)

    context.set_selected_categories([POICategory.LANDMARK])
    context.set_trip_days(2)
    asyncio.run(context.explore(RecordingSource()))
    received = []
    context.plan_listeners.append(received.append)

    days = planned_days(context.plan())

    assert [day.poi_count() for day in days] == [2, 2]
    assert days[0].places[0].name == "Delhi"
    assert days[-1].places[-1].name == "Agra"
    assert len(received) == 1


def test_default_source_isolates_unexpected_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    context = _context(points_per_segment=0)
    context.add_stop(DELHI, "Delhi")
    context.set_selected_categories([POICategory.FOOD, POICategory.CAFE])

    async def fake_fetch(client, coordinate, category, *, settings=None):
        if category is POICategory.FOOD:
            raise httpx.InvalidURL("Invalid port: 'abc'")
        return [RawPOI(latitude=coordinate.latitude, longitude=coordinate.longitude, name="Indian Coffee House")]

    monkeypatch.setattr(overpass, "fetch_pois_safe", fake_fetch)

    outcome = context.explore_sync()

    assert outcome.status == "ok"
    assert outcome.query_count == 2
    assert outcome.failed_queries == 1
    assert [record.name for record in context.catalog.all()] == ["Indian Coffee House"]


def test_default_source_skips_out_of_range_elements(monkeypatch: pytest.MonkeyPatch) -> None:
    context = PlanningContext(
        settings=PlannerSettings(points_per_segment=0, overpass_url="https://overpass.test/api")
    )
    context.add_stop(DELHI, "Delhi")
    context.set_selected_categories([POICategory.FOOD, POICategory.CAFE])
    payload = {
        "elements": [
            {"type": "node", "id": 1, "lat": 28.6, "lon": 77.2, "tags": {"name": "Saravana Bhavan"}},
            {"type": "node", "id": 2, "lat": 95.0, "lon": 77.2, "tags": {"name": "Nowhere"}},
        ]
    }

    async def fake_post(self, url, **kwargs):
        return httpx.Response(200, json=payload, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx.AsyncClient, "post", fake_post)

    outcome = context.explore_sync()

    assert outcome.status == "ok"
    assert outcome.failed_queries == 0
    assert [record.name for record in context.catalog.all()] == ["Saravana Bhavan", "Saravana Bhavan"]
