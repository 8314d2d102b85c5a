"""Sidebar controls and itinerary view for the trip planner."""

from __future__ import annotations

import logging
from typing import List, Optional

import streamlit as st

from voyage.config import (
    BUDGET_LEVELS,
    MAX_TRIP_DAYS,
    MIN_TRIP_DAYS,
    POI_CATEGORIES,
    category_spec,
)
from voyage.core import nominatim
from voyage.core.catalog import RandomBudgetAssigner
from voyage.core.stops import StopIndexError
from voyage.schemas import Coordinate, ExploreOutcome, SearchCandidate
from voyage.workflows import PlanningContext, is_nothing_to_plan, planned_days

_LOGGER = logging.getLogger(__name__)

_CONTEXT_KEY = "_planning_context"
_RESULTS_KEY = "_search_results"
_OUTCOME_KEY = "_explore_outcome"


def ensure_plan_state() -> PlanningContext:
    """Initialise the Streamlit session state used by the planner UI."""

    if _CONTEXT_KEY not in st.session_state:
        st.session_state[_CONTEXT_KEY] = PlanningContext(budget_assigner=RandomBudgetAssigner())
    st.session_state.setdefault(_RESULTS_KEY, {"origin": [], "destination": []})
    st.session_state.setdefault(_OUTCOME_KEY, None)
    return st.session_state[_CONTEXT_KEY]


def _context() -> PlanningContext:
    return st.session_state[_CONTEXT_KEY]


def _render_search(kind: str, label: str) -> None:
    context = _context()
    query = st.text_input(label, key=f"{kind}_query", placeholder="Search for a place")
    results: List[SearchCandidate] = st.session_state[_RESULTS_KEY][kind]
    if query and st.button("Search", key=f"{kind}_search"):
        results = nominatim.search(query)
        st.session_state[_RESULTS_KEY][kind] = results
        if not results:
            st.info("No results found")

    for index, candidate in enumerate(results):
        if st.button(candidate.short_name, key=f"{kind}_pick_{index}", help=candidate.display_name):
            if kind == "origin":
                context.select_origin(candidate)
            else:
                context.select_destination(candidate)
            st.session_state[_RESULTS_KEY][kind] = []
            st.rerun()


def _render_stops() -> None:
    context = _context()
    stops = context.stops.stops()
    if not stops:
        st.caption("A · Starting point. Search above or add a stop.")
    for index, stop in enumerate(stops):
        left, right = st.columns([5, 1])
        left.markdown(f"**{stop.label}** {stop.display_name}  \nStop {index + 1} of {len(stops)}")
        if right.button("✕", key=f"remove_stop_{index}"):
            try:
                context.remove_stop(index)
            except StopIndexError as exc:
                _LOGGER.warning("Stop removal rejected: %s", exc)
            st.rerun()

    with st.expander("Add a stop"):
        latitude = st.number_input("Latitude", min_value=-90.0, max_value=90.0, value=0.0, format="%.5f")
        longitude = st.number_input(
            "Longitude", min_value=-180.0, max_value=180.0, value=0.0, format="%.5f"
        )
        if st.button("Add stop", key="add_stop"):
            coordinate = Coordinate(latitude=latitude, longitude=longitude)
            context.add_stop(coordinate, nominatim.reverse(coordinate))
            st.rerun()

    if len(stops) >= 2:
        st.metric("Route distance", f"{context.total_distance_km()} km")


def _render_preferences() -> None:
    context = _context()
    days = st.number_input(
        "Trip duration (days)",
        min_value=MIN_TRIP_DAYS,
        max_value=MAX_TRIP_DAYS,
        value=context.trip_days,
        step=1,
    )
    context.set_trip_days(int(days))

    level = st.select_slider(
        "Budget",
        options=list(BUDGET_LEVELS),
        value=context.budget_level,
        format_func=lambda value: f"{BUDGET_LEVELS[value].symbol} {BUDGET_LEVELS[value].name}",
    )
    if level != context.budget_level:
        context.set_budget_filter(int(level))

    selected = st.multiselect(
        "Places to discover",
        options=list(POI_CATEGORIES),
        default=sorted(context.selected_categories, key=lambda category: category.value),
        format_func=lambda category: f"{category_spec(category).icon} {category_spec(category).name}",
    )
    if set(selected) != context.selected_categories:
        context.set_selected_categories(selected)


def _format_explore_error(exc: Exception) -> str:
    base_message = "Unable to search for places."
    details = str(exc).strip()
    if details:
        lowered = details.lower()
        if "429" in lowered or "too many requests" in lowered:
            return f"{base_message} The map data service is busy. Wait a moment and try again."
        return f"{base_message} {details}"
    return f"{base_message} Check your connection and try again."


def _handle_explore(context: PlanningContext) -> Optional[ExploreOutcome]:
    try:
        with st.spinner("Searching…"):
            outcome = context.explore_sync()
    except Exception as exc:  # noqa: BLE001 - surfaced to the user
        _LOGGER.exception("Explore failed")
        st.session_state[_OUTCOME_KEY] = None
        st.error(_format_explore_error(exc))
        return None
    st.session_state[_OUTCOME_KEY] = outcome
    return outcome


def _render_explore() -> None:
    context = _context()
    if st.button("✨ Explore places", type="primary", key="explore"):
        _handle_explore(context)

    outcome: Optional[ExploreOutcome] = st.session_state.get(_OUTCOME_KEY)
    if outcome is None:
        return
    if outcome.status == "missing_destination":
        st.error(outcome.message)
    elif outcome.status == "no_results":
        st.info(outcome.message)
    elif outcome.failed_queries:
        st.warning(f"{outcome.failed_queries} of {outcome.query_count} searches failed; showing partial results.")


def render_sidebar(container) -> None:
    """Render the trip controls inside the provided container."""

    with container:
        st.subheader("Route")
        _render_search("origin", "Starting point")
        _render_search("destination", "Destination")
        _render_stops()
        st.subheader("Trip")
        _render_preferences()
        _render_explore()


def render_itinerary(container) -> None:
    """Render the day-by-day plan for the current session."""

    context = _context()
    with container:
        st.subheader("Itinerary")
        result = context.plan()
        if is_nothing_to_plan(result):
            st.info(result.message)  # type: ignore[union-attr]
            return
        for day in planned_days(result):
            with st.expander(f"Day {day.day_number} · {day.poi_count()} places", expanded=day.day_number == 1):
                for place in day.places:
                    if place.kind == "poi" and place.category is not None:
                        spec = category_spec(place.category)
                        budget = BUDGET_LEVELS[place.budget_level].symbol if place.budget_level else ""
                        st.markdown(f"{spec.icon} {place.name} · {spec.name} {budget}")
                    else:
                        st.markdown(f"📍 **{place.name}** ({place.kind})")


__all__ = ["ensure_plan_state", "render_itinerary", "render_sidebar"]
