"""Route and POI map view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import pydeck as pdk
import streamlit as st

from voyage.config import DEFAULT_MAP_CENTER, DEFAULT_MAP_ZOOM, category_spec
from voyage.schemas import POIRecord, Stop, StopRole
from voyage.workflows import PlanningContext

_STOP_LAYER_ID = "route-stops"
_POI_LAYER_ID = "route-pois"
_PATH_LAYER_ID = "route-path"

_ROLE_COLORS: Dict[StopRole, Tuple[int, int, int, int]] = {
    StopRole.START: (52, 211, 153, 255),
    StopRole.END: (244, 114, 182, 255),
    StopRole.MID: (99, 102, 241, 255),
}
_ROUTE_COLOR: Tuple[int, int, int, int] = (99, 102, 241, 204)
_VISIBLE_ALPHA = 230
_DIMMED_ALPHA = 50


def _hex_to_rgba(value: str, alpha: int) -> Tuple[int, int, int, int]:
    cleaned = value.lstrip("#")
    red, green, blue = (int(cleaned[i : i + 2], 16) for i in (0, 2, 4))
    return (red, green, blue, alpha)


@dataclass
class _Marker:
    position: Tuple[float, float]
    title: str
    subtitle: str
    color: Tuple[int, int, int, int]
    radius: int

    def as_dict(self) -> Dict[str, object]:
        longitude, latitude = self.position
        return {
            "longitude": longitude,
            "latitude": latitude,
            "color": list(self.color),
            "radius": self.radius,
            "title": self.title,
            "subtitle": self.subtitle,
        }


def _stop_markers(stops: Sequence[Stop]) -> List[_Marker]:
    markers: List[_Marker] = []
    for index, stop in enumerate(stops):
        markers.append(
            _Marker(
                position=(stop.coordinate.longitude, stop.coordinate.latitude),
                title=f"{stop.label} · {stop.display_name}",
                subtitle=f"Stop {index + 1} of {len(stops)}",
                color=_ROLE_COLORS[stop.role],
                radius=400,
            )
        )
    return markers


def _poi_markers(records: Sequence[Tuple[POIRecord, bool]]) -> List[_Marker]:
    markers: List[_Marker] = []
    for record, shown in records:
        spec = category_spec(record.category)
        markers.append(
            _Marker(
                position=(record.coordinate.longitude, record.coordinate.latitude),
                title=f"{spec.icon} {record.name}",
                subtitle=f"{spec.name} · budget {record.budget_level}",
                color=_hex_to_rgba(spec.color, _VISIBLE_ALPHA if shown else _DIMMED_ALPHA),
                radius=150,
            )
        )
    return markers


def _compute_view_state(markers: Sequence[_Marker]) -> pdk.ViewState:
    if not markers:
        latitude, longitude = DEFAULT_MAP_CENTER
        return pdk.ViewState(latitude=latitude, longitude=longitude, zoom=DEFAULT_MAP_ZOOM)
    avg_lat = sum(marker.position[1] for marker in markers) / len(markers)
    avg_lon = sum(marker.position[0] for marker in markers) / len(markers)
    zoom = 12 if len(markers) == 1 else 7
    return pdk.ViewState(latitude=avg_lat, longitude=avg_lon, zoom=zoom)


def build_deck(context: PlanningContext) -> pdk.Deck:
    """Assemble the pydeck layers for the current session."""

    stops = context.stops.stops()
    stop_markers = _stop_markers(stops)
    poi_markers = _poi_markers(context.poi_visibility())

    layers = []
    if len(stops) >= 2:
        layers.append(
            pdk.Layer(
                "PathLayer",
                data=[{"path": [[s.coordinate.longitude, s.coordinate.latitude] for s in stops]}],
                id=_PATH_LAYER_ID,
                get_path="path",
                get_color=list(_ROUTE_COLOR),
                get_width=4,
                width_min_pixels=2,
            )
        )
    if poi_markers:
        layers.append(
            pdk.Layer(
                "ScatterplotLayer",
                data=[marker.as_dict() for marker in poi_markers],
                id=_POI_LAYER_ID,
                get_position="[longitude, latitude]",
                get_fill_color="color",
                get_radius="radius",
                radius_units="meters",
                radius_min_pixels=4,
                pickable=True,
            )
        )
    if stop_markers:
        layers.append(
            pdk.Layer(
                "ScatterplotLayer",
                data=[marker.as_dict() for marker in stop_markers],
                id=_STOP_LAYER_ID,
                get_position="[longitude, latitude]",
                get_fill_color="color",
                get_line_color=[255, 255, 255],
                get_radius="radius",
                radius_units="meters",
                radius_min_pixels=8,
                stroked=True,
                pickable=True,
            )
        )

    tooltip = {
        "html": "<b>{title}</b><br/>{subtitle}",
        "style": {"backgroundColor": "#111", "color": "white"},
    }
    return pdk.Deck(
        map_style="https://basemaps.cartocdn.com/gl/positron-gl-style/style.json",
        layers=layers,
        initial_view_state=_compute_view_state(stop_markers or poi_markers),
        tooltip=tooltip,
    )


def render_map(container, context: PlanningContext) -> None:
    """Render the route map inside ``container``."""

    with container:
        st.pydeck_chart(build_deck(context), key="route_map")
        visible = len(context.visible_pois())
        total = context.catalog.size()
        if total:
            st.caption(f"Showing {visible} of {total} places within your budget and categories.")


__all__ = ["build_deck", "render_map"]
