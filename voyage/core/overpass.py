"""Async client for the OpenStreetMap Overpass API."""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError

from voyage.config import PlannerSettings, category_spec
from voyage.schemas import Coordinate, POICategory, RawPOI

_LOGGER = logging.getLogger(__name__)


class OverpassError(RuntimeError):
    """Raised when the Overpass API returns an unexpected response."""


def build_query(
    coordinate: Coordinate,
    category: POICategory,
    *,
    radius_m: int,
    max_results: int,
    timeout_s: int,
) -> str:
    """Render an Overpass QL query for every tag predicate of ``category``."""

    lat, lon = coordinate.as_tuple()
    statements = "\n".join(
        f'  node["{key}"="{value}"](around:{radius_m},{lat},{lon});'
        for key, value in category_spec(category).tag_pairs()
    )
    return f"[out:json][timeout:{timeout_s}];\n(\n{statements}\n);\nout body {max_results};\n"


def _parse_elements(payload: object) -> List[RawPOI]:
    if not isinstance(payload, dict):
        raise OverpassError("Overpass response was not a JSON object")
    elements = payload.get("elements")
    if not isinstance(elements, list):
        raise OverpassError("Overpass response did not contain an elements list")

    records: List[RawPOI] = []
    for element in elements:
        if not isinstance(element, dict) or "lat" not in element or "lon" not in element:
            continue
        try:
            records.append(RawPOI.model_validate(element))
        except ValidationError:
            _LOGGER.debug("Skipping malformed Overpass element: %r", element)
    return records


async def fetch_pois(
    client: httpx.AsyncClient,
    coordinate: Coordinate,
    category: POICategory,
    *,
    settings: Optional[PlannerSettings] = None,
) -> List[RawPOI]:
    """Query nodes matching ``category`` around ``coordinate``."""

    settings = settings or PlannerSettings()
    query = build_query(
        coordinate,
        category,
        radius_m=settings.poi_radius_m,
        max_results=settings.poi_max_results,
        timeout_s=settings.overpass_timeout_s,
    )
    response = await client.post(
        settings.overpass_url,
        data={"data": query},
        headers={"User-Agent": settings.user_agent},
        timeout=settings.http_timeout,
    )
    response.raise_for_status()
    try:
        payload = response.json()
    except ValueError as exc:
        raise OverpassError(f"Overpass response was not valid JSON: {exc}") from exc
    return _parse_elements(payload)


async def fetch_pois_safe(
    client: httpx.AsyncClient,
    coordinate: Coordinate,
    category: POICategory,
    *,
    settings: Optional[PlannerSettings] = None,
) -> Optional[List[RawPOI]]:
    """Like :func:`fetch_pois` but logs failures and returns ``None`` instead."""

    try:
        return await fetch_pois(client, coordinate, category, settings=settings)
    except (httpx.HTTPError, OverpassError) as exc:
        _LOGGER.warning(
            "Fetching %s POIs near %s failed: %s",
            category.value,
            coordinate.as_tuple(),
            exc,
        )
        return None


__all__ = ["OverpassError", "build_query", "fetch_pois", "fetch_pois_safe"]
