"""Thin wrapper around the OpenStreetMap Nominatim geocoding API."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import requests
from pydantic import ValidationError

from voyage.config import SEARCH_MIN_QUERY_LENGTH, SEARCH_RESULT_LIMIT, PlannerSettings
from voyage.schemas import Coordinate, SearchCandidate

_LOGGER = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown location"


class GeocodingError(RuntimeError):
    """Raised when the geocoding service returns an unexpected response."""


def _request(path: str, params: Dict[str, object], settings: Optional[PlannerSettings] = None) -> object:
    settings = settings or PlannerSettings()
    response = requests.get(
        f"{settings.nominatim_url.rstrip('/')}/{path.lstrip('/')}",
        params={**params, "format": "json"},
        headers={"User-Agent": settings.user_agent},
        timeout=settings.http_timeout,
    )
    response.raise_for_status()
    try:
        return response.json()
    except ValueError as exc:
        raise GeocodingError(f"Geocoding response was not valid JSON: {exc}") from exc


def _candidate(result: object) -> Optional[SearchCandidate]:
    if not isinstance(result, dict):
        return None
    try:
        return SearchCandidate(
            display_name=str(result.get("display_name") or ""),
            coordinate=Coordinate(
                latitude=float(result["lat"]),
                longitude=float(result["lon"]),
            ),
        )
    except (KeyError, TypeError, ValueError, ValidationError):
        _LOGGER.debug("Skipping malformed geocoding result: %r", result)
        return None


def search(
    query: str,
    *,
    limit: int = SEARCH_RESULT_LIMIT,
    settings: Optional[PlannerSettings] = None,
) -> List[SearchCandidate]:
    """Return up to ``limit`` places matching a free-text query.

    Short queries are ignored and service failures yield an empty list.
    """

    cleaned = query.strip()
    if len(cleaned) < SEARCH_MIN_QUERY_LENGTH:
        return []

    try:
        data = _request("search", {"q": cleaned, "limit": limit}, settings)
    except (requests.RequestException, GeocodingError) as exc:
        _LOGGER.warning("Place search failed for %r: %s", cleaned, exc)
        return []

    if not isinstance(data, list):
        _LOGGER.warning("Place search for %r returned an unexpected payload", cleaned)
        return []

    candidates: List[SearchCandidate] = []
    for result in data:
        candidate = _candidate(result)
        if candidate is not None:
            candidates.append(candidate)
        if len(candidates) >= limit:
            break
    return candidates


def reverse(coordinate: Coordinate, *, settings: Optional[PlannerSettings] = None) -> str:
    """Return a short display name for a coordinate, or ``"Unknown location"``."""

    try:
        data = _request(
            "reverse",
            {"lat": coordinate.latitude, "lon": coordinate.longitude},
            settings,
        )
    except (requests.RequestException, GeocodingError) as exc:
        _LOGGER.warning("Reverse geocoding failed for %s: %s", coordinate.as_tuple(), exc)
        return UNKNOWN_LOCATION

    display_name = data.get("display_name") if isinstance(data, dict) else None
    if not display_name:
        return UNKNOWN_LOCATION
    return str(display_name).split(",")[0].strip() or UNKNOWN_LOCATION


__all__ = ["GeocodingError", "UNKNOWN_LOCATION", "reverse", "search"]
