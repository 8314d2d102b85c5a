"""Static configuration and environment-driven settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Tuple

from voyage.schemas import BudgetLevelInfo, CategorySpec, POICategory

_LOGGER = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        _LOGGER.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _LOGGER.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


DEFAULT_NOMINATIM_URL = "https://nominatim.openstreetmap.org"
DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"
DEFAULT_USER_AGENT = "voyage-trip-planner/0.1"

DEFAULT_MAP_CENTER: Tuple[float, float] = (20.5937, 78.9629)
DEFAULT_MAP_ZOOM = 5

SEARCH_MIN_QUERY_LENGTH = 3
SEARCH_RESULT_LIMIT = 5

MIN_TRIP_DAYS = 1
MAX_TRIP_DAYS = 30
DEFAULT_TRIP_DAYS = 3
DEFAULT_BUDGET_LEVEL = 2

DEFAULT_CATEGORIES: FrozenSet[POICategory] = frozenset(
    {POICategory.FOOD, POICategory.CAFE, POICategory.LANDMARK}
)

POI_CATEGORIES: Dict[POICategory, CategorySpec] = {
    POICategory.FOOD: CategorySpec(
        name="Restaurant",
        icon="🍽️",
        color="#ef4444",
        tags=("amenity=restaurant", "amenity=fast_food", "amenity=food_court"),
    ),
    POICategory.CAFE: CategorySpec(
        name="Cafe",
        icon="☕",
        color="#f59e0b",
        tags=("amenity=cafe", "shop=coffee"),
    ),
    POICategory.SHOP: CategorySpec(
        name="Shop",
        icon="🛍️",
        color="#3b82f6",
        tags=("shop=mall", "shop=department_store", "shop=supermarket", "shop=clothes"),
    ),
    POICategory.LUXURY: CategorySpec(
        name="Luxury",
        icon="💎",
        color="#a855f7",
        tags=("shop=jewelry", "shop=boutique", "shop=watches", "amenity=spa"),
    ),
    POICategory.LANDMARK: CategorySpec(
        name="Landmark",
        icon="🏛️",
        color="#06b6d4",
        tags=("tourism=attraction", "tourism=museum", "historic=monument", "tourism=viewpoint"),
    ),
    POICategory.HOTEL: CategorySpec(
        name="Hotel",
        icon="🏨",
        color="#22c55e",
        tags=("tourism=hotel", "tourism=guest_house", "tourism=hostel"),
    ),
}

BUDGET_LEVELS: Dict[int, BudgetLevelInfo] = {
    1: BudgetLevelInfo(level=1, name="Economy", symbol="₹"),
    2: BudgetLevelInfo(level=2, name="Moderate", symbol="₹₹"),
    3: BudgetLevelInfo(level=3, name="Premium", symbol="₹₹₹"),
    4: BudgetLevelInfo(level=4, name="Luxury", symbol="₹₹₹₹"),
}


def category_spec(category: POICategory) -> CategorySpec:
    return POI_CATEGORIES[category]


@dataclass
class PlannerSettings:
    """Runtime knobs for the external sources and route sampling."""

    nominatim_url: str = field(
        default_factory=lambda: os.getenv("VOYAGE_NOMINATIM_URL", DEFAULT_NOMINATIM_URL)
    )
    overpass_url: str = field(
        default_factory=lambda: os.getenv("VOYAGE_OVERPASS_URL", DEFAULT_OVERPASS_URL)
    )
    user_agent: str = field(
        default_factory=lambda: os.getenv("VOYAGE_USER_AGENT", DEFAULT_USER_AGENT)
    )
    http_timeout: float = field(default_factory=lambda: _env_float("VOYAGE_HTTP_TIMEOUT", 20.0))
    poi_radius_m: int = field(default_factory=lambda: _env_int("VOYAGE_POI_RADIUS_M", 5000))
    poi_max_results: int = field(default_factory=lambda: _env_int("VOYAGE_POI_MAX_RESULTS", 30))
    overpass_timeout_s: int = field(
        default_factory=lambda: _env_int("VOYAGE_OVERPASS_TIMEOUT", 15)
    )
    points_per_segment: int = field(
        default_factory=lambda: _env_int("VOYAGE_POINTS_PER_SEGMENT", 2)
    )


__all__ = [
    "BUDGET_LEVELS",
    "DEFAULT_BUDGET_LEVEL",
    "DEFAULT_CATEGORIES",
    "DEFAULT_MAP_CENTER",
    "DEFAULT_MAP_ZOOM",
    "DEFAULT_TRIP_DAYS",
    "MAX_TRIP_DAYS",
    "MIN_TRIP_DAYS",
    "POI_CATEGORIES",
    "PlannerSettings",
    "SEARCH_MIN_QUERY_LENGTH",
    "SEARCH_RESULT_LIMIT",
    "category_spec",
]
