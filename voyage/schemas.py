"""Data schemas for the Voyage trip planner."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


class Coordinate(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    latitude: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(
        ge=-180.0,
        le=180.0,
        validation_alias=AliasChoices("longitude", "lon", "lng"),
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


class StopRole(str, Enum):
    START = "start"
    MID = "mid"
    END = "end"


class Stop(BaseModel):
    """A named point the route passes through.

    ``role`` and ``label`` are owned by :class:`voyage.core.stops.StopSequence`
    and recomputed from position on every mutation.
    """

    coordinate: Coordinate
    display_name: str
    role: StopRole = StopRole.MID
    label: str = ""


class POICategory(str, Enum):
    FOOD = "food"
    CAFE = "cafe"
    SHOP = "shop"
    LUXURY = "luxury"
    LANDMARK = "landmark"
    HOTEL = "hotel"


class CategorySpec(BaseModel):
    """Display metadata and source tag predicates for a POI category."""

    name: str
    icon: str
    color: str
    tags: Tuple[str, ...]

    model_config = ConfigDict(frozen=True)

    def tag_pairs(self) -> List[Tuple[str, str]]:
        pairs: List[Tuple[str, str]] = []
        for tag in self.tags:
            key, _, value = tag.partition("=")
            pairs.append((key, value))
        return pairs


class BudgetLevelInfo(BaseModel):
    level: int = Field(ge=1, le=4)
    name: str
    symbol: str

    model_config = ConfigDict(frozen=True)


MIN_BUDGET_LEVEL = 1
MAX_BUDGET_LEVEL = 4


class RawPOI(BaseModel):
    """An untyped record returned by the tagged-POI source."""

    latitude: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(
        ge=-180.0,
        le=180.0,
        validation_alias=AliasChoices("longitude", "lon", "lng"),
    )
    name: Optional[str] = None
    tags: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _lift_name_from_tags(cls, data: object) -> object:
        """Overpass elements carry the name inside ``tags``."""

        if not isinstance(data, dict):
            return data

        payload = dict(data)
        tags = payload.get("tags")
        if isinstance(tags, Mapping):
            payload["tags"] = {str(key): str(value) for key, value in tags.items()}
            if not payload.get("name") and tags.get("name"):
                payload["name"] = str(tags["name"])
        elif tags is None:
            payload.pop("tags", None)
        return payload

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class POIRecord(BaseModel):
    """A discovered place owned by :class:`voyage.core.catalog.POICatalog`."""

    coordinate: Coordinate
    name: str
    category: POICategory
    budget_level: int = Field(ge=MIN_BUDGET_LEVEL, le=MAX_BUDGET_LEVEL)


class ItineraryPlace(BaseModel):
    """One entry within a planned day: a POI or a synthetic route endpoint."""

    name: str
    coordinate: Coordinate
    kind: Literal["poi", "start", "end"] = "poi"
    category: Optional[POICategory] = None
    budget_level: Optional[int] = None

    @classmethod
    def from_record(cls, record: POIRecord) -> "ItineraryPlace":
        return cls(
            name=record.name,
            coordinate=record.coordinate,
            kind="poi",
            category=record.category,
            budget_level=record.budget_level,
        )

    @classmethod
    def from_stop(cls, stop: Stop, kind: Literal["start", "end"]) -> "ItineraryPlace":
        return cls(name=stop.display_name, coordinate=stop.coordinate, kind=kind)


class ItineraryDay(BaseModel):
    """Bucket of places assigned to one day of the trip."""

    day_number: int = Field(ge=1)
    places: List[ItineraryPlace] = Field(default_factory=list)

    def poi_count(self) -> int:
        return sum(1 for place in self.places if place.kind == "poi")


class NothingToPlan(BaseModel):
    """Returned instead of a day list when no POIs have been discovered."""

    message: str = (
        "No places found along this route. Data can be sparse in some regions; "
        "try other categories or add stops near larger towns."
    )


class SearchCandidate(BaseModel):
    """A geocoding match for a free-text place query."""

    display_name: str
    coordinate: Coordinate

    @field_validator("display_name")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @property
    def short_name(self) -> str:
        return self.display_name.split(",")[0].strip()


ExploreStatus = Literal["ok", "no_results", "missing_destination", "stale"]


class ExploreOutcome(BaseModel):
    """Summary of one explore run for the presentation layer."""

    status: ExploreStatus
    sample_count: int = 0
    query_count: int = 0
    failed_queries: int = 0
    poi_count: int = 0
    message: Optional[str] = None


__all__ = [
    "BudgetLevelInfo",
    "CategorySpec",
    "Coordinate",
    "ExploreOutcome",
    "ExploreStatus",
    "ItineraryDay",
    "ItineraryPlace",
    "MAX_BUDGET_LEVEL",
    "MIN_BUDGET_LEVEL",
    "NothingToPlan",
    "POICategory",
    "POIRecord",
    "RawPOI",
    "SearchCandidate",
    "Stop",
    "StopRole",
]
