"""Core route, catalogue and itinerary computations for Voyage."""

from .catalog import BudgetAssigner, FixedBudgetAssigner, POICatalog, RandomBudgetAssigner
from .geo import distance_km, interpolate
from .itinerary import plan_itinerary, total_distance_km
from .sampler import sample_route
from .stops import StopIndexError, StopSequence

__all__ = [
    "BudgetAssigner",
    "FixedBudgetAssigner",
    "POICatalog",
    "RandomBudgetAssigner",
    "StopIndexError",
    "StopSequence",
    "distance_km",
    "interpolate",
    "plan_itinerary",
    "sample_route",
    "total_distance_km",
]
