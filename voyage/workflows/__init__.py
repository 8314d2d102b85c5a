"""Workflow entry points for driving a planning session."""

from .planning import POISource, PlanningContext, is_nothing_to_plan, planned_days

__all__ = [
    "POISource",
    "PlanningContext",
    "is_nothing_to_plan",
    "planned_days",
]
