"""Voyage Streamlit UI helpers."""

from __future__ import annotations

from .map import build_deck, render_map
from .plan import ensure_plan_state, render_itinerary, render_sidebar

__all__ = [
    "build_deck",
    "ensure_plan_state",
    "render_itinerary",
    "render_map",
    "render_sidebar",
]
