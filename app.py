"""Streamlit entry point for the Voyage trip planner."""
from __future__ import annotations

import logging

import streamlit as st
from dotenv import load_dotenv

from voyage.ui import ensure_plan_state, render_itinerary, render_map, render_sidebar


def configure() -> None:
    """Configure global Streamlit settings and load environment variables."""

    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    st.set_page_config(page_title="Voyage", layout="wide")


def render() -> None:
    """Render the planner shell: controls on the left, map and plan on the right."""

    context = ensure_plan_state()

    st.title("🧭 Voyage")

    render_sidebar(st.sidebar)
    map_tab, itinerary_tab = st.tabs(["Map", "Itinerary"])
    render_map(map_tab, context)
    render_itinerary(itinerary_tab)


if __name__ == "__main__":
    configure()
    render()
