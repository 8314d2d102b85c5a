"""Voyage: multi-stop trip planning around points of interest."""

__version__ = "0.1.0"
