"""Worldline: timeline state, layout and viewport backend."""

__version__ = "1.0.0"
