"""Crimson Knights chess: rules engine, heuristic bot and game session."""

__version__ = "1.0.0"
