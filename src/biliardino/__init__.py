"""Foosball Elo ranking, statistics and matchmaking."""

__version__ = "0.1.0"
