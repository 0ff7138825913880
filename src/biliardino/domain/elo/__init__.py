"""Elo rating engine."""

from biliardino.domain.elo.calculator import (
    EloCalculator,
    EloParameters,
    MatchRating,
    PlayerEloEvent,
    calculate_expected_score,
    effective_elo,
    player_events,
    team_rating,
)
from biliardino.domain.elo.config import EloSystemConfig, load_elo_system_config

__all__ = [
    "EloCalculator",
    "EloParameters",
    "EloSystemConfig",
    "MatchRating",
    "PlayerEloEvent",
    "calculate_expected_score",
    "effective_elo",
    "load_elo_system_config",
    "player_events",
    "team_rating",
]
