"""Repository helpers."""

from biliardino.repositories.base import BaseRatingRepository, ensure_schema
from biliardino.repositories.match_repository import fetch_matches, insert_match, update_match_ratings
from biliardino.repositories.player_elo_repository import (
    PLAYER_ELO_REPOSITORY,
    count_tracked_players,
    fetch_player_elo_history,
    insert_player_elo_events,
)
from biliardino.repositories.player_repository import add_player, fetch_players, save_players

__all__ = [
    "BaseRatingRepository",
    "PLAYER_ELO_REPOSITORY",
    "add_player",
    "count_tracked_players",
    "ensure_schema",
    "fetch_matches",
    "fetch_player_elo_history",
    "fetch_players",
    "insert_match",
    "insert_player_elo_events",
    "save_players",
    "update_match_ratings",
]
