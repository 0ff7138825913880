"""ORM models."""

from biliardino.models.base import Base
from biliardino.models.match import MatchRow
from biliardino.models.player import PlayerRow
from biliardino.models.player_match_elo import PlayerMatchElo
from biliardino.models.system import RatingSystem

__all__ = [
    "Base",
    "MatchRow",
    "PlayerMatchElo",
    "PlayerRow",
    "RatingSystem",
]
