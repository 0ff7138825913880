"""Domain logic: Elo engine, league state, statistics and matchmaking."""

from biliardino.domain.common import MatchRecord, PairTable, Player, Team, UnknownPlayerError
from biliardino.domain.league import League

__all__ = ["League", "MatchRecord", "PairTable", "Player", "Team", "UnknownPlayerError"]
