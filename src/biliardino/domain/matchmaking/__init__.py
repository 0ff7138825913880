"""Matchmaking search and its configuration."""

from biliardino.domain.matchmaking.config import (
    MatchmakingConfig,
    MatchmakingParameters,
    load_matchmaking_config,
)
from biliardino.domain.matchmaking.protocol import (
    HeuristicBreakdown,
    MatchFinder,
    MatchProposal,
    ProposedTeam,
    ScoreComponent,
)
from biliardino.domain.matchmaking.scorer import BruteForceMatchFinder, compute_normalizers, find_best_match

__all__ = [
    "BruteForceMatchFinder",
    "HeuristicBreakdown",
    "MatchFinder",
    "MatchProposal",
    "MatchmakingConfig",
    "MatchmakingParameters",
    "ProposedTeam",
    "ScoreComponent",
    "compute_normalizers",
    "find_best_match",
    "load_matchmaking_config",
]
