"""Shared protocol and result types for match finders."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from biliardino.domain.common import Player, Team


@dataclass(frozen=True)
class ProposedTeam:
    defence: Player
    attack: Player

    def as_team(self) -> Team:
        return Team(defence=self.defence.id, attack=self.attack.id)


@dataclass(frozen=True)
class ScoreComponent:
    score: float
    max: float


@dataclass(frozen=True)
class HeuristicBreakdown:
    """Weighted score components of a proposal, each next to its weight."""

    match_balance: ScoreComponent
    team_balance: ScoreComponent
    priority: ScoreComponent
    diversity: ScoreComponent
    jitter: float
    total: ScoreComponent


@dataclass(frozen=True)
class MatchProposal:
    team_a: ProposedTeam
    team_b: ProposedTeam
    heuristics: HeuristicBreakdown

    def player_ids(self) -> tuple[int, int, int, int]:
        return (
            self.team_a.defence.id,
            self.team_a.attack.id,
            self.team_b.defence.id,
            self.team_b.attack.id,
        )


@runtime_checkable
class MatchFinder(Protocol):
    """Contract every matchmaking search satisfies."""

    def find_best_match(
        self,
        available_ids: Sequence[int],
        priority_ids: Sequence[int] = (),
    ) -> MatchProposal | None: ...


__all__ = [
    "HeuristicBreakdown",
    "MatchFinder",
    "MatchProposal",
    "ProposedTeam",
    "ScoreComponent",
]
