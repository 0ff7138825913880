"""Two-vs-two foosball Elo logic."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from biliardino.domain.common import MatchRecord, Player, UnknownPlayerError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EloParameters:
    initial_elo: float = 1000.0
    k_factor: float = 50.0
    scale_factor: float = 400.0
    rating_multiplier: float = 2.0
    role_penalty: float = 100.0
    margin_span: float = 7.0
    margin_weight: float = 0.5
    min_winning_goals: int = 8


@dataclass(frozen=True)
class MatchRating:
    """Everything the engine derives for one match."""

    match_id: int
    team_a_pre: tuple[float, float]
    team_b_pre: tuple[float, float]
    team_a_elo: float
    team_b_elo: float
    expected_a: float
    expected_b: float
    actual_a: float
    actual_b: float
    margin_multiplier: float
    delta_a: float
    delta_b: float
    k_factor: float


@dataclass(frozen=True)
class PlayerEloEvent:
    player_id: int
    match_id: int
    event_time: datetime
    is_defender: bool
    won: bool
    actual_score: float
    expected_score: float
    pre_elo: float
    elo_delta: float
    post_elo: float
    k_factor: float


def calculate_expected_score(
    rating: float,
    opponent_rating: float,
    scale_factor: float,
    rating_multiplier: float = 1.0,
) -> float:
    """Compute the logistic Elo expected score for one side."""
    spread = (opponent_rating * rating_multiplier) - (rating * rating_multiplier)
    return 1.0 / (1.0 + 10.0 ** (spread / scale_factor))


def effective_elo(player: Player, *, is_defender: bool, role_penalty: float = 100.0) -> float:
    """Rating of ``player`` in a role, lowered the further it is from its usual one."""
    off_role_share = (1.0 - player.defence) if is_defender else player.defence
    return player.elo - off_role_share * role_penalty


def team_rating(defender: Player, attacker: Player, *, role_penalty: float = 100.0) -> float:
    return (
        effective_elo(defender, is_defender=True, role_penalty=role_penalty)
        + effective_elo(attacker, is_defender=False, role_penalty=role_penalty)
    ) / 2.0


class EloCalculator:
    """Stateless per-match Elo calculator for 2v2 matches."""

    def __init__(self, params: EloParameters | None = None) -> None:
        self.params = params or EloParameters()

    def margin_multiplier(self, goals_a: int, goals_b: int) -> float:
        goal_diff = abs(goals_a - goals_b)
        return 1.0 + ((goal_diff - 1) / self.params.margin_span) * self.params.margin_weight

    def rate(self, match: MatchRecord, resolve: Callable[[int], Player | None]) -> MatchRating:
        """Compute the rating outcome of ``match`` without touching any state."""
        players: list[Player] = []
        for player_id in match.player_ids():
            player = resolve(player_id)
            if player is None:
                raise UnknownPlayerError(player_id, match_id=match.id)
            players.append(player)
        def_a, att_a, def_b, att_b = players

        goals_a, goals_b = match.score
        role_penalty = self.params.role_penalty
        team_a_elo = team_rating(def_a, att_a, role_penalty=role_penalty)
        team_b_elo = team_rating(def_b, att_b, role_penalty=role_penalty)

        expected_a = calculate_expected_score(
            rating=team_a_elo,
            opponent_rating=team_b_elo,
            scale_factor=self.params.scale_factor,
            rating_multiplier=self.params.rating_multiplier,
        )
        expected_b = 1.0 - expected_a

        if goals_a > goals_b:
            actual_a = 1.0
        elif goals_a < goals_b:
            actual_a = 0.0
        else:
            actual_a = 0.5
        actual_b = 1.0 - actual_a

        margin = self.margin_multiplier(goals_a, goals_b)
        delta_a = self.params.k_factor * margin * (actual_a - expected_a)
        delta_b = self.params.k_factor * margin * (actual_b - expected_b)

        # Ratings only move once the winning side reaches the goal target.
        if max(goals_a, goals_b) < self.params.min_winning_goals:
            delta_a = 0.0
            delta_b = 0.0

        return MatchRating(
            match_id=match.id,
            team_a_pre=(def_a.elo, att_a.elo),
            team_b_pre=(def_b.elo, att_b.elo),
            team_a_elo=team_a_elo,
            team_b_elo=team_b_elo,
            expected_a=expected_a,
            expected_b=expected_b,
            actual_a=actual_a,
            actual_b=actual_b,
            margin_multiplier=margin,
            delta_a=delta_a,
            delta_b=delta_b,
            k_factor=self.params.k_factor,
        )

    def compute_match(self, match: MatchRecord, resolve: Callable[[int], Player | None]) -> MatchRating:
        """Rate ``match`` and store the derived fields on it."""
        if match.is_rated:
            raise ValueError(f"match_id={match.id} has already been rated")

        rating = self.rate(match, resolve)
        match.expected_score = (rating.expected_a, rating.expected_b)
        match.team_elo = (rating.team_a_elo, rating.team_b_elo)
        match.team_a_elo = rating.team_a_pre
        match.team_b_elo = rating.team_b_pre
        match.delta_elo = (rating.delta_a, rating.delta_b)
        match.k_factor = rating.k_factor
        logger.debug(
            "rated match_id=%s score=%s expected=(%.3f, %.3f) delta=(%.2f, %.2f)",
            match.id,
            match.score,
            rating.expected_a,
            rating.expected_b,
            rating.delta_a,
            rating.delta_b,
        )
        return rating


def player_events(match: MatchRecord, rating: MatchRating) -> list[PlayerEloEvent]:
    """One event per player of a rated match, in slot order."""
    sides = (
        (match.team_a, rating.team_a_pre, rating.expected_a, rating.actual_a, rating.delta_a),
        (match.team_b, rating.team_b_pre, rating.expected_b, rating.actual_b, rating.delta_b),
    )
    events: list[PlayerEloEvent] = []
    for team, pre_elos, expected, actual, delta in sides:
        for player_id, pre_elo, is_defender in (
            (team.defence, pre_elos[0], True),
            (team.attack, pre_elos[1], False),
        ):
            events.append(
                PlayerEloEvent(
                    player_id=player_id,
                    match_id=match.id,
                    event_time=match.event_time,
                    is_defender=is_defender,
                    won=delta > 0,
                    actual_score=actual,
                    expected_score=expected,
                    pre_elo=pre_elo,
                    elo_delta=delta,
                    post_elo=pre_elo + delta,
                    k_factor=rating.k_factor,
                )
            )
    return events


__all__ = [
    "EloCalculator",
    "EloParameters",
    "MatchRating",
    "PlayerEloEvent",
    "calculate_expected_score",
    "effective_elo",
    "player_events",
    "team_rating",
]
