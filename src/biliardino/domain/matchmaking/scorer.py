"""Exhaustive 2v2 matchmaking search."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from itertools import permutations

from biliardino.domain.common import Player
from biliardino.domain.elo.calculator import effective_elo
from biliardino.domain.league import League
from biliardino.domain.matchmaking.config import MatchmakingParameters
from biliardino.domain.matchmaking.protocol import (
    HeuristicBreakdown,
    MatchProposal,
    ProposedTeam,
    ScoreComponent,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Normalizers:
    """League-wide maxima the score components are divided by."""

    max_elo_diff: float
    max_matches: float
    max_diversity: float


def _top_sum(values: Iterable[float], size: int) -> float:
    return float(sum(sorted(values, reverse=True)[:size]))


def compute_normalizers(league: League) -> Normalizers:
    """Compute the normalizers over every registered player, not only the pool."""
    elos = sorted(player.elo for player in league.all_players())
    max_elo_diff = max((sum(elos[-2:]) - sum(elos[:2])) / 2.0, 1.0)
    max_matches = max(_top_sum((player.matches for player in league.all_players()), 4), 1.0)
    max_diversity = max(
        _top_sum(league.teammates.counts().values(), 2)
        + _top_sum(league.opponents.counts().values(), 4),
        1.0,
    )
    return Normalizers(
        max_elo_diff=max_elo_diff,
        max_matches=max_matches,
        max_diversity=max_diversity,
    )


class BruteForceMatchFinder:
    """Score every role assignment of four pool players and keep the best one."""

    def __init__(
        self,
        league: League,
        params: MatchmakingParameters | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.league = league
        self.params = params or MatchmakingParameters()
        self.rng = rng or random.Random()

    def find_best_match(
        self,
        available_ids: Sequence[int],
        priority_ids: Sequence[int] = (),
    ) -> MatchProposal | None:
        pool_ids = list(dict.fromkeys(available_ids))
        if len(pool_ids) < 4:
            logger.info("cannot propose a match: only %d players available", len(pool_ids))
            return None

        pool: list[Player] = []
        for player_id in pool_ids:
            player = self.league.find_player(player_id)
            if player is None:
                logger.info("cannot propose a match: unknown player_id=%s", player_id)
                return None
            pool.append(player)

        required = set(priority_ids)
        if not required.issubset(pool_ids):
            logger.info(
                "cannot propose a match: priority players %s are not available",
                sorted(required.difference(pool_ids)),
            )
            return None
        if len(required) > 4:
            logger.info("cannot propose a match: %d priority players do not fit", len(required))
            return None

        normalizers = compute_normalizers(self.league)
        role_penalty = self.league.params.role_penalty
        defence_elo = [effective_elo(player, is_defender=True, role_penalty=role_penalty) for player in pool]
        attack_elo = [effective_elo(player, is_defender=False, role_penalty=role_penalty) for player in pool]

        best: MatchProposal | None = None
        best_score = float("-inf")
        for def_a, att_a, def_b, att_b in permutations(range(len(pool)), 4):
            # Swapping team A and team B scores the same and always comes later.
            if def_b < def_a:
                continue
            if required and not required.issubset(
                (pool_ids[def_a], pool_ids[att_a], pool_ids[def_b], pool_ids[att_b])
            ):
                continue

            team_a_elo = (defence_elo[def_a] + attack_elo[att_a]) / 2.0
            team_b_elo = (defence_elo[def_b] + attack_elo[att_b]) / 2.0
            breakdown = self._score(
                pool[def_a],
                pool[att_a],
                pool[def_b],
                pool[att_b],
                team_a_elo=team_a_elo,
                team_b_elo=team_b_elo,
                normalizers=normalizers,
            )
            if breakdown.total.score > best_score:
                best_score = breakdown.total.score
                best = MatchProposal(
                    team_a=ProposedTeam(defence=pool[def_a], attack=pool[att_a]),
                    team_b=ProposedTeam(defence=pool[def_b], attack=pool[att_b]),
                    heuristics=breakdown,
                )

        if best is None:
            logger.info("cannot propose a match: no combination includes every priority player")
            return None

        logger.debug("proposed match players=%s score=%.4f", best.player_ids(), best_score)
        return best

    def _score(
        self,
        def_a: Player,
        att_a: Player,
        def_b: Player,
        att_b: Player,
        *,
        team_a_elo: float,
        team_b_elo: float,
        normalizers: Normalizers,
    ) -> HeuristicBreakdown:
        params = self.params
        teammates = self.league.teammates
        opponents = self.league.opponents

        match_balance = 1.0 - abs(team_a_elo - team_b_elo) / normalizers.max_elo_diff

        widest_team_gap = max(abs(def_a.elo - att_a.elo), abs(def_b.elo - att_b.elo))
        team_balance = 1.0 - min(1.0, widest_team_gap / normalizers.max_elo_diff)

        total_matches = def_a.matches + att_a.matches + def_b.matches + att_b.matches
        priority = 1.0 - total_matches / normalizers.max_matches

        teammate_repeats = teammates.count(def_a.id, att_a.id) + teammates.count(def_b.id, att_b.id)
        opponent_repeats = sum(
            opponents.count(player_a.id, player_b.id)
            for player_a in (def_a, att_a)
            for player_b in (def_b, att_b)
        )
        diversity = 1.0 - (teammate_repeats + opponent_repeats) / normalizers.max_diversity

        components = (
            ScoreComponent(match_balance * params.match_balance_weight, params.match_balance_weight),
            ScoreComponent(team_balance * params.team_balance_weight, params.team_balance_weight),
            ScoreComponent(priority * params.priority_weight, params.priority_weight),
            ScoreComponent(diversity * params.diversity_weight, params.diversity_weight),
        )
        jitter = 1.0 - self.rng.uniform(-params.randomness, params.randomness)
        weighted_sum = sum(component.score for component in components)
        max_total = sum(component.max for component in components) * (1.0 + params.randomness)

        return HeuristicBreakdown(
            match_balance=components[0],
            team_balance=components[1],
            priority=components[2],
            diversity=components[3],
            jitter=jitter,
            total=ScoreComponent(weighted_sum * jitter, max_total),
        )


def find_best_match(
    league: League,
    available_ids: Sequence[int],
    priority_ids: Sequence[int] = (),
    *,
    params: MatchmakingParameters | None = None,
    rng: random.Random | None = None,
) -> MatchProposal | None:
    """One-shot helper around ``BruteForceMatchFinder``."""
    finder = BruteForceMatchFinder(league, params, rng=rng)
    return finder.find_best_match(available_ids, priority_ids)


__all__ = ["BruteForceMatchFinder", "Normalizers", "compute_normalizers", "find_best_match"]
