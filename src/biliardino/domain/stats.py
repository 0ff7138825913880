"""Per-player statistics folded from the match history."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from biliardino.domain.common import MatchRecord, Player, UnknownPlayerError

TEAM_A = 0
TEAM_B = 1
DEFENCE = 0
ATTACK = 1


@dataclass(frozen=True)
class MatchResult:
    match: MatchRecord
    delta: float


@dataclass(frozen=True)
class PlayerResult:
    player_id: int
    player: Player | None
    score: float


@dataclass
class PlayerStats:
    """Read-only snapshot of one player's history.

    ``best_opponent`` holds the opponent with the LOWEST summed delta (the
    one that cost this player the most Elo) and ``worst_opponent`` the
    highest. The names follow the historical output format.
    """

    player_id: int
    history: list[MatchResult] = field(default_factory=list)
    elo: float = 0.0
    best_elo: float = 0.0
    worst_elo: float = 0.0
    matches: int = 0
    matches_as_attack: int = 0
    matches_as_defence: int = 0
    wins: int = 0
    wins_as_attack: int = 0
    wins_as_defence: int = 0
    losses: int = 0
    losses_as_attack: int = 0
    losses_as_defence: int = 0
    current_streak: int = 0
    best_win_streak: int = 0
    worst_loss_streak: int = 0
    best_teammate_count: PlayerResult | None = None
    best_teammate: PlayerResult | None = None
    worst_teammate: PlayerResult | None = None
    best_opponent: PlayerResult | None = None
    worst_opponent: PlayerResult | None = None
    best_victory_by_elo: MatchResult | None = None
    worst_defeat_by_elo: MatchResult | None = None
    best_victory_by_score: MatchRecord | None = None
    worst_defeat_by_score: MatchRecord | None = None
    total_goals_for: int = 0
    total_goals_against: int = 0


def _team_of(player_id: int, match: MatchRecord) -> int | None:
    if player_id in match.team_a.player_ids():
        return TEAM_A
    if player_id in match.team_b.player_ids():
        return TEAM_B
    return None


def _role_of(player_id: int, team: int, match: MatchRecord) -> int:
    side = match.team_a if team == TEAM_A else match.team_b
    return ATTACK if side.attack == player_id else DEFENCE


def _teammate_of(team: int, role: int, match: MatchRecord) -> int:
    side = match.team_a if team == TEAM_A else match.team_b
    return side.defence if role == ATTACK else side.attack


def _opponents_of(team: int, match: MatchRecord) -> tuple[int, int]:
    side = match.team_b if team == TEAM_A else match.team_a
    return (side.attack, side.defence)


class _StatsBuilder:
    def __init__(self, player: Player, players: Mapping[int, Player]) -> None:
        self.players = players
        self.result = PlayerStats(
            player_id=player.id,
            elo=player.start_elo,
            best_elo=player.start_elo,
            worst_elo=player.start_elo,
        )
        self.teammates: dict[int, list[float]] = {}
        self.opponents: dict[int, float] = {}
        self.best_victory_elo = -math.inf
        self.worst_defeat_elo = math.inf
        self.best_victory_score = -1
        self.worst_defeat_score = -1

    def add(self, match: MatchRecord, team: int, role: int) -> None:
        if match.delta_elo is None:
            raise ValueError(f"match_id={match.id} has not been rated")

        delta = match.delta_elo[team]
        goals_for = match.score[team]
        goals_against = match.score[team ^ 1]
        # Matches that leave Elo unchanged count as losses for both teams.
        won = delta > 0
        match_result = MatchResult(match=match, delta=delta)

        result = self.result
        result.history.append(match_result)
        result.elo += delta
        result.best_elo = max(result.best_elo, result.elo)
        result.worst_elo = min(result.worst_elo, result.elo)

        self._count(role, won)
        self._streak(won)
        self._relationships(team, role, match_result)
        self._best_match(match_result, won)
        result.total_goals_for += goals_for
        result.total_goals_against += goals_against

    def _count(self, role: int, won: bool) -> None:
        result = self.result
        result.matches += 1
        if role == ATTACK:
            result.matches_as_attack += 1
        else:
            result.matches_as_defence += 1

        if won:
            result.wins += 1
            if role == ATTACK:
                result.wins_as_attack += 1
            else:
                result.wins_as_defence += 1
        else:
            result.losses += 1
            if role == ATTACK:
                result.losses_as_attack += 1
            else:
                result.losses_as_defence += 1

    def _streak(self, won: bool) -> None:
        result = self.result
        if won:
            result.current_streak = max(0, result.current_streak) + 1
            result.best_win_streak = max(result.best_win_streak, result.current_streak)
        else:
            result.current_streak = min(0, result.current_streak) - 1
            result.worst_loss_streak = max(result.worst_loss_streak, -result.current_streak)

    def _relationships(self, team: int, role: int, match_result: MatchResult) -> None:
        delta = match_result.delta
        teammate = _teammate_of(team, role, match_result.match)
        entry = self.teammates.setdefault(teammate, [0, 0.0])
        entry[0] += 1
        entry[1] += delta
        for opponent in _opponents_of(team, match_result.match):
            self.opponents[opponent] = self.opponents.get(opponent, 0.0) + delta

    def _best_match(self, match_result: MatchResult, won: bool) -> None:
        result = self.result
        delta = match_result.delta
        score = match_result.match.score
        score_diff = abs(score[0] - score[1])

        if won:
            if delta >= self.best_victory_elo:
                result.best_victory_by_elo = match_result
                self.best_victory_elo = delta
            if score_diff >= self.best_victory_score:
                result.best_victory_by_score = match_result.match
                self.best_victory_score = score_diff
        else:
            if delta <= self.worst_defeat_elo:
                result.worst_defeat_by_elo = match_result
                self.worst_defeat_elo = delta
            if score_diff >= self.worst_defeat_score:
                result.worst_defeat_by_score = match_result.match
                self.worst_defeat_score = score_diff

    def _player_result(self, player_id: int, score: float) -> PlayerResult:
        return PlayerResult(player_id=player_id, player=self.players.get(player_id), score=score)

    def finalize(self) -> PlayerStats:
        result = self.result
        if self.teammates:
            best_id = worst_id = count_id = None
            best_score, worst_score, best_count = -math.inf, math.inf, 0
            for teammate, (count, delta) in self.teammates.items():
                if delta > best_score:
                    best_score, best_id = delta, teammate
                if delta < worst_score:
                    worst_score, worst_id = delta, teammate
                if count > best_count:
                    best_count, count_id = count, teammate
            result.best_teammate = self._player_result(best_id, best_score)
            result.worst_teammate = self._player_result(worst_id, worst_score)
            result.best_teammate_count = self._player_result(count_id, best_count)

        if self.opponents:
            toughest_id = easiest_id = None
            toughest_score, easiest_score = math.inf, -math.inf
            for opponent, delta in self.opponents.items():
                if delta < toughest_score:
                    toughest_score, toughest_id = delta, opponent
                if delta > easiest_score:
                    easiest_score, easiest_id = delta, opponent
            result.best_opponent = self._player_result(toughest_id, toughest_score)
            result.worst_opponent = self._player_result(easiest_id, easiest_score)

        return result


def get_player_stats(
    player_id: int,
    matches: Sequence[MatchRecord],
    players: Mapping[int, Player],
) -> PlayerStats:
    """Fold the rated, oldest-first ``matches`` into a stats snapshot for one player."""
    player = players.get(player_id)
    if player is None:
        raise UnknownPlayerError(player_id)

    builder = _StatsBuilder(player, players)
    for match in matches:
        team = _team_of(player_id, match)
        if team is None:
            continue
        builder.add(match, team, _role_of(player_id, team, match))
    return builder.finalize()


__all__ = ["MatchResult", "PlayerResult", "PlayerStats", "get_player_stats"]
