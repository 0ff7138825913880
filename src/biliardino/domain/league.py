"""In-memory league state: players, ordered match history and pair tables."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable

from biliardino.domain.common import MatchRecord, PairTable, Player, Team, UnknownPlayerError
from biliardino.domain.elo.calculator import EloCalculator, EloParameters, MatchRating

logger = logging.getLogger(__name__)


def _match_order_key(match: MatchRecord) -> tuple[int, int]:
    return (match.created_at, match.id)


class League:
    """Owns every player and match of one league.

    Players are only mutated by applying matches in chronological order, or
    reset and replayed as a whole by ``recompute``.
    """

    def __init__(
        self,
        players: Iterable[Player] = (),
        *,
        params: EloParameters | None = None,
    ) -> None:
        self.calculator = EloCalculator(params)
        self.teammates = PairTable()
        self.opponents = PairTable()
        self._players: dict[int, Player] = {}
        self._matches: list[MatchRecord] = []
        self._applied_match_ids: set[int] = set()
        self._rank_memo: dict[int, int] | None = None
        self._needs_replay = False
        self.load_players(players)

    @property
    def params(self) -> EloParameters:
        return self.calculator.params

    def load_players(self, players: Iterable[Player]) -> None:
        """Replace the registry; the last duplicate id wins."""
        self._players = {}
        for player in players:
            self._players[player.id] = player
        self._invalidate_ranks()

    def load_matches(self, matches: Iterable[MatchRecord]) -> None:
        """Replace the history without rating it; matches are kept oldest first.

        Players and pair tables are not folded here: call ``recompute()``
        before appending new matches.
        """
        self._matches = sorted(matches, key=_match_order_key)
        self._applied_match_ids = {match.id for match in self._matches if match.is_rated}
        self._needs_replay = bool(self._matches)

    def get_player(self, player_id: int) -> Player:
        try:
            return self._players[player_id]
        except KeyError as exc:
            raise UnknownPlayerError(player_id) from exc

    def find_player(self, player_id: int) -> Player | None:
        return self._players.get(player_id)

    def get_player_by_name(self, name: str) -> Player | None:
        for player in self._players.values():
            if name in player.name:
                return player
        return None

    def all_players(self) -> list[Player]:
        return list(self._players.values())

    def matches(self) -> list[MatchRecord]:
        return list(self._matches)

    def players_by_id(self) -> dict[int, Player]:
        return dict(self._players)

    def get_rank(self, player_id: int) -> int | None:
        """Dense rank by rounded Elo, best first; equal ratings share a rank."""
        if self._rank_memo is None:
            self._rank_memo = self._compute_ranks()
        return self._rank_memo.get(player_id)

    def ranking(self) -> list[tuple[int, Player]]:
        ordered = sorted(self._players.values(), key=lambda player: player.elo, reverse=True)
        return [(self.get_rank(player.id), player) for player in ordered]

    def _compute_ranks(self) -> dict[int, int]:
        ordered = sorted(self._players.values(), key=lambda player: player.elo, reverse=True)
        ranks: dict[int, int] = {}
        rank = 1
        previous_elo: int | None = None
        for player in ordered:
            display_elo = round(player.elo)
            if previous_elo is not None and display_elo != previous_elo:
                rank += 1
            ranks[player.id] = rank
            previous_elo = display_elo
        return ranks

    def _invalidate_ranks(self) -> None:
        self._rank_memo = None

    def next_match_id(self) -> int:
        return max((match.id for match in self._matches), default=0) + 1

    def add_match(
        self,
        team_a: Team,
        team_b: Team,
        score: tuple[int, int],
        *,
        created_at: int | None = None,
        match_id: int | None = None,
    ) -> MatchRecord:
        """Create a match, rate it and append it to the history."""
        match = MatchRecord(
            id=self.next_match_id() if match_id is None else match_id,
            team_a=team_a,
            team_b=team_b,
            score=score,
            created_at=int(time.time() * 1000) if created_at is None else created_at,
        )
        self.append_match(match)
        return match

    def append_match(self, match: MatchRecord) -> MatchRating:
        """Rate a new, most recent match and append it to the history."""
        if self._needs_replay:
            raise ValueError(
                f"match_id={match.id} cannot be appended before recompute() folds the loaded history"
            )
        if self._matches and _match_order_key(match) < _match_order_key(self._matches[-1]):
            raise ValueError(
                f"match_id={match.id} is older than the latest match; use recompute() for backfills"
            )
        rating = self.apply_match(match)
        self._matches.append(match)
        return rating

    def apply_match(self, match: MatchRecord) -> MatchRating:
        """Rate ``match`` and fold the result into players and pair tables."""
        if match.id in self._applied_match_ids:
            raise ValueError(f"match_id={match.id} has already been applied")

        rating = self.calculator.compute_match(match, self.find_player)
        goals_a, goals_b = match.score
        sides = (
            (match.team_a, rating.delta_a, goals_a, goals_b),
            (match.team_b, rating.delta_b, goals_b, goals_a),
        )
        for team, delta, goals_for, goals_against in sides:
            self._players[team.defence].apply_result(
                delta=delta,
                is_defender=True,
                goals_for=goals_for,
                goals_against=goals_against,
            )
            self._players[team.attack].apply_result(
                delta=delta,
                is_defender=False,
                goals_for=goals_for,
                goals_against=goals_against,
            )
            self.teammates.record(team.defence, team.attack, delta)

        for player_a in match.team_a.player_ids():
            for player_b in match.team_b.player_ids():
                self.opponents.record(player_a, player_b)

        self._applied_match_ids.add(match.id)
        self._invalidate_ranks()
        return rating

    def recompute(self) -> list[MatchRating]:
        """Reset every player to its seed and replay the whole history."""
        for player in self._players.values():
            player.reset()
        self._invalidate_ranks()
        self.teammates.clear()
        self.opponents.clear()
        self._applied_match_ids.clear()
        self._needs_replay = False

        ratings: list[MatchRating] = []
        for match in self._matches:
            match.clear_ratings()
            ratings.append(self.apply_match(match))

        logger.info(
            "recomputed league players=%d matches=%d",
            len(self._players),
            len(self._matches),
        )
        return ratings


__all__ = ["League"]
