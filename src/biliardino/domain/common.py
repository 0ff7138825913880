"""Shared types for the rating, stats and matchmaking layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime


class UnknownPlayerError(LookupError):
    """Raised when a match references a player id that is not registered."""

    def __init__(self, player_id: int, *, match_id: int | None = None) -> None:
        self.player_id = player_id
        self.match_id = match_id
        if match_id is None:
            message = f"player_id={player_id} is not registered"
        else:
            message = f"player_id={player_id} referenced by match_id={match_id} is not registered"
        super().__init__(message)


@dataclass(frozen=True)
class Team:
    """One side of a match: a defender and an attacker."""

    defence: int
    attack: int

    def player_ids(self) -> tuple[int, int]:
        return (self.defence, self.attack)


@dataclass
class MatchRecord:
    """A played match. Derived rating fields are filled in once by the Elo engine."""

    id: int
    team_a: Team
    team_b: Team
    score: tuple[int, int]
    created_at: int
    expected_score: tuple[float, float] | None = None
    team_elo: tuple[float, float] | None = None
    team_a_elo: tuple[float, float] | None = None
    team_b_elo: tuple[float, float] | None = None
    delta_elo: tuple[float, float] | None = None
    k_factor: float | None = None

    def __post_init__(self) -> None:
        player_ids = self.player_ids()
        if len(set(player_ids)) != 4:
            raise ValueError(
                f"match_id={self.id} needs four distinct players, got {list(player_ids)}"
            )
        if len(self.score) != 2:
            raise ValueError(f"match_id={self.id} score must have two entries")
        self.score = (int(self.score[0]), int(self.score[1]))

    @property
    def is_rated(self) -> bool:
        return self.delta_elo is not None

    @property
    def event_time(self) -> datetime:
        return datetime.fromtimestamp(self.created_at / 1000.0, UTC).replace(tzinfo=None)

    def player_ids(self) -> tuple[int, int, int, int]:
        return (self.team_a.defence, self.team_a.attack, self.team_b.defence, self.team_b.attack)

    def clear_ratings(self) -> None:
        self.expected_score = None
        self.team_elo = None
        self.team_a_elo = None
        self.team_b_elo = None
        self.delta_elo = None
        self.k_factor = None


@dataclass
class Player:
    """Current rating state and cumulative counters for one player."""

    id: int
    name: str
    start_elo: float
    defence: float = 0.5
    elo: float | None = None
    best_elo: float | None = None
    matches: int = 0
    matches_as_attacker: int = 0
    matches_as_defender: int = 0
    wins: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    matches_delta: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not 0.0 <= self.defence <= 1.0:
            raise ValueError(f"player_id={self.id} defence must be between 0 and 1, got {self.defence}")
        if self.elo is None:
            self.elo = self.start_elo
        if self.best_elo is None:
            self.best_elo = max(self.start_elo, self.elo)

    def reset(self) -> None:
        """Return the player to its seed state, before any match."""
        self.elo = self.start_elo
        self.best_elo = self.start_elo
        self.matches = 0
        self.matches_as_attacker = 0
        self.matches_as_defender = 0
        self.wins = 0
        self.losses = 0
        self.goals_for = 0
        self.goals_against = 0
        self.matches_delta = []

    def apply_result(
        self,
        *,
        delta: float,
        is_defender: bool,
        goals_for: int,
        goals_against: int,
    ) -> None:
        """Fold one match in; only a positive delta counts as a win."""
        self.elo = self.elo + delta
        self.best_elo = max(self.best_elo, self.elo)
        self.matches += 1
        if is_defender:
            self.matches_as_defender += 1
        else:
            self.matches_as_attacker += 1
        if delta > 0:
            self.wins += 1
        else:
            self.losses += 1
        self.goals_for += goals_for
        self.goals_against += goals_against
        self.matches_delta.append(delta)


def pair_key(player_id: int, other_id: int) -> tuple[int, int]:
    """Canonical key of an unordered player pair."""
    if player_id == other_id:
        raise ValueError(f"a pair needs two different players, got {player_id} twice")
    return (player_id, other_id) if player_id < other_id else (other_id, player_id)


class PairTable:
    """Symmetric per-pair match counts and summed Elo deltas."""

    def __init__(self) -> None:
        self._counts: dict[tuple[int, int], int] = {}
        self._deltas: dict[tuple[int, int], float] = {}

    def __len__(self) -> int:
        return len(self._counts)

    def record(self, player_id: int, other_id: int, delta: float = 0.0) -> None:
        key = pair_key(player_id, other_id)
        self._counts[key] = self._counts.get(key, 0) + 1
        self._deltas[key] = self._deltas.get(key, 0.0) + delta

    def count(self, player_id: int, other_id: int) -> int:
        return self._counts.get(pair_key(player_id, other_id), 0)

    def delta(self, player_id: int, other_id: int) -> float:
        return self._deltas.get(pair_key(player_id, other_id), 0.0)

    def counts(self) -> dict[tuple[int, int], int]:
        return dict(self._counts)

    def partners_of(self, player_id: int) -> dict[int, int]:
        """Match count per other player paired with ``player_id``."""
        partners: dict[int, int] = {}
        for (low, high), count in self._counts.items():
            if low == player_id:
                partners[high] = count
            elif high == player_id:
                partners[low] = count
        return partners

    def clear(self) -> None:
        self._counts.clear()
        self._deltas.clear()


__all__ = [
    "MatchRecord",
    "PairTable",
    "Player",
    "Team",
    "UnknownPlayerError",
    "pair_key",
]
