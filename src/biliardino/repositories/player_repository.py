"""Persistence helpers for players."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from biliardino.domain.common import Player
from biliardino.models import PlayerRow


def _row_to_player(row: PlayerRow) -> Player:
    return Player(
        id=row.id,
        name=row.name,
        start_elo=row.start_elo,
        defence=row.defence,
        elo=row.elo,
        best_elo=row.best_elo,
        matches=row.matches,
        matches_as_attacker=row.matches_as_attacker,
        matches_as_defender=row.matches_as_defender,
        wins=row.wins,
        losses=row.losses,
        goals_for=row.goals_for,
        goals_against=row.goals_against,
    )


def fetch_players(session: Session) -> list[Player]:
    """Load every player with its stored state, ordered by id."""
    rows = session.execute(select(PlayerRow).order_by(PlayerRow.id)).scalars()
    return [_row_to_player(row) for row in rows]


def add_player(session: Session, *, name: str, start_elo: float, defence: float = 0.5) -> Player:
    """Register a new player seeded at ``start_elo``."""
    name = name.strip()
    if not name:
        raise ValueError("player name is required")
    if not 0.0 <= defence <= 1.0:
        raise ValueError(f"defence must be between 0 and 1, got {defence}")

    row = PlayerRow(
        name=name,
        start_elo=start_elo,
        defence=defence,
        elo=start_elo,
        best_elo=start_elo,
    )
    session.add(row)
    session.flush()
    return _row_to_player(row)


def save_players(session: Session, players: Iterable[Player]) -> None:
    """Write current rating state and counters back onto existing rows."""
    rows = {row.id: row for row in session.execute(select(PlayerRow)).scalars()}
    for player in players:
        row = rows.get(player.id)
        if row is None:
            raise ValueError(f"player_id={player.id} does not exist in the players table")
        row.elo = player.elo
        row.best_elo = player.best_elo
        row.matches = player.matches
        row.matches_as_attacker = player.matches_as_attacker
        row.matches_as_defender = player.matches_as_defender
        row.wins = player.wins
        row.losses = player.losses
        row.goals_for = player.goals_for
        row.goals_against = player.goals_against
    session.flush()
