"""Persistence helpers for per-player match Elo events."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from biliardino.domain.elo.calculator import PlayerEloEvent
from biliardino.models import PlayerMatchElo, RatingSystem
from biliardino.repositories.base import BaseRatingRepository


def _event_to_row(event: PlayerEloEvent) -> dict[str, Any]:
    return asdict(event)


PLAYER_ELO_REPOSITORY = BaseRatingRepository[RatingSystem, PlayerMatchElo, PlayerEloEvent](
    system_model=RatingSystem,
    event_model=PlayerMatchElo,
    entity_id_column="player_id",
    event_to_row=_event_to_row,
)


def insert_player_elo_events(session: Session, events: Sequence[PlayerEloEvent]) -> None:
    """Bulk insert player Elo events."""
    PLAYER_ELO_REPOSITORY.insert_events(session, events)


def fetch_player_elo_history(session: Session, player_id: int) -> list[PlayerMatchElo]:
    """Return one player's Elo events, oldest first."""
    statement = (
        select(PlayerMatchElo)
        .where(PlayerMatchElo.player_id == player_id)
        .order_by(PlayerMatchElo.event_time, PlayerMatchElo.match_id)
    )
    return list(session.execute(statement).scalars())


def count_tracked_players(session: Session) -> int:
    """Count players with at least one Elo event."""
    return PLAYER_ELO_REPOSITORY.count_tracked_entities(session)
