"""Persistence helpers for matches."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from biliardino.domain.common import MatchRecord, Team
from biliardino.models import MatchRow


def _pair(first: float | None, second: float | None) -> tuple[float, float] | None:
    if first is None or second is None:
        return None
    return (first, second)


def _row_to_match(row: MatchRow) -> MatchRecord:
    return MatchRecord(
        id=row.id,
        team_a=Team(defence=row.team_a_defence_id, attack=row.team_a_attack_id),
        team_b=Team(defence=row.team_b_defence_id, attack=row.team_b_attack_id),
        score=(row.score_a, row.score_b),
        created_at=row.created_at,
        expected_score=_pair(row.expected_score_a, row.expected_score_b),
        team_elo=_pair(row.team_elo_a, row.team_elo_b),
        team_a_elo=_pair(row.team_a_defence_elo, row.team_a_attack_elo),
        team_b_elo=_pair(row.team_b_defence_elo, row.team_b_attack_elo),
        delta_elo=_pair(row.delta_elo_a, row.delta_elo_b),
        k_factor=row.k_factor,
    )


def _write_ratings(row: MatchRow, match: MatchRecord) -> None:
    expected = match.expected_score or (None, None)
    team_elo = match.team_elo or (None, None)
    team_a_elo = match.team_a_elo or (None, None)
    team_b_elo = match.team_b_elo or (None, None)
    delta = match.delta_elo or (None, None)
    row.expected_score_a, row.expected_score_b = expected
    row.team_elo_a, row.team_elo_b = team_elo
    row.team_a_defence_elo, row.team_a_attack_elo = team_a_elo
    row.team_b_defence_elo, row.team_b_attack_elo = team_b_elo
    row.delta_elo_a, row.delta_elo_b = delta
    row.k_factor = match.k_factor


def fetch_matches(session: Session) -> list[MatchRecord]:
    """Load the full history, oldest first."""
    statement = select(MatchRow).order_by(MatchRow.created_at, MatchRow.id)
    return [_row_to_match(row) for row in session.execute(statement).scalars()]


def insert_match(session: Session, match: MatchRecord) -> None:
    """Insert one match together with its derived rating fields."""
    row = MatchRow(
        id=match.id,
        team_a_defence_id=match.team_a.defence,
        team_a_attack_id=match.team_a.attack,
        team_b_defence_id=match.team_b.defence,
        team_b_attack_id=match.team_b.attack,
        score_a=match.score[0],
        score_b=match.score[1],
        created_at=match.created_at,
    )
    _write_ratings(row, match)
    session.add(row)
    session.flush()


def update_match_ratings(session: Session, matches: Iterable[MatchRecord]) -> None:
    """Overwrite the derived rating columns of existing matches."""
    rows = {row.id: row for row in session.execute(select(MatchRow)).scalars()}
    for match in matches:
        row = rows.get(match.id)
        if row is None:
            raise ValueError(f"match_id={match.id} does not exist in the matches table")
        _write_ratings(row, match)
    session.flush()
