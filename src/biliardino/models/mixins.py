"""SQLAlchemy mixins for common rating columns."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, func
from sqlalchemy.orm import Mapped, mapped_column


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )


class PlayerCountersMixin:
    """Cumulative counters folded from every applied match."""

    matches: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    matches_as_attacker: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    matches_as_defender: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    goals_for: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    goals_against: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class MatchRatingMixin:
    """Derived columns written once the Elo engine has rated the match."""

    expected_score_a: Mapped[float | None] = mapped_column(Float, nullable=True)
    expected_score_b: Mapped[float | None] = mapped_column(Float, nullable=True)
    team_elo_a: Mapped[float | None] = mapped_column(Float, nullable=True)
    team_elo_b: Mapped[float | None] = mapped_column(Float, nullable=True)
    team_a_defence_elo: Mapped[float | None] = mapped_column(Float, nullable=True)
    team_a_attack_elo: Mapped[float | None] = mapped_column(Float, nullable=True)
    team_b_defence_elo: Mapped[float | None] = mapped_column(Float, nullable=True)
    team_b_attack_elo: Mapped[float | None] = mapped_column(Float, nullable=True)
    delta_elo_a: Mapped[float | None] = mapped_column(Float, nullable=True)
    delta_elo_b: Mapped[float | None] = mapped_column(Float, nullable=True)
    k_factor: Mapped[float | None] = mapped_column(Float, nullable=True)
