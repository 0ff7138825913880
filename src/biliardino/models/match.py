"""matches table model."""

from __future__ import annotations

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from biliardino.models.base import Base
from biliardino.models.mixins import MatchRatingMixin


class MatchRow(MatchRatingMixin, Base):
    """One played 2v2 match (one defender and one attacker per team)."""

    __tablename__ = "matches"
    __table_args__ = (
        CheckConstraint("score_a >= 0 AND score_b >= 0", name="ck_matches_score"),
        Index("idx_matches_created_at", "created_at", "id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    team_a_defence_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    team_a_attack_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    team_b_defence_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    team_b_attack_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    score_a: Mapped[int] = mapped_column(Integer, nullable=False)
    score_b: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
