"""players table model."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from biliardino.models.base import Base
from biliardino.models.mixins import PlayerCountersMixin, TimestampMixin


class PlayerRow(PlayerCountersMixin, TimestampMixin, Base):
    """Seed rating and current state of one player."""

    __tablename__ = "players"
    __table_args__ = (
        CheckConstraint("defence >= 0.0 AND defence <= 1.0", name="ck_players_defence"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    start_elo: Mapped[float] = mapped_column(Float, nullable=False)
    defence: Mapped[float] = mapped_column(Float, nullable=False, default=0.5)
    elo: Mapped[float] = mapped_column(Float, nullable=False)
    best_elo: Mapped[float] = mapped_column(Float, nullable=False)
