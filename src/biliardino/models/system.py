"""rating_systems table model."""

from __future__ import annotations

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from biliardino.models.base import Base, JSONType
from biliardino.models.mixins import TimestampMixin


class RatingSystem(TimestampMixin, Base):
    """Configuration the stored ratings were last rebuilt with."""

    __tablename__ = "rating_systems"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(String(512), nullable=True)
    config_json: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
