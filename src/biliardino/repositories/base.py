"""Generic persistence scaffold for rating event repositories."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from biliardino.models.base import Base

SystemModelT = TypeVar("SystemModelT")
EventModelT = TypeVar("EventModelT")
DomainEventT = TypeVar("DomainEventT")


def ensure_schema(engine: Engine) -> None:
    """Create every table and index when missing."""
    Base.metadata.create_all(bind=engine, checkfirst=True)


class BaseRatingRepository(Generic[SystemModelT, EventModelT, DomainEventT]):
    """Reusable persistence operations for one rating-event table."""

    def __init__(
        self,
        *,
        system_model: type[SystemModelT],
        event_model: type[EventModelT],
        entity_id_column: str,
        event_to_row: Callable[[DomainEventT], dict[str, Any]],
    ) -> None:
        self.system_model = system_model
        self.event_model = event_model
        self.entity_id_column = entity_id_column
        self.event_to_row = event_to_row

    def upsert_system(
        self,
        session: Session,
        *,
        name: str,
        description: str | None,
        config_json: dict[str, Any],
    ) -> SystemModelT:
        """Create or update the system metadata row."""
        name_column = getattr(self.system_model, "name")
        system = session.execute(select(self.system_model).where(name_column == name)).scalar_one_or_none()
        if system is None:
            system = self.system_model(  # type: ignore[call-arg]
                name=name,
                description=description,
                config_json=config_json,
            )
            session.add(system)
        else:
            setattr(system, "description", description)
            setattr(system, "config_json", config_json)
            setattr(system, "updated_at", datetime.now(UTC).replace(tzinfo=None))
        session.flush()
        return system

    def delete_events(self, session: Session) -> None:
        """Delete every historical event."""
        session.execute(delete(self.event_model))

    def insert_events(self, session: Session, events: Sequence[DomainEventT]) -> None:
        """Bulk insert domain events."""
        if not events:
            return
        payload = [self.event_to_row(event) for event in events]
        session.execute(insert(self.event_model), payload)

    def count_tracked_entities(self, session: Session) -> int:
        """Count distinct rated entities."""
        entity_column = getattr(self.event_model, self.entity_id_column)
        result = session.scalar(select(func.count(func.distinct(entity_column))))
        return int(result or 0)
