from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy.orm import Session, sessionmaker

from biliardino.db import create_db_engine, create_session_factory
from biliardino.repositories.base import ensure_schema


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'league.db'}"


@pytest.fixture
def session_factory(db_url: str) -> Iterator[sessionmaker[Session]]:
    engine = create_db_engine(db_url)
    ensure_schema(engine)
    yield create_session_factory(engine)
    engine.dispose()
