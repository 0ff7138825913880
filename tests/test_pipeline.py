"""Tests for persistence and the rebuild/record flows against SQLite."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from biliardino.domain.common import MatchRecord, Team, UnknownPlayerError
from biliardino.domain.elo.calculator import EloParameters
from biliardino.domain.elo.config import EloSystemConfig
from biliardino.models import MatchRow, PlayerMatchElo, RatingSystem
from biliardino.pipeline import load_league, rebuild_ratings, record_match
from biliardino.repositories import (
    add_player,
    fetch_matches,
    fetch_player_elo_history,
    fetch_players,
    insert_match,
)


def _system(name: str = "test_system", **overrides: float) -> EloSystemConfig:
    return EloSystemConfig(
        name=name,
        description=None,
        file_path=Path("test.toml"),
        parameters=EloParameters(**overrides),
    )


def _seed_players(session_factory: sessionmaker[Session], count: int = 4) -> list[int]:
    with session_factory() as session:
        ids = [
            add_player(session, name=f"Player {index}", start_elo=1000.0).id
            for index in range(1, count + 1)
        ]
        session.commit()
    return ids


def _record(session_factory: sessionmaker[Session], score: tuple[int, int], at: int, system: EloSystemConfig | None = None):
    return record_match(
        session_factory=session_factory,
        system_config=system or _system(),
        team_a=Team(defence=1, attack=2),
        team_b=Team(defence=3, attack=4),
        score=score,
        created_at=at,
    )


def test_add_player_validates_input(session_factory: sessionmaker[Session]) -> None:
    with session_factory() as session:
        player = add_player(session, name="  Anna  ", start_elo=1100.0, defence=0.8)
        assert player.name == "Anna"
        assert player.elo == pytest.approx(1100.0)
        assert player.defence == pytest.approx(0.8)

        with pytest.raises(ValueError, match="name is required"):
            add_player(session, name=" ", start_elo=1000.0)
        with pytest.raises(ValueError, match="defence must be between 0 and 1"):
            add_player(session, name="Bruno", start_elo=1000.0, defence=-0.1)


def test_record_match_persists_ratings(session_factory: sessionmaker[Session]) -> None:
    _seed_players(session_factory)
    first = _record(session_factory, (8, 0), at=1_000)
    second = _record(session_factory, (8, 6), at=2_000)

    assert (first.id, second.id) == (1, 2)
    assert first.delta_elo == pytest.approx((37.5, -37.5))

    with session_factory() as session:
        matches = fetch_matches(session)
        players = {player.id: player for player in fetch_players(session)}
        history = fetch_player_elo_history(session, 1)

    assert [match.id for match in matches] == [1, 2]
    assert matches[0].delta_elo == pytest.approx((37.5, -37.5))
    assert matches[0].team_a_elo == pytest.approx((1000.0, 1000.0))
    assert matches[1].expected_score == pytest.approx(second.expected_score)

    assert players[1].elo == pytest.approx(1000.0 + 37.5 + second.delta_elo[0])
    assert players[1].best_elo == pytest.approx(players[1].elo)
    assert players[1].matches == 2
    assert players[3].losses == 2
    assert players[4].goals_for == 6

    assert [event.match_id for event in history] == [1, 2]
    assert history[0].post_elo == pytest.approx(1037.5)
    assert history[1].pre_elo == pytest.approx(1037.5)
    assert history[0].is_defender is True
    assert history[0].won is True


def test_record_match_with_unknown_player_stores_nothing(session_factory: sessionmaker[Session]) -> None:
    _seed_players(session_factory, count=3)

    with pytest.raises(UnknownPlayerError, match="player_id=4"):
        _record(session_factory, (8, 0), at=1_000)

    with session_factory() as session:
        assert session.scalar(select(func.count()).select_from(MatchRow)) == 0
        assert all(player.matches == 0 for player in fetch_players(session))


def test_load_league_replays_stored_history(session_factory: sessionmaker[Session]) -> None:
    _seed_players(session_factory)
    _record(session_factory, (8, 0), at=1_000)

    with session_factory() as session:
        league = load_league(session, _system())

    assert league.get_player(1).elo == pytest.approx(1037.5)
    assert league.teammates.count(1, 2) == 1
    assert league.get_rank(1) == 1
    assert league.next_match_id() == 2


def test_rebuild_rewrites_events_and_ratings(session_factory: sessionmaker[Session]) -> None:
    _seed_players(session_factory)
    _record(session_factory, (8, 0), at=1_000)
    _record(session_factory, (2, 8), at=2_000)
    lines: list[str] = []

    summary = rebuild_ratings(
        session_factory=session_factory,
        system_config=_system("fast", k_factor=100.0),
        batch_size=3,
        echo=lines.append,
    )

    assert summary.system_name == "fast"
    assert summary.processed_matches == 2
    assert summary.inserted_events == 8
    assert summary.tracked_players == 4
    assert summary.dry_run is False
    assert lines[-1].startswith("completed system=fast")

    with session_factory() as session:
        matches = fetch_matches(session)
        players = {player.id: player for player in fetch_players(session)}
        event_count = session.scalar(select(func.count()).select_from(PlayerMatchElo))
        system = session.execute(select(RatingSystem)).scalar_one()

    assert matches[0].delta_elo == pytest.approx((75.0, -75.0))
    assert matches[0].k_factor == pytest.approx(100.0)
    assert players[1].elo == pytest.approx(1000.0 + 75.0 + matches[1].delta_elo[0])
    assert event_count == 8
    assert system.name == "fast"
    assert system.config_json["k_factor"] == pytest.approx(100.0)


def test_rebuild_is_repeatable(session_factory: sessionmaker[Session]) -> None:
    _seed_players(session_factory)
    _record(session_factory, (8, 3), at=1_000)

    first = rebuild_ratings(session_factory=session_factory, system_config=_system())
    second = rebuild_ratings(session_factory=session_factory, system_config=_system())

    assert first == second
    with session_factory() as session:
        assert session.scalar(select(func.count()).select_from(PlayerMatchElo)) == 4
        assert session.scalar(select(func.count()).select_from(RatingSystem)) == 1


def test_rebuild_dry_run_writes_nothing(session_factory: sessionmaker[Session]) -> None:
    _seed_players(session_factory)
    _record(session_factory, (8, 0), at=1_000)
    lines: list[str] = []

    summary = rebuild_ratings(
        session_factory=session_factory,
        system_config=_system("other", k_factor=10.0),
        dry_run=True,
        echo=lines.append,
    )

    assert summary.dry_run is True
    assert summary.inserted_events == 0
    assert summary.tracked_players == 4
    assert lines == ["[dry-run] system=other processed_matches=1 tracked_players=4"]
    with session_factory() as session:
        assert fetch_matches(session)[0].delta_elo == pytest.approx((37.5, -37.5))
        assert session.scalar(select(func.count()).select_from(RatingSystem)) == 0


def test_rebuild_rejects_invalid_batch_size(session_factory: sessionmaker[Session]) -> None:
    with pytest.raises(ValueError, match="batch_size must be greater than 0"):
        rebuild_ratings(session_factory=session_factory, system_config=_system(), batch_size=0)


def test_matches_must_reference_stored_players(session_factory: sessionmaker[Session]) -> None:
    _seed_players(session_factory, count=3)
    match = MatchRecord(id=1, team_a=Team(1, 2), team_b=Team(3, 77), score=(8, 0), created_at=1_000)

    with session_factory() as session:
        with pytest.raises(IntegrityError):
            insert_match(session, match)
