"""Rebuild and incremental-update flows between the database and the league state."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.orm import Session, sessionmaker

from biliardino.domain.common import MatchRecord, Team
from biliardino.domain.elo.calculator import PlayerEloEvent, player_events
from biliardino.domain.elo.config import EloSystemConfig
from biliardino.domain.league import League
from biliardino.repositories.match_repository import fetch_matches, insert_match, update_match_ratings
from biliardino.repositories.player_elo_repository import (
    PLAYER_ELO_REPOSITORY,
    count_tracked_players,
    insert_player_elo_events,
)
from biliardino.repositories.player_repository import fetch_players, save_players

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RebuildSummary:
    """Outcome of one full rebuild."""

    system_name: str
    processed_matches: int
    inserted_events: int
    tracked_players: int
    dry_run: bool


def load_league(session: Session, system_config: EloSystemConfig | None = None) -> League:
    """Load players and matches and replay the history into a fresh league."""
    parameters = None if system_config is None else system_config.parameters
    league = League(fetch_players(session), params=parameters)
    league.load_matches(fetch_matches(session))
    league.recompute()
    return league


def rebuild_ratings(
    *,
    session_factory: sessionmaker[Session],
    system_config: EloSystemConfig,
    batch_size: int = 5000,
    dry_run: bool = False,
    echo: Callable[[str], None] | None = None,
) -> RebuildSummary:
    """Replay every match from the player seeds and rewrite all derived state."""
    if batch_size <= 0:
        raise ValueError("batch_size must be greater than 0")

    inserted_events = 0
    with session_factory() as session:
        league = League(fetch_players(session), params=system_config.parameters)
        league.load_matches(fetch_matches(session))
        matches = league.matches()
        ratings = league.recompute()
        total_matches = len(matches)

        if dry_run:
            tracked_players = len({event_player for match in matches for event_player in match.player_ids()})
            if echo is not None:
                echo(
                    f"[dry-run] system={system_config.name} "
                    f"processed_matches={total_matches} "
                    f"tracked_players={tracked_players}"
                )
            session.rollback()
            return RebuildSummary(
                system_name=system_config.name,
                processed_matches=total_matches,
                inserted_events=0,
                tracked_players=tracked_players,
                dry_run=True,
            )

        buffered_events: list[PlayerEloEvent] = []
        try:
            PLAYER_ELO_REPOSITORY.upsert_system(
                session,
                name=system_config.name,
                description=system_config.description,
                config_json=system_config.as_config_json(),
            )
            PLAYER_ELO_REPOSITORY.delete_events(session)

            for index, (match, rating) in enumerate(zip(matches, ratings), start=1):
                buffered_events.extend(player_events(match, rating))

                if len(buffered_events) >= batch_size:
                    payload = buffered_events[:]
                    buffered_events.clear()
                    insert_player_elo_events(session, payload)
                    inserted_events += len(payload)

                if echo is not None and index % 1_000 == 0:
                    echo(f"system={system_config.name} processed_matches={index}/{total_matches}")

            if buffered_events:
                payload = buffered_events[:]
                buffered_events.clear()
                insert_player_elo_events(session, payload)
                inserted_events += len(payload)

            update_match_ratings(session, matches)
            save_players(session, league.all_players())
            session.commit()
        except Exception:
            session.rollback()
            raise

        tracked_players = count_tracked_players(session)

    logger.info(
        "rebuilt system=%s processed_matches=%d inserted_events=%d tracked_players=%d",
        system_config.name,
        total_matches,
        inserted_events,
        tracked_players,
    )
    if echo is not None:
        echo(
            "completed "
            f"system={system_config.name} "
            f"processed_matches={total_matches} "
            f"inserted_events={inserted_events} "
            f"tracked_players={tracked_players}"
        )

    return RebuildSummary(
        system_name=system_config.name,
        processed_matches=total_matches,
        inserted_events=inserted_events,
        tracked_players=tracked_players,
        dry_run=False,
    )


def record_match(
    *,
    session_factory: sessionmaker[Session],
    system_config: EloSystemConfig,
    team_a: Team,
    team_b: Team,
    score: tuple[int, int],
    created_at: int | None = None,
) -> MatchRecord:
    """Rate one new match on top of the stored history and persist it."""
    with session_factory() as session:
        try:
            league = load_league(session, system_config)
            match = MatchRecord(
                id=league.next_match_id(),
                team_a=team_a,
                team_b=team_b,
                score=score,
                created_at=int(time.time() * 1000) if created_at is None else created_at,
            )
            rating = league.append_match(match)
            insert_match(session, match)
            insert_player_elo_events(session, player_events(match, rating))
            save_players(session, league.all_players())
            session.commit()
        except Exception:
            session.rollback()
            raise

    logger.info("recorded match_id=%s score=%s delta=%s", match.id, match.score, match.delta_elo)
    return match


__all__ = ["RebuildSummary", "load_league", "rebuild_ratings", "record_match"]
