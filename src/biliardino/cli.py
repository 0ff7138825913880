"""Command line entry point for the foosball league."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlalchemy.exc import IntegrityError

from biliardino.db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from biliardino.domain.common import Team, UnknownPlayerError
from biliardino.domain.elo.calculator import EloParameters
from biliardino.domain.elo.config import EloSystemConfig, load_elo_system_config
from biliardino.domain.matchmaking.config import MatchmakingParameters, load_matchmaking_config
from biliardino.domain.matchmaking.scorer import BruteForceMatchFinder
from biliardino.domain.stats import PlayerResult, get_player_stats
from biliardino.pipeline import load_league, rebuild_ratings, record_match
from biliardino.repositories.base import ensure_schema
from biliardino.repositories.player_repository import add_player as add_player_row

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_ELO_CONFIG = ROOT_DIR / "configs" / "elo" / "default.toml"
DEFAULT_MATCHMAKING_CONFIG = ROOT_DIR / "configs" / "matchmaking" / "default.toml"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Foosball Elo ranking, statistics and matchmaking.",
)

DbUrlOption = Annotated[
    str,
    typer.Option(
        "--db-url",
        envvar="BILIARDINO_DB_URL",
        help="Database URL. Defaults to the local biliardino postgres instance.",
    ),
]
EloConfigOption = Annotated[
    Optional[Path],
    typer.Option("--elo-config", help="Elo system TOML file. Defaults to configs/elo/default.toml."),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_elo_config(path: Path | None) -> EloSystemConfig:
    if path is None and not DEFAULT_ELO_CONFIG.is_file():
        logger.warning("%s not found, using built-in Elo defaults", DEFAULT_ELO_CONFIG)
        return EloSystemConfig(
            name="biliardino_default",
            description=None,
            file_path=DEFAULT_ELO_CONFIG,
            parameters=EloParameters(),
        )
    try:
        return load_elo_system_config(path or DEFAULT_ELO_CONFIG)
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--elo-config") from exc


def _load_matchmaking_parameters(path: Path | None) -> MatchmakingParameters:
    if path is None and not DEFAULT_MATCHMAKING_CONFIG.is_file():
        logger.warning("%s not found, using built-in matchmaking weights", DEFAULT_MATCHMAKING_CONFIG)
        return MatchmakingParameters()
    try:
        return load_matchmaking_config(path or DEFAULT_MATCHMAKING_CONFIG).parameters
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--matchmaking-config") from exc


def _session_factory(db_url: str):
    engine = create_db_engine(db_url)
    ensure_schema(engine)
    return create_session_factory(engine)


def _describe(result: PlayerResult | None) -> str:
    if result is None:
        return "-"
    name = result.player.name if result.player is not None else f"#{result.player_id}"
    return f"{name} ({result.score:+.1f})" if isinstance(result.score, float) else f"{name} ({result.score})"


@app.command("init-db")
def init_db(db_url: DbUrlOption = DEFAULT_DB_URL) -> None:
    """Create the league tables when missing."""
    _session_factory(db_url)
    typer.echo("schema ready")


@app.command("add-player")
def add_player(
    name: Annotated[str, typer.Argument(help="Full name of the player.")],
    elo: Annotated[Optional[float], typer.Option("--elo", help="Seed Elo. Defaults to the system initial_elo.")] = None,
    defence: Annotated[
        float,
        typer.Option("--defence", help="Share of matches played as defender, between 0 and 1."),
    ] = 0.5,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    elo_config: EloConfigOption = None,
) -> None:
    """Register a new player."""
    if not 0.0 <= defence <= 1.0:
        raise typer.BadParameter("--defence must be between 0 and 1")
    start_elo = elo if elo is not None else _load_elo_config(elo_config).parameters.initial_elo

    session_factory = _session_factory(db_url)
    with session_factory() as session:
        try:
            player = add_player_row(session, name=name, start_elo=start_elo, defence=defence)
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise typer.BadParameter(f"a player named {name.strip()!r} already exists", param_hint="NAME") from exc
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="NAME") from exc
    typer.echo(f"added player_id={player.id} name={player.name} elo={player.elo:.0f}")


@app.command("add-match")
def add_match(
    team_a_defence: Annotated[int, typer.Argument(help="Team A defender id.")],
    team_a_attack: Annotated[int, typer.Argument(help="Team A attacker id.")],
    team_b_defence: Annotated[int, typer.Argument(help="Team B defender id.")],
    team_b_attack: Annotated[int, typer.Argument(help="Team B attacker id.")],
    score_a: Annotated[int, typer.Argument(help="Goals scored by team A.")],
    score_b: Annotated[int, typer.Argument(help="Goals scored by team B.")],
    allow_tie: Annotated[bool, typer.Option("--allow-tie", help="Accept a drawn score.")] = False,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    elo_config: EloConfigOption = None,
) -> None:
    """Rate and store a played match."""
    if score_a < 0 or score_b < 0:
        raise typer.BadParameter("scores must be >= 0")
    if score_a == score_b and not allow_tie:
        raise typer.BadParameter("scores must differ; pass --allow-tie to record a draw")

    system_config = _load_elo_config(elo_config)
    try:
        match = record_match(
            session_factory=_session_factory(db_url),
            system_config=system_config,
            team_a=Team(defence=team_a_defence, attack=team_a_attack),
            team_b=Team(defence=team_b_defence, attack=team_b_attack),
            score=(score_a, score_b),
        )
    except UnknownPlayerError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    delta_a, delta_b = match.delta_elo
    expected_a, expected_b = match.expected_score
    typer.echo(
        f"match_id={match.id} score={match.score[0]}-{match.score[1]} "
        f"expected=({expected_a:.2f}, {expected_b:.2f}) delta=({delta_a:+.1f}, {delta_b:+.1f})"
    )


@app.command("rebuild")
def rebuild(
    batch_size: Annotated[
        int,
        typer.Option("--batch-size", help="Batch size for inserting Elo events."),
    ] = 5000,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Compute Elo without writing anything."),
    ] = False,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    elo_config: EloConfigOption = None,
) -> None:
    """Recompute every rating from the player seeds in chronological order."""
    if batch_size <= 0:
        raise typer.BadParameter("--batch-size must be greater than 0")

    rebuild_ratings(
        session_factory=_session_factory(db_url),
        system_config=_load_elo_config(elo_config),
        batch_size=batch_size,
        dry_run=dry_run,
        echo=typer.echo,
    )


@app.command("ranking")
def ranking(
    top_n: Annotated[int, typer.Option("--top-n", help="Number of players to show.")] = 20,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    elo_config: EloConfigOption = None,
) -> None:
    """Print players by current Elo; equal ratings share a rank."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")

    session_factory = _session_factory(db_url)
    with session_factory() as session:
        league = load_league(session, _load_elo_config(elo_config))

    rows = league.ranking()[:top_n]
    if not rows:
        typer.echo("No players registered.")
        return
    for rank, player in rows:
        typer.echo(
            f"{rank:3d}. {player.name:<24} elo={player.elo:7.1f} "
            f"matches={player.matches:3d} wins={player.wins:3d}"
        )


@app.command("stats")
def stats(
    player_id: Annotated[int, typer.Argument(help="Player id.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    elo_config: EloConfigOption = None,
) -> None:
    """Print the statistics snapshot of one player."""
    session_factory = _session_factory(db_url)
    with session_factory() as session:
        league = load_league(session, _load_elo_config(elo_config))

    try:
        snapshot = get_player_stats(player_id, league.matches(), league.players_by_id())
    except UnknownPlayerError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    player = league.get_player(player_id)
    typer.echo(f"{player.name} rank={league.get_rank(player_id)} elo={snapshot.elo:.1f}")
    typer.echo(f"best_elo={snapshot.best_elo:.1f} worst_elo={snapshot.worst_elo:.1f}")
    typer.echo(
        f"matches={snapshot.matches} (attack={snapshot.matches_as_attack} defence={snapshot.matches_as_defence}) "
        f"wins={snapshot.wins} losses={snapshot.losses}"
    )
    typer.echo(
        f"best_win_streak={snapshot.best_win_streak} worst_loss_streak={snapshot.worst_loss_streak} "
        f"goals={snapshot.total_goals_for}-{snapshot.total_goals_against}"
    )
    typer.echo(f"most_frequent_teammate={_describe(snapshot.best_teammate_count)}")
    typer.echo(f"best_teammate={_describe(snapshot.best_teammate)}")
    typer.echo(f"worst_teammate={_describe(snapshot.worst_teammate)}")
    typer.echo(f"best_opponent={_describe(snapshot.best_opponent)}")
    typer.echo(f"worst_opponent={_describe(snapshot.worst_opponent)}")


@app.command("propose")
def propose(
    player_ids: Annotated[list[int], typer.Argument(help="Ids of the available players.")],
    priority: Annotated[
        Optional[list[int]],
        typer.Option("--priority", help="Player id that must be in the match. Repeatable."),
    ] = None,
    seed: Annotated[Optional[int], typer.Option("--seed", help="Seed for the score jitter.")] = None,
    matchmaking_config: Annotated[
        Optional[Path],
        typer.Option("--matchmaking-config", help="Matchmaking TOML file."),
    ] = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    elo_config: EloConfigOption = None,
) -> None:
    """Propose the best 2v2 match among the available players."""
    parameters = _load_matchmaking_parameters(matchmaking_config)
    session_factory = _session_factory(db_url)
    with session_factory() as session:
        league = load_league(session, _load_elo_config(elo_config))

    finder = BruteForceMatchFinder(league, parameters, rng=random.Random(seed))
    proposal = finder.find_best_match(player_ids, priority or [])
    if proposal is None:
        typer.echo("No match could be generated.")
        raise typer.Exit(code=1)

    heuristics = proposal.heuristics
    typer.echo(f"team A: {proposal.team_a.defence.name} (defence) & {proposal.team_a.attack.name} (attack)")
    typer.echo(f"team B: {proposal.team_b.defence.name} (defence) & {proposal.team_b.attack.name} (attack)")
    typer.echo(
        f"score={heuristics.total.score:.3f} "
        f"match_balance={heuristics.match_balance.score:.3f} "
        f"team_balance={heuristics.team_balance.score:.3f} "
        f"priority={heuristics.priority.score:.3f} "
        f"diversity={heuristics.diversity.score:.3f} "
        f"jitter={heuristics.jitter:.3f}"
    )


if __name__ == "__main__":
    app()
