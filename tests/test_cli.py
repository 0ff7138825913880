"""End-to-end tests for the typer command line."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from biliardino import cli
from biliardino.cli import app
from biliardino.domain.elo.calculator import EloParameters
from biliardino.domain.matchmaking.config import MatchmakingParameters

runner = CliRunner()


def _invoke(db_url: str, *args: str):
    return runner.invoke(app, [*args, "--db-url", db_url])


def _seed(db_url: str) -> None:
    for name in ("Anna", "Bruno", "Carla", "Dario"):
        result = _invoke(db_url, "add-player", name)
        assert result.exit_code == 0, result.output


def test_init_db_and_empty_ranking(db_url: str) -> None:
    result = _invoke(db_url, "init-db")
    assert result.exit_code == 0
    assert "schema ready" in result.output

    result = _invoke(db_url, "ranking")
    assert result.exit_code == 0
    assert "No players registered." in result.output


def test_add_player_uses_default_seed(db_url: str) -> None:
    result = _invoke(db_url, "add-player", "Anna", "--defence", "0.7")

    assert result.exit_code == 0
    assert "added player_id=1 name=Anna elo=1000" in result.output


def test_add_player_rejects_duplicate_name(db_url: str) -> None:
    assert _invoke(db_url, "add-player", "Anna").exit_code == 0

    result = _invoke(db_url, "add-player", " Anna ")
    assert result.exit_code == 2

    result = _invoke(db_url, "add-player", "Bruno")
    assert result.exit_code == 0
    assert "added player_id=2 name=Bruno" in result.output


def test_missing_default_configs_fall_back_with_warning(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(cli, "DEFAULT_ELO_CONFIG", tmp_path / "elo.toml")
    monkeypatch.setattr(cli, "DEFAULT_MATCHMAKING_CONFIG", tmp_path / "matchmaking.toml")

    with caplog.at_level(logging.WARNING, logger="biliardino.cli"):
        elo = cli._load_elo_config(None)
        matchmaking = cli._load_matchmaking_parameters(None)

    assert elo.parameters == EloParameters()
    assert matchmaking == MatchmakingParameters()
    messages = [record.getMessage() for record in caplog.records]
    assert any("elo.toml not found" in message for message in messages)
    assert any("matchmaking.toml not found" in message for message in messages)


def test_add_match_then_ranking_and_stats(db_url: str) -> None:
    _seed(db_url)

    result = _invoke(db_url, "add-match", "1", "2", "3", "4", "8", "0")
    assert result.exit_code == 0, result.output
    assert "match_id=1 score=8-0" in result.output
    assert "delta=(+37.5, -37.5)" in result.output

    result = _invoke(db_url, "ranking", "--top-n", "2")
    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert len(lines) == 2
    assert "Anna" in lines[0]
    assert "elo= 1037.5" in lines[0]

    result = _invoke(db_url, "stats", "3")
    assert result.exit_code == 0
    assert result.output.startswith("Carla rank=2 elo=962.5")
    assert "wins=0 losses=1" in result.output
    assert "most_frequent_teammate=Dario (1)" in result.output


def test_add_match_rejects_draws_without_flag(db_url: str) -> None:
    _seed(db_url)

    result = _invoke(db_url, "add-match", "1", "2", "3", "4", "5", "5")
    assert result.exit_code == 2

    result = _invoke(db_url, "add-match", "1", "2", "3", "4", "8", "8", "--allow-tie")
    assert result.exit_code == 0
    assert "delta=(+0.0, +0.0)" in result.output


def test_add_match_with_unknown_player_fails(db_url: str) -> None:
    _seed(db_url)

    result = _invoke(db_url, "add-match", "1", "2", "3", "99", "8", "0")
    assert result.exit_code == 1


def test_stats_for_unknown_player_fails(db_url: str) -> None:
    _seed(db_url)

    result = _invoke(db_url, "stats", "42")
    assert result.exit_code == 1


def test_propose_match(db_url: str) -> None:
    _seed(db_url)

    result = _invoke(db_url, "propose", "1", "2", "3", "4", "--priority", "2", "--seed", "7")
    assert result.exit_code == 0, result.output
    assert "team A:" in result.output
    assert "team B:" in result.output
    assert "score=" in result.output

    result = _invoke(db_url, "propose", "1", "2", "3")
    assert result.exit_code == 1
    assert "No match could be generated." in result.output


def test_rebuild_dry_run(db_url: str) -> None:
    _seed(db_url)
    _invoke(db_url, "add-match", "1", "2", "3", "4", "8", "3")

    result = _invoke(db_url, "rebuild", "--dry-run")
    assert result.exit_code == 0
    assert "[dry-run] system=biliardino_default processed_matches=1 tracked_players=4" in result.output

    result = _invoke(db_url, "rebuild")
    assert result.exit_code == 0
    assert "inserted_events=4" in result.output
