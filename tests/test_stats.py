"""Tests for per-player statistics snapshots."""

from __future__ import annotations

import pytest

from biliardino.domain.common import MatchRecord, Player, Team, UnknownPlayerError
from biliardino.domain.league import League
from biliardino.domain.stats import get_player_stats


def _league(count: int) -> League:
    return League(Player(id=index, name=f"P{index}", start_elo=1000.0) for index in range(1, count + 1))


def _play(league: League, team_a: tuple[int, int], team_b: tuple[int, int], score: tuple[int, int]) -> MatchRecord:
    created_at = (len(league.matches()) + 1) * 1_000
    return league.add_match(Team(*team_a), Team(*team_b), score, created_at=created_at)


def _two_match_league() -> League:
    league = _league(6)
    _play(league, (1, 2), (3, 4), (8, 0))
    _play(league, (1, 2), (5, 6), (2, 8))
    return league


def test_stats_without_matches_are_neutral() -> None:
    league = _league(4)
    stats = get_player_stats(2, league.matches(), league.players_by_id())

    assert stats.matches == 0
    assert stats.history == []
    assert stats.elo == pytest.approx(1000.0)
    assert stats.best_elo == pytest.approx(1000.0)
    assert stats.worst_elo == pytest.approx(1000.0)
    assert stats.current_streak == 0
    assert stats.best_teammate is None
    assert stats.best_teammate_count is None
    assert stats.best_opponent is None
    assert stats.best_victory_by_elo is None
    assert stats.worst_defeat_by_score is None


def test_stats_elo_matches_league_state() -> None:
    league = _two_match_league()
    players = league.players_by_id()

    for player_id in players:
        stats = get_player_stats(player_id, league.matches(), players)
        assert stats.elo == pytest.approx(players[player_id].elo)
        assert stats.matches == players[player_id].matches
        assert stats.wins + stats.losses == stats.matches


def test_stats_track_elo_extremes_and_roles() -> None:
    league = _two_match_league()
    stats = get_player_stats(1, league.matches(), league.players_by_id())

    assert stats.matches == 2
    assert stats.matches_as_defence == 2
    assert stats.matches_as_attack == 0
    assert stats.wins == 1
    assert stats.wins_as_defence == 1
    assert stats.losses_as_defence == 1
    assert stats.best_elo == pytest.approx(1037.5)
    assert stats.worst_elo == pytest.approx(stats.elo)
    assert stats.elo < 1000.0
    assert stats.current_streak == -1
    assert stats.total_goals_for == 10
    assert stats.total_goals_against == 8

    attacker = get_player_stats(4, league.matches(), league.players_by_id())
    assert attacker.matches_as_attack == 1
    assert attacker.losses_as_attack == 1
    assert attacker.worst_elo == pytest.approx(962.5)


def test_teammate_and_opponent_relationships() -> None:
    league = _two_match_league()
    stats = get_player_stats(1, league.matches(), league.players_by_id())
    second_delta = league.matches()[1].delta_elo[0]

    assert stats.best_teammate_count.player_id == 2
    assert stats.best_teammate_count.score == 2
    assert stats.best_teammate_count.player.name == "P2"
    assert stats.best_teammate.player_id == 2
    assert stats.best_teammate.score == pytest.approx(37.5 + second_delta)
    assert stats.worst_teammate.player_id == 2

    # Opponent that took the most Elo from this player.
    assert stats.best_opponent.player_id == 6
    assert stats.best_opponent.score == pytest.approx(second_delta)
    assert stats.best_opponent.score < 0
    assert stats.worst_opponent.player_id == 4
    assert stats.worst_opponent.score == pytest.approx(37.5)


def test_streaks_and_match_extremes() -> None:
    league = _league(4)
    for score in [(8, 6), (8, 2), (2, 8), (2, 8), (7, 8), (8, 1)]:
        _play(league, (1, 2), (3, 4), score)
    matches = league.matches()
    deltas = [match.delta_elo[0] for match in matches]

    stats = get_player_stats(1, matches, league.players_by_id())

    assert stats.wins == 3
    assert stats.losses == 3
    assert stats.best_win_streak == 2
    assert stats.worst_loss_streak == 3
    assert stats.current_streak == 1
    assert stats.best_victory_by_score is matches[5]
    # Equal margins keep the most recent match.
    assert stats.worst_defeat_by_score is matches[3]
    assert stats.best_victory_by_elo.delta == pytest.approx(max(delta for delta in deltas if delta > 0))
    assert stats.worst_defeat_by_elo.delta == pytest.approx(min(deltas))
    assert stats.total_goals_for == 35
    assert stats.total_goals_against == 33

    opponent = get_player_stats(3, matches, league.players_by_id())
    assert opponent.best_win_streak == 3
    assert opponent.current_streak == -1


def test_short_match_is_a_loss_for_both_teams() -> None:
    league = _league(4)
    _play(league, (1, 2), (3, 4), (3, 1))
    match = league.matches()[0]

    for player_id in (1, 3):
        stats = get_player_stats(player_id, league.matches(), league.players_by_id())
        assert stats.wins == 0
        assert stats.losses == 1
        assert stats.current_streak == -1
        assert stats.worst_loss_streak == 1
        assert stats.best_victory_by_elo is None
        assert stats.best_victory_by_score is None
        assert stats.worst_defeat_by_elo.match is match
        assert stats.worst_defeat_by_elo.delta == pytest.approx(0.0)


def test_history_is_in_match_order() -> None:
    league = _two_match_league()
    stats = get_player_stats(2, league.matches(), league.players_by_id())

    assert [result.match.id for result in stats.history] == [1, 2]
    assert stats.history[0].delta == pytest.approx(37.5)


def test_unknown_player_raises() -> None:
    league = _league(4)
    with pytest.raises(UnknownPlayerError, match="player_id=9"):
        get_player_stats(9, league.matches(), league.players_by_id())


def test_unrated_match_raises() -> None:
    league = _league(4)
    match = MatchRecord(id=1, team_a=Team(1, 2), team_b=Team(3, 4), score=(8, 1), created_at=0)

    with pytest.raises(ValueError, match="has not been rated"):
        get_player_stats(1, [match], league.players_by_id())
