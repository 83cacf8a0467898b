"""
League table: points, ordering, promotion/relegation windows and prize money.
"""
from datetime import date

import pytest

from models.game_state import LeagueEntry
from models.match import Match
from simulation.table import compute_table, points_awarded, prize_money_for, resolve_season_end

DAY = date(2024, 8, 8)


def _played(match_id, home, away, hs, as_):
    return Match(id=match_id, date=DAY, home_club_id=home, away_club_id=away, home_score=hs, away_score=as_)


def test_points_and_goal_columns():
    table = compute_table([1, 2, 3], [_played(1, 1, 2, 2, 0), _played(2, 3, 1, 1, 1)])
    by_id = {e.club_id: e for e in table}
    assert (by_id[1].wins, by_id[1].draws, by_id[1].points) == (1, 1, 4)
    assert (by_id[2].losses, by_id[2].points) == (1, 0)
    assert by_id[3].points == 1
    assert by_id[1].goals_for == 3 and by_id[1].goals_against == 1
    assert [e.club_id for e in table] == [1, 3, 2]


def test_points_total_matches_results():
    matches = [_played(1, 1, 2, 2, 0), _played(2, 3, 4, 1, 1), _played(3, 2, 3, 0, 3)]
    table = compute_table([1, 2, 3, 4], matches)
    decisive = sum(1 for m in matches if m.home_score != m.away_score)
    draws = len(matches) - decisive
    assert points_awarded(table) == 3 * decisive + 2 * draws


def test_unplayed_and_foreign_matches_are_ignored():
    unplayed = Match(id=9, date=DAY, home_club_id=1, away_club_id=2)
    foreign = _played(10, 1, 99, 5, 0)
    table = compute_table([1, 2], [unplayed, foreign])
    assert all(e.played == 0 for e in table)


def test_ties_break_on_goal_difference_then_goals_then_id():
    matches = [_played(1, 1, 3, 1, 0), _played(2, 2, 4, 3, 2), _played(3, 5, 6, 1, 0)]
    table = compute_table([1, 2, 3, 4, 5, 6], matches)
    assert [e.club_id for e in table[:3]] == [2, 1, 5]


def test_empty_table_has_no_champion():
    outcome = resolve_season_end([], promotion_spots=2, relegation_spots=2)
    assert outcome.champion_id is None
    assert outcome.promoted == [] and outcome.relegated == []


def test_windows_never_overlap():
    table = [LeagueEntry(club_id=i) for i in (4, 2, 3)]
    outcome = resolve_season_end(table, promotion_spots=2, relegation_spots=2)
    assert outcome.champion_id == 4
    assert outcome.promoted == [4, 2]
    assert outcome.relegated == [3]
    assert not set(outcome.promoted) & set(outcome.relegated)


def test_windows_take_table_ends():
    table = [LeagueEntry(club_id=i) for i in range(1, 9)]
    outcome = resolve_season_end(table, promotion_spots=2, relegation_spots=3)
    assert outcome.promoted == [1, 2]
    assert outcome.relegated == [6, 7, 8]


@pytest.mark.parametrize("position,expected_more_than", [(1, 2), (2, 3), (3, 8)])
def test_prize_money_falls_with_position(position, expected_more_than):
    assert prize_money_for(position, 8, 1) > prize_money_for(expected_more_than, 8, 1)


def test_prize_money_out_of_range_is_zero():
    assert prize_money_for(0, 8, 1) == 0
    assert prize_money_for(9, 8, 1) == 0
    assert prize_money_for(1, 8, 1) > prize_money_for(1, 8, 2)
