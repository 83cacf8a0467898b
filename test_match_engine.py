"""
Match engine: determinism, score/log consistency, stats and strength model.
"""
import random

import pytest

from models.club import Tactics
from models.match import EVENT_GOAL, EVENT_RED, EVENT_YELLOW
from simulation.engine import (
    FormStrength,
    TeamSheet,
    compute_form_strength,
    expected_goals,
    simulate_match,
)
from simulation.errors import InvariantViolation


def _sheet(state, club_id):
    club = state.clubs[club_id]
    ids = club.tactics.lineup_ids + list(club.tactics.bench)
    players = {pid: state.players[pid] for pid in ids}
    return TeamSheet(
        club_id=club_id,
        name=club.name,
        tactics=club.tactics,
        players=players,
        strength=compute_form_strength(players, club.tactics),
    )


def _play(state, fixture, seed):
    return simulate_match(
        fixture,
        _sheet(state, fixture.home_club_id),
        _sheet(state, fixture.away_club_id),
        random.Random(seed),
        season=state.season,
    )


@pytest.fixture(scope="module")
def opening_fixture(world):
    return world.schedule[0]


def test_same_seed_same_match(world, opening_fixture):
    a = _play(world, opening_fixture, "1234:match:1")
    b = _play(world, opening_fixture, "1234:match:1")
    assert a.match.to_dict() == b.match.to_dict()
    assert {k: v.to_dict() for k, v in a.players.items()} == {k: v.to_dict() for k, v in b.players.items()}


def test_score_matches_goal_events(world, opening_fixture):
    for seed in range(10):
        result = _play(world, opening_fixture, seed)
        m = result.match
        goals = [e for e in m.log if e.type == EVENT_GOAL]
        assert len([e for e in goals if e.club_id == m.home_club_id]) == m.home_score
        assert len([e for e in goals if e.club_id == m.away_club_id]) == m.away_score


def test_log_minutes_never_decrease(world, opening_fixture):
    m = _play(world, opening_fixture, 5).match
    minutes = [e.minute for e in m.log]
    assert minutes == sorted(minutes)
    assert minutes[0] == 0
    assert minutes[-1] == 90


def test_stats_are_consistent(world, opening_fixture):
    for seed in range(10):
        m = _play(world, opening_fixture, seed).match
        assert m.home_stats.possession + m.away_stats.possession == 100
        for stats, goals in ((m.home_stats, m.home_score), (m.away_stats, m.away_score)):
            assert stats.shots >= stats.shots_on_target >= goals
            assert stats.xg >= 0


def test_player_stats_add_up(world, opening_fixture):
    m = _play(world, opening_fixture, 9).match
    home_goals = sum(ps.goals for ps in m.player_stats.values() if ps.club_id == m.home_club_id)
    assert home_goals == m.home_score
    assert all(0 <= ps.minutes <= 90 for ps in m.player_stats.values())
    assert all(1.0 <= ps.rating <= 10.0 for ps in m.player_stats.values())


def test_cards_are_listed_as_disciplinary_events(world, opening_fixture):
    for seed in range(10):
        m = _play(world, opening_fixture, seed).match
        cards = [e for e in m.log if e.type in (EVENT_YELLOW, EVENT_RED)]
        assert len(cards) == len(m.disciplinary_events)


def test_featured_players_get_history(world, opening_fixture):
    result = _play(world, opening_fixture, 3)
    for pid, player in result.players.items():
        entry = player.current_season_stats(world.season)
        assert entry is not None
        assert entry.apps + entry.sub_on >= 1
    assert world.players[next(iter(result.players))].history[0].apps == 0


def test_played_fixture_cannot_be_replayed(world, opening_fixture):
    played = _play(world, opening_fixture, 1).match
    with pytest.raises(InvariantViolation):
        _play(world, played, 2)


def test_stronger_attack_means_more_expected_goals():
    strong = FormStrength(attack=80, midfield=60, defence=60, overall=67)
    weak = FormStrength(attack=40, midfield=60, defence=60, overall=53)
    opp = FormStrength(attack=60, midfield=60, defence=60, overall=60)
    kwargs = dict(attacking_mentality="Balanced", defending_mentality="Balanced", home=False)
    assert expected_goals(strong, opp, **kwargs) > expected_goals(weak, opp, **kwargs)


def test_home_advantage():
    side = FormStrength(attack=60, midfield=60, defence=60, overall=60)
    kwargs = dict(attacking_mentality="Balanced", defending_mentality="Balanced")
    assert expected_goals(side, side, home=True, **kwargs) > expected_goals(side, side, home=False, **kwargs)


def test_empty_lineup_has_no_strength(world):
    club = next(iter(world.clubs.values()))
    assert compute_form_strength(world.players, Tactics()).overall == 0.0
    assert compute_form_strength(world.players, club.tactics).overall > 0.0
