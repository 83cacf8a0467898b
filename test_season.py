"""
End-to-end tests for the season state machine.

Drives a small world (2 divisions x 4 clubs) from club selection through a
full season, the review and the rollover into the next season.
"""
import json
from collections import Counter
from dataclasses import replace
from datetime import date, timedelta

import pytest

from conftest import advance_until
from models.club import LineupPlayer, Tactics
from models.game_state import GameState, SeasonPhase
from models.player import Injury
from simulation import news as news_types
from simulation.intents import (
    AdvanceDay,
    ClearIntentError,
    ClearMatchDayFixtures,
    ClearMatchResults,
    ClearTransferResult,
    Intent,
    MarkNewsAsRead,
    PlayerInteraction,
    SelectPlayerClub,
    SetTrainingFocus,
    StartNewSeason,
    UpdateTactics,
)
from simulation.season import reduce
from simulation.session import GameSession


@pytest.fixture(scope="module")
def first_match_day(started):
    return advance_until(started, lambda s: s.match_day_fixtures is not None)


@pytest.fixture(scope="module")
def after_first_round(first_match_day):
    return reduce(first_match_day, AdvanceDay())


@pytest.fixture(scope="module")
def next_season(completed):
    return reduce(completed, StartNewSeason())


# --- Phases and club selection ---

def test_select_club_starts_the_season(started, user_club_id):
    assert started.phase == SeasonPhase.IN_SEASON
    assert started.player_club_id == user_club_id
    assert started.intent_error is None


def test_second_selection_is_rejected(started):
    other = max(started.clubs)
    after = reduce(started, SelectPlayerClub(club_id=other))
    assert after.intent_error
    assert after.player_club_id == started.player_club_id
    assert after.clubs == started.clubs


def test_unknown_club_is_rejected(world):
    after = reduce(world, SelectPlayerClub(club_id=999))
    assert after.intent_error
    assert after.phase == SeasonPhase.PRE_SEASON


def test_advance_day_needs_a_running_season(world):
    after = reduce(world, AdvanceDay())
    assert after.current_date == world.current_date
    assert after.intent_error


def test_clear_intent_error(world):
    errored = reduce(world, AdvanceDay())
    assert reduce(errored, ClearIntentError()).intent_error is None


def test_unknown_intent_is_reported(world):
    after = reduce(world, Intent())
    assert after.intent_error
    assert replace(after, intent_error=None) == world


# --- Day advancement ---

def _assert_only_calendar_moved(before, after):
    assert after.current_date == before.current_date + timedelta(days=1)
    assert after.clubs == before.clubs
    assert after.league_tables == before.league_tables
    assert after.schedule == before.schedule
    for pid, player in after.players.items():
        assert player.club_id == before.players[pid].club_id
        assert player.attributes == before.players[pid].attributes


def test_quiet_day_only_moves_the_calendar(started):
    after = reduce(started, AdvanceDay())
    _assert_only_calendar_moved(started, after)
    assert after.match_day_results is None


def test_quiet_first_of_month_only_moves_the_calendar(started):
    before = advance_until(started, lambda s: s.current_date == date(2024, 8, 31))
    assert not before.fixtures_on(before.current_date)
    after = reduce(before, AdvanceDay())
    assert after.current_date == date(2024, 9, 1)
    _assert_only_calendar_moved(before, after)


def test_match_day_fixtures_split_the_user_match(first_match_day, user_club_id):
    slot = first_match_day.match_day_fixtures
    assert slot.player_match is not None
    assert slot.player_match.involves(user_club_id)
    assert all(not m.involves(user_club_id) for m in slot.ai_matches)
    assert len(slot.ai_matches) + 1 == len(first_match_day.fixtures_on(first_match_day.current_date))


def test_match_day_plays_every_fixture(first_match_day, after_first_round, user_club_id):
    today = first_match_day.current_date
    played = [m for m in after_first_round.schedule if m.date == today]
    assert played and all(m.played for m in played)
    assert after_first_round.current_date == today + timedelta(days=1)
    results = after_first_round.match_day_results
    assert results.player_result.involves(user_club_id)
    assert len(results.all_results) == len(played)
    assert after_first_round.match_day_fixtures is None


def test_tables_follow_results(after_first_round):
    for div_id, table in after_first_round.league_tables.items():
        assert all(e.played == 1 for e in table)
        assert sum(e.goals_for for e in table) == sum(e.goals_against for e in table)


def test_news_reports_the_round(after_first_round):
    kinds = {n.type for n in after_first_round.news}
    assert news_types.MATCH_REPORT in kinds
    assert news_types.ROUND_SUMMARY in kinds
    ids = [n.id for n in after_first_round.news]
    assert ids == sorted(ids, reverse=True)
    assert after_first_round.next_news_id == max(ids) + 1


def test_dispatch_never_alters_the_previous_snapshot(first_match_day, after_first_round):
    today = first_match_day.current_date
    assert all(not m.played for m in first_match_day.schedule if m.date == today)
    assert all(e.played == 0 for t in first_match_day.league_tables.values() for e in t)


def test_same_seed_same_season(started):
    a = advance_until(started, lambda s: s.current_date >= date(2024, 8, 16))
    b = advance_until(started, lambda s: s.current_date >= date(2024, 8, 16))
    assert a.to_dict() == b.to_dict()


def test_clear_match_slots(first_match_day, after_first_round):
    assert reduce(first_match_day, ClearMatchDayFixtures()).match_day_fixtures is None
    cleared = reduce(after_first_round, ClearMatchResults())
    assert cleared.match_day_results is None
    assert cleared.league_tables == after_first_round.league_tables
    assert cleared.schedule == after_first_round.schedule
    assert reduce(after_first_round, ClearTransferResult()).transfer_result is None


def test_mark_news_as_read(after_first_round):
    item = after_first_round.news[0]
    after = reduce(after_first_round, MarkNewsAsRead(news_id=item.id))
    assert after.news[0].is_read
    assert not after_first_round.news[0].is_read


def test_injured_user_player_is_left_out(first_match_day, user_club_id):
    club = first_match_day.clubs[user_club_id]
    starter = club.tactics.lineup[3].player_id
    players = dict(first_match_day.players)
    players[starter] = replace(
        players[starter],
        injury=Injury(type="Hamstring Strain", return_date=first_match_day.current_date + timedelta(days=20)),
    )
    after = reduce(replace(first_match_day, players=players), AdvanceDay())
    match = after.match_day_results.player_result
    lineup = match.home_lineup if match.home_club_id == user_club_id else match.away_lineup
    assert starter not in [lp.player_id for lp in lineup]
    assert starter not in match.player_stats
    assert len(lineup) == 11


# --- Club management intents ---

def test_update_tactics(started, user_club_id):
    squad = started.squad(user_club_id)
    tactics = Tactics(
        formation="4-3-3",
        mentality="Offensive",
        lineup=[LineupPlayer(player_id=squad[0].id, role="Goalkeeper", x=50, y=95)],
        bench=[squad[1].id],
    )
    after = reduce(started, UpdateTactics(tactics=tactics))
    assert after.intent_error is None
    assert after.clubs[user_club_id].tactics == tactics


@pytest.mark.parametrize(
    "tactics_change",
    [
        {"formation": "2-3-5"},
        {"mentality": "Reckless"},
    ],
)
def test_bad_tactics_are_rejected(started, user_club_id, tactics_change):
    tactics = replace(started.clubs[user_club_id].tactics, **tactics_change)
    after = reduce(started, UpdateTactics(tactics=tactics))
    assert after.intent_error
    assert after.clubs == started.clubs


def test_foreign_player_in_lineup_is_rejected(started, user_club_id):
    foreign = next(p for p in started.players.values() if p.club_id != user_club_id)
    tactics = Tactics(lineup=[LineupPlayer(player_id=foreign.id, role="Striker")])
    after = reduce(started, UpdateTactics(tactics=tactics))
    assert after.intent_error
    assert after.clubs == started.clubs


def test_other_clubs_tactics_are_off_limits(started, user_club_id):
    other = max(started.clubs)
    after = reduce(started, UpdateTactics(tactics=Tactics(), club_id=other))
    assert after.intent_error


def test_training_focus(started, user_club_id):
    after = reduce(started, SetTrainingFocus(focus="Attacking"))
    assert after.clubs[user_club_id].training_focus == "Attacking"
    rejected = reduce(started, SetTrainingFocus(focus="Yoga"))
    assert rejected.intent_error
    assert rejected.clubs[user_club_id].training_focus == started.clubs[user_club_id].training_focus


def test_praise_and_criticism(started, user_club_id):
    player = started.squad(user_club_id)[0]
    praised = reduce(started, PlayerInteraction(player_id=player.id, action="praise"))
    criticised = reduce(started, PlayerInteraction(player_id=player.id, action="criticise"))
    assert praised.players[player.id].morale > player.morale
    assert criticised.players[player.id].morale < player.morale
    assert reduce(started, PlayerInteraction(player_id=player.id, action="shout")).intent_error


# --- Monthly processing ---

def test_first_match_day_of_the_month_pays_wages(started):
    before = advance_until(
        started,
        lambda s: s.current_date.month == 9 and s.match_day_fixtures is not None,
    )
    after = reduce(before, AdvanceDay())
    changed = [cid for cid in after.clubs if after.clubs[cid].balance != before.clubs[cid].balance]
    assert changed
    moves = [n for n in after.news if n.type == news_types.TRANSFER_COMPLETED and n.date == before.current_date]
    if not moves:
        assert all(after.clubs[cid].balance < before.clubs[cid].balance for cid in after.clubs)


def test_other_match_days_pay_no_wages(first_match_day, after_first_round):
    assert all(c.balance == first_match_day.clubs[cid].balance for cid, c in after_first_round.clubs.items())
    second = advance_until(after_first_round, lambda s: s.match_day_fixtures is not None)
    assert second.current_date.month == first_match_day.current_date.month
    after = reduce(second, AdvanceDay())
    assert all(after.clubs[cid].balance == second.clubs[cid].balance for cid in after.clubs)


# --- Season end ---

def test_season_completes(completed, small_config):
    assert completed.phase == SeasonPhase.SEASON_COMPLETE
    assert all(m.played for m in completed.schedule)
    rounds = 2 * (small_config.clubs_per_division - 1)
    for table in completed.league_tables.values():
        assert all(e.played == rounds for e in table)
        wins = sum(e.wins for e in table)
        draws = sum(e.draws for e in table)
        assert sum(e.points for e in table) == 3 * wins + draws


def test_season_review(completed, user_club_id):
    review = completed.season_review
    user_division = completed.clubs[user_club_id].division_id
    table = completed.league_tables[user_division]
    assert review.season == "2024/2025"
    assert review.champion_id == table[0].club_id
    assert [e.club_id for e in review.final_table] == [e.club_id for e in table]
    assert review.prize_money > 0
    assert completed.news[0].type == news_types.SEASON_REVIEW


def test_promotion_and_relegation_windows(completed, small_config):
    review = completed.season_review
    assert len(review.promoted_club_ids) == small_config.promotion_spots
    assert len(review.relegated_club_ids) == small_config.promotion_spots
    assert not set(review.promoted_club_ids) & set(review.relegated_club_ids)
    assert all(completed.clubs[c].division_id == 2 for c in review.promoted_club_ids)
    assert all(completed.clubs[c].division_id == 1 for c in review.relegated_club_ids)


def test_top_scorer_has_the_most_goals(completed, user_club_id):
    review = completed.season_review
    division = completed.clubs[user_club_id].division_id
    club_ids = set(completed.clubs_in_division(division))
    goals = [
        h.goals
        for p in completed.players.values()
        for h in p.history
        if h.season == review.season and h.club_id in club_ids
    ]
    if review.top_scorer is not None:
        assert review.top_scorer.value == max(goals)


def test_advance_after_season_end_is_rejected(completed):
    after = reduce(completed, AdvanceDay())
    assert after.intent_error
    assert after.current_date == completed.current_date


def test_new_season_needs_a_finished_one(started):
    assert reduce(started, StartNewSeason()).intent_error


# --- Rollover ---

def test_new_season_rolls_over(completed, next_season, small_config):
    assert next_season.phase == SeasonPhase.IN_SEASON
    assert next_season.season == "2025/2026"
    assert next_season.current_date == date(2025, 8, 1)
    assert next_season.season_review is None
    assert not any(m.played for m in next_season.schedule)
    assert min(m.id for m in next_season.schedule) == completed.next_match_id
    for table in next_season.league_tables.values():
        assert len(table) == small_config.clubs_per_division
        assert all(e.points == 0 for e in table)


def test_new_schedule_is_a_full_double_round_robin(completed, next_season):
    assert len(next_season.schedule) == len(completed.schedule)
    for div_id in next_season.divisions:
        clubs = next_season.clubs_in_division(div_id)
        pairings = Counter(
            (m.home_club_id, m.away_club_id) for m in next_season.schedule if m.division_id == div_id
        )
        expected = {(h, a) for h in clubs for a in clubs if h != a}
        assert set(pairings) == expected
        assert all(n == 1 for n in pairings.values())


def test_new_season_never_moves_the_calendar_back(completed):
    late = replace(completed, current_date=date(2025, 8, 15))
    after = reduce(late, StartNewSeason())
    assert after.intent_error is None
    assert after.current_date == date(2026, 8, 1)
    assert after.season == "2026/2027"
    assert min(m.date for m in after.schedule) > late.current_date


def test_expiring_contracts_are_renewed(completed, next_season):
    start = next_season.current_date
    expiring = [pid for pid, p in completed.players.items() if p.contract_expires < start]
    assert expiring
    for pid in expiring:
        player = next_season.players[pid]
        assert player.contract_expires > start
        assert player.wage >= completed.players[pid].wage
    assert all(p.contract_expires >= start for p in next_season.players.values())


def test_promoted_and_relegated_clubs_swap_divisions(completed, next_season):
    review = completed.season_review
    for cid in review.promoted_club_ids:
        assert next_season.clubs[cid].division_id == 1
    for cid in review.relegated_club_ids:
        assert next_season.clubs[cid].division_id == 2
    sizes = Counter(c.division_id for c in next_season.clubs.values())
    assert sizes[1] == sizes[2]


def test_players_age_and_open_a_new_history_entry(completed, next_season):
    for pid, player in next_season.players.items():
        before = completed.players[pid]
        assert player.age == before.age + 1
        assert len(player.history) == len(before.history) + 1
        assert player.season_yellow_cards == 0
        assert all(h.sealed for h in player.history[:-1])
        assert player.history[-1].season == "2025/2026"
        assert not player.history[-1].sealed


# --- Session ---

def test_session_snapshots_are_stable(started):
    session = GameSession(started)
    snapshot = session.get_state()
    session.dispatch(AdvanceDay())
    assert session.get_state().current_date == snapshot.current_date + timedelta(days=1)
    assert snapshot.current_date == started.current_date


# --- Save and load ---

@pytest.mark.parametrize(
    "snapshot",
    ["world", "first_match_day", "after_first_round", "completed", "next_season"],
)
def test_snapshot_survives_save_and_load(request, snapshot):
    state = request.getfixturevalue(snapshot)
    saved = json.loads(json.dumps(state.to_dict()))
    assert GameState.from_dict(saved).to_dict() == state.to_dict()


def test_loaded_game_plays_on_identically(first_match_day):
    loaded = GameState.from_dict(json.loads(json.dumps(first_match_day.to_dict())))
    assert reduce(loaded, AdvanceDay()).to_dict() == reduce(first_match_day, AdvanceDay()).to_dict()
