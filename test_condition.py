"""
Player condition: fitness, discipline, injuries, recovery and morale.
"""
import random
from datetime import date, timedelta

from conftest import make_player
from models.match import EVENT_INJURY, EVENT_RED, EVENT_YELLOW, MatchEvent
from models.player import Injury, Suspension
from simulation.condition import (
    DAYS_PER_BANNED_MATCH,
    MoraleCause,
    apply_aging,
    apply_daily_recovery,
    apply_match_load,
    apply_morale_shift,
    is_available,
)
from simulation.development import renew_expiring_contracts

MATCH_DAY = date(2024, 8, 8)


def _event(kind: str, player_id: int = 1, minute: int = 30) -> MatchEvent:
    return MatchEvent(minute=minute, type=kind, club_id=1, primary_player_id=player_id)


def test_match_load_drains_fitness_without_touching_input():
    player = make_player()
    after = apply_match_load(player, 90, [], match_date=MATCH_DAY, rng=random.Random(1))
    assert player.match_fitness == 100
    assert 0 <= after.match_fitness < 100


def test_unused_player_keeps_fitness():
    player = make_player()
    after = apply_match_load(player, 0, [], match_date=MATCH_DAY, rng=random.Random(1))
    assert after.match_fitness == player.match_fitness
    assert after.injury is None


def test_straight_red_is_a_three_match_ban():
    player = make_player()
    after = apply_match_load(player, 40, [_event(EVENT_RED)], match_date=MATCH_DAY, rng=random.Random(1))
    assert after.suspension.matches == 3
    assert after.suspension.return_date == MATCH_DAY + timedelta(days=3 * DAYS_PER_BANNED_MATCH + 1)
    assert not is_available(after, MATCH_DAY + timedelta(days=DAYS_PER_BANNED_MATCH))


def test_second_yellow_is_a_one_match_ban():
    player = make_player()
    events = [_event(EVENT_YELLOW, minute=20), _event(EVENT_RED, minute=70)]
    after = apply_match_load(player, 70, events, match_date=MATCH_DAY, rng=random.Random(1))
    assert after.suspension.matches == 1
    assert after.season_yellow_cards == 1


def test_fifth_yellow_of_the_season_triggers_a_ban():
    player = make_player(season_yellow_cards=4)
    after = apply_match_load(player, 90, [_event(EVENT_YELLOW)], match_date=MATCH_DAY, rng=random.Random(1))
    assert after.season_yellow_cards == 5
    assert after.suspension is not None
    assert after.suspension.matches == 1


def test_events_of_other_players_are_ignored():
    player = make_player(player_id=1)
    after = apply_match_load(player, 90, [_event(EVENT_RED, player_id=2)], match_date=MATCH_DAY, rng=random.Random(1))
    assert after.suspension is None


def test_in_match_injury_sets_a_return_date():
    player = make_player()
    after = apply_match_load(player, 55, [_event(EVENT_INJURY)], match_date=MATCH_DAY, rng=random.Random(3))
    assert after.injury is not None
    assert after.injury.return_date > MATCH_DAY
    assert not is_available(after, MATCH_DAY + timedelta(days=1))


def test_recovery_clears_injury_on_return_date():
    back = MATCH_DAY + timedelta(days=10)
    player = make_player(match_fitness=60, injury=Injury(type="Hamstring Strain", return_date=back))
    still_out = apply_daily_recovery(player, back - timedelta(days=1))
    assert still_out.injury is not None
    healed = apply_daily_recovery(player, back)
    assert healed.injury is None
    assert is_available(healed, back)


def test_recovery_clears_suspension_and_caps_fitness():
    player = make_player(match_fitness=98, suspension=Suspension(return_date=MATCH_DAY, matches=1))
    after = apply_daily_recovery(player, MATCH_DAY)
    assert after.suspension is None
    assert after.match_fitness == 100


def test_recovery_is_faster_with_a_better_physio():
    player = make_player(match_fitness=50)
    poor = apply_daily_recovery(player, MATCH_DAY, physio_quality=0)
    good = apply_daily_recovery(player, MATCH_DAY, physio_quality=99)
    assert good.match_fitness > poor.match_fitness > player.match_fitness


def test_morale_stays_in_range():
    low = make_player(morale=2)
    high = make_player(morale=98)
    assert apply_morale_shift(low, MoraleCause.LOSS).morale == 0
    assert apply_morale_shift(high, MoraleCause.TRANSFER_COMPLETED).morale == 100
    assert apply_morale_shift(make_player(morale=50), MoraleCause.WIN).morale > 50


def test_aging_adds_a_year():
    player = make_player(age=29)
    older = apply_aging(player)
    assert older.age == 30
    assert player.age == 29


def test_expiring_contract_is_renewed_with_a_raise():
    start = date(2025, 8, 1)
    expiring = make_player(1, contract_expires=date(2025, 6, 30), wage=2000, morale=60)
    settled = make_player(2, contract_expires=date(2027, 6, 30), wage=2000, morale=60)
    players, renewed = renew_expiring_contracts({1: expiring, 2: settled}, start, random.Random(3))
    assert renewed == [1]
    assert date(2026, 6, 30) <= players[1].contract_expires <= date(2028, 6, 30)
    assert players[1].wage > expiring.wage
    assert players[1].morale > expiring.morale
    assert players[2] is settled
    assert expiring.contract_expires == date(2025, 6, 30)
