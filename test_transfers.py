"""
Transfers: acceptance rules, atomic settlement and AI market activity.
"""
import random
from dataclasses import replace
from datetime import date

from conftest import make_player
from models.club import Club
from models.game_state import SeasonPhase
from simulation.intents import MakeTransferOffer
from simulation.season import reduce
from simulation.transfers import (
    TransferOffer,
    apply_settlement,
    evaluate,
    plan_ai_transfers,
    resolve_offer,
    scouted_rating,
    willingness_threshold,
)

TODAY = date(2024, 9, 1)


def _target(state, buyer_id):
    """A squad player at another club whose sale leaves the seller above minimums."""
    for p in sorted(state.players.values(), key=lambda p: p.id):
        if p.club_id == buyer_id:
            continue
        squad = state.squad(p.club_id)
        if sum(1 for q in squad if q.category == p.category) > 6 and p.category != "GK":
            return p
    for p in sorted(state.players.values(), key=lambda p: p.id):
        if p.club_id != buyer_id and p.category != "GK":
            return p
    raise AssertionError("no transfer target")


def _rich(state, club_id, amount=500_000_000):
    clubs = dict(state.clubs)
    clubs[club_id] = replace(clubs[club_id], balance=amount)
    return replace(state, clubs=clubs)


def test_low_bid_is_rejected_with_a_message(started, user_club_id):
    target = _target(started, user_club_id)
    decision = resolve_offer(started, TransferOffer(target.id, user_club_id, 1000))
    assert not decision.accepted
    assert decision.result.message


def test_bid_above_balance_is_rejected(started, user_club_id):
    target = _target(started, user_club_id)
    poor = _rich(started, user_club_id, amount=10)
    decision = resolve_offer(poor, TransferOffer(target.id, user_club_id, target.market_value * 3))
    assert not decision.accepted
    assert "afford" in decision.result.message


def test_accepted_bid_settles_atomically(started, user_club_id):
    state = _rich(started, user_club_id)
    target = _target(state, user_club_id)
    seller_id = target.club_id
    fee = target.market_value * 3
    decision = resolve_offer(state, TransferOffer(target.id, user_club_id, fee))
    assert decision.accepted
    after = apply_settlement(state, decision)

    assert after.players[target.id].club_id == user_club_id
    assert after.clubs[user_club_id].balance == state.clubs[user_club_id].balance - fee
    assert after.clubs[seller_id].balance == state.clubs[seller_id].balance + fee
    assert target.id not in after.clubs[seller_id].tactics.lineup_ids
    assert target.id not in after.clubs[seller_id].tactics.bench
    total_before = sum(c.balance for c in state.clubs.values())
    total_after = sum(c.balance for c in after.clubs.values())
    assert total_before == total_after
    assert state.players[target.id].club_id == seller_id


def test_own_player_and_non_positive_fee_are_rejected(started, user_club_id):
    own = started.squad(user_club_id)[0]
    assert not resolve_offer(started, TransferOffer(own.id, user_club_id, 10_000_000)).accepted
    target = _target(started, user_club_id)
    assert not resolve_offer(started, TransferOffer(target.id, user_club_id, 0)).accepted


def test_seller_keeps_enough_cover():
    keepers = [make_player(i, club_id=2, role="Goalkeeper") for i in (1,)]
    buyer = Club(id=1, name="Buyers", reputation=50, balance=10**9)
    seller = Club(id=2, name="Sellers", reputation=50, balance=0)
    decision = evaluate(TransferOffer(1, 1, 10**8), keepers[0], buyer, seller, keepers, today=TODAY)
    assert not decision.accepted


def test_scarcity_raises_the_price():
    player = make_player(1, club_id=2, role="Striker", market_value=1_000_000)
    buyer = Club(id=1, reputation=50)
    seller = Club(id=2, reputation=50)
    deep = [player] + [make_player(i, club_id=2, role="Striker") for i in range(2, 10)]
    thin = [player] + [make_player(i, club_id=2, role="Striker") for i in range(2, 4)]
    assert willingness_threshold(player, buyer, seller, thin) > willingness_threshold(player, buyer, seller, deep)


def test_transfer_intent_fills_result_slot(started, user_club_id):
    state = _rich(started, user_club_id)
    target = _target(state, user_club_id)
    after = reduce(state, MakeTransferOffer(player_id=target.id, fee=target.market_value * 3))
    assert after.transfer_result.success
    assert after.players[target.id].club_id == user_club_id
    assert after.news[0].related_entity_id == target.id


def test_transfer_intent_rejected_outside_season(world, user_club_id):
    target = _target(world, user_club_id)
    after = reduce(world, MakeTransferOffer(player_id=target.id, fee=10**8))
    assert after.phase == SeasonPhase.PRE_SEASON
    assert after.intent_error
    assert after.players == world.players


def test_ai_market_never_targets_user_players(started, user_club_id):
    rich = started
    for cid in started.clubs:
        rich = _rich(rich, cid, amount=200_000_000)
    offers = plan_ai_transfers(rich, random.Random(7))
    for offer in offers:
        assert offer.buying_club_id != user_club_id
        assert rich.players[offer.player_id].club_id != user_club_id
        assert rich.players[offer.player_id].club_id != offer.buying_club_id


def test_sharper_scouts_see_more_of_a_prospect():
    prospect = make_player(1, level=55, potential=85, age=19)
    finished = make_player(2, level=55, potential=55, age=29)
    assert scouted_rating(prospect, 90) > scouted_rating(prospect, 20)
    assert scouted_rating(finished, 90) == scouted_rating(finished, 20)
    assert scouted_rating(prospect, 0) == scouted_rating(finished, 0)
