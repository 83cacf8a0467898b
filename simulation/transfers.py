"""
Transfer resolver for Touchline.

``evaluate`` decides a single bid and, on acceptance, returns the debited
buyer, credited seller and reassigned player together.  ``apply_settlement``
installs all three in one new GameState, so a half-done transfer is never
visible.  The decision is deterministic: a bid is accepted when it meets the
seller's willingness threshold.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from datetime import date

from models.club import Club
from models.constants import LINEUP_CATEGORY_MINIMUMS, SQUAD_CATEGORY_MINIMUMS
from models.game_state import GameState, TransferResult
from models.player import Player
from models.ratings import compute_market_value, compute_overall
from simulation.condition import MoraleCause, apply_morale_shift

logger = logging.getLogger(__name__)

SCARCITY_PREMIUM_PER_PLAYER = 0.25
REPUTATION_PREMIUM_PER_POINT = 0.005
WAGE_RISE = 1.1
YOUNG_CONTRACT_YEARS = 4
VETERAN_CONTRACT_YEARS = 2
VETERAN_AGE = 28

# AI market activity
AI_BUDGET_SHARE = 0.4
AI_UPGRADE_MARGIN = 5
AI_MAX_REPUTATION_GAP = 10
DEFAULT_SCOUT_JUDGEMENT = 50


@dataclass(frozen=True)
class TransferOffer:
    player_id: int
    buying_club_id: int
    fee: int


@dataclass
class TransferDecision:
    result: TransferResult
    fee: int = 0
    buyer: Club | None = None
    seller: Club | None = None
    player: Player | None = None

    @property
    def accepted(self) -> bool:
        return self.result.success


def _category_count(squad: list[Player], category: str) -> int:
    return sum(1 for p in squad if p.category == category)


def willingness_threshold(
    player: Player,
    buying_club: Club,
    selling_club: Club,
    selling_squad: list[Player],
) -> int:
    """Lowest fee the seller accepts: market value plus a premium for leaving
    the seller short in the player's category and one for a reputation gap."""
    remaining = _category_count(selling_squad, player.category) - 1
    deficit = max(0, SQUAD_CATEGORY_MINIMUMS.get(player.category, 0) - remaining)
    scarcity = SCARCITY_PREMIUM_PER_PLAYER * deficit
    reputation = max(0, selling_club.reputation - buying_club.reputation) * REPUTATION_PREMIUM_PER_POINT
    return int(round(player.market_value * (1.0 + scarcity + reputation)))


def _reject(message: str, fee: int) -> TransferDecision:
    return TransferDecision(result=TransferResult(success=False, message=message), fee=fee)


def evaluate(
    offer: TransferOffer,
    player: Player,
    buying_club: Club,
    selling_club: Club,
    selling_squad: list[Player],
    *,
    today: date,
) -> TransferDecision:
    """Accept or reject *offer*; every outcome carries a readable message."""
    fee = offer.fee
    if player.club_id == buying_club.id:
        return _reject(f"{player.name} already plays for {buying_club.name}.", fee)
    if fee <= 0:
        return _reject("An offer must be a positive amount.", fee)
    if buying_club.balance < fee:
        return _reject(f"{buying_club.name} cannot afford a fee of {fee:,}.", fee)
    remaining = _category_count(selling_squad, player.category) - 1
    if remaining < LINEUP_CATEGORY_MINIMUMS.get(player.category, 0):
        return _reject(
            f"{selling_club.name} refuse to sell {player.name}: they would be left without enough cover.",
            fee,
        )
    threshold = willingness_threshold(player, buying_club, selling_club, selling_squad)
    if fee < threshold:
        return _reject(f"{selling_club.name} rejected the offer of {fee:,} for {player.name}.", fee)

    years = YOUNG_CONTRACT_YEARS if player.age < VETERAN_AGE else VETERAN_CONTRACT_YEARS
    try:
        expires = today.replace(year=today.year + years)
    except ValueError:  # 29 February
        expires = today.replace(year=today.year + years, day=28)
    moved = replace(
        player,
        club_id=buying_club.id,
        wage=int(round(player.wage * WAGE_RISE)),
        contract_expires=expires,
        market_value=compute_market_value(player.attributes, player.potential, player.age),
    )
    moved = apply_morale_shift(moved, MoraleCause.TRANSFER_COMPLETED)
    return TransferDecision(
        result=TransferResult(
            success=True,
            message=f"{player.name} has signed for {buying_club.name} from {selling_club.name} for {fee:,}.",
        ),
        fee=fee,
        buyer=replace(buying_club, balance=buying_club.balance - fee),
        seller=replace(selling_club, balance=selling_club.balance + fee),
        player=moved,
    )


def _drop_from_tactics(club: Club, player_id: int) -> Club:
    tactics = club.tactics
    if player_id not in tactics.lineup_ids and player_id not in tactics.bench:
        return club
    return replace(
        club,
        tactics=replace(
            tactics,
            lineup=[lp for lp in tactics.lineup if lp.player_id != player_id],
            bench=[pid for pid in tactics.bench if pid != player_id],
        ),
    )


def apply_settlement(state: GameState, decision: TransferDecision) -> GameState:
    """New snapshot with buyer, seller and player replaced together."""
    if not decision.accepted:
        return state
    seller = _drop_from_tactics(decision.seller, decision.player.id)
    clubs = dict(state.clubs)
    clubs[decision.buyer.id] = decision.buyer
    clubs[seller.id] = seller
    players = dict(state.players)
    players[decision.player.id] = decision.player
    logger.info(
        "transfer: player %d to club %d from club %d for %d",
        decision.player.id, decision.buyer.id, seller.id, decision.fee,
    )
    return replace(state, clubs=clubs, players=players)


def resolve_offer(state: GameState, offer: TransferOffer) -> TransferDecision:
    """Look up the parties in *state* and evaluate *offer*."""
    player = state.players[offer.player_id]
    buyer = state.clubs[offer.buying_club_id]
    seller = state.clubs[player.club_id]
    return evaluate(offer, player, buyer, seller, state.squad(seller.id), today=state.current_date)


# ===================================================================
# AI market
# ===================================================================

def _overall(player: Player) -> int:
    return compute_overall(player.attributes, player.category)


def scouted_rating(player: Player, judgement: int) -> float:
    """Current ability plus the share of unrealised potential a scout with
    *judgement* (0-99) can see."""
    overall = _overall(player)
    return overall + max(0, player.potential - overall) * max(0, min(99, judgement)) / 99.0


def _scout_judgement(state: GameState, club: Club) -> int:
    scout = state.staff.get(club.staff_ids.get("scout", -1))
    if scout is None:
        return DEFAULT_SCOUT_JUDGEMENT
    return scout.attributes.get("judging_player_potential", DEFAULT_SCOUT_JUDGEMENT)


def plan_ai_transfers(state: GameState, rng: random.Random) -> list[TransferOffer]:
    """Bids AI clubs want to make this month.

    Each AI club, with a chance that grows with reputation, targets a clear
    upgrade on its weakest starter from another AI club, picking the best
    value for money as its scout rates it.  Bids are near market value; the
    resolver still decides them.
    """
    offers: list[TransferOffer] = []
    targeted: set[int] = set()
    for cid in sorted(state.clubs):
        if cid == state.player_club_id:
            continue
        club = state.clubs[cid]
        if rng.random() > 0.1 + club.reputation / 200.0:
            continue
        starters = [state.players[pid] for pid in club.tactics.lineup_ids if pid in state.players]
        if not starters:
            continue
        weakest = min(starters, key=lambda p: (_overall(p), p.id))
        floor = _overall(weakest) + AI_UPGRADE_MARGIN
        targets = [
            p for p in state.players.values()
            if p.club_id != cid
            and p.club_id != state.player_club_id
            and p.id not in targeted
            and p.category == weakest.category
            and p.market_value <= club.balance * AI_BUDGET_SHARE
            and _overall(p) >= floor
            and state.clubs[p.club_id].reputation <= club.reputation + AI_MAX_REPUTATION_GAP
        ]
        if not targets:
            continue
        judgement = _scout_judgement(state, club)
        target = max(targets, key=lambda p: (scouted_rating(p, judgement) / max(1, p.market_value), -p.id))
        fee = int(round(target.market_value * (0.95 + rng.random() * 0.25) / 1000) * 1000)
        targeted.add(target.id)
        offers.append(TransferOffer(player_id=target.id, buying_club_id=cid, fee=fee))
    return offers
