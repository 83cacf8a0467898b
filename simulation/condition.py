"""
Player condition model for Touchline.

Fitness, morale, injuries, suspensions and aging.  Every function takes a
Player and returns a new one (``dataclasses.replace``); the input is never
modified.  Fitness and morale always stay within 0-100.
"""
from __future__ import annotations

import random
from dataclasses import replace
from datetime import date, timedelta
from enum import Enum
from typing import Iterable

from models.constants import CONDITION_MIN, CONDITION_MAX
from models.match import MatchEvent, EVENT_YELLOW, EVENT_RED, EVENT_INJURY
from models.player import Player, Injury, Suspension
from models.ratings import compute_market_value
from simulation.injuries import draw_injury

# ---------------------------------------------------------------------------
# Tuning constants
# ---------------------------------------------------------------------------
FITNESS_LOSS_PER_90 = 28          # at average stamina / natural fitness
DAILY_FITNESS_RECOVERY = 8
INJURED_RECOVERY_FACTOR = 0.5
MORALE_BASELINE = 65
DAILY_MORALE_DRIFT = 1
FATIGUE_INJURY_BASE = 0.008       # per 90 minutes at full fitness
YELLOW_CARD_BAN_EVERY = 5
SECOND_YELLOW_BAN_MATCHES = 1
STRAIGHT_RED_BAN_MATCHES = 3
DAYS_PER_BANNED_MATCH = 7


class MoraleCause(str, Enum):
    WIN = "win"
    DRAW = "draw"
    LOSS = "loss"
    DROPPED = "dropped"
    TRANSFER_COMPLETED = "transfer_completed"
    CONTRACT_RENEWED = "contract_renewed"
    PRAISED = "praised"
    CRITICISED = "criticised"


MORALE_SHIFTS: dict[MoraleCause, int] = {
    MoraleCause.WIN: 5,
    MoraleCause.DRAW: 1,
    MoraleCause.LOSS: -5,
    MoraleCause.DROPPED: -3,
    MoraleCause.TRANSFER_COMPLETED: 10,
    MoraleCause.CONTRACT_RENEWED: 8,
    MoraleCause.PRAISED: 6,
    MoraleCause.CRITICISED: -6,
}


def _clamp(value: float, lo: int = CONDITION_MIN, hi: int = CONDITION_MAX) -> int:
    return int(max(lo, min(hi, round(value))))


def _ban_return_date(match_date: date, matches: int) -> date:
    # Available again the day after the last missed round.
    return match_date + timedelta(days=DAYS_PER_BANNED_MATCH * matches + 1)


# ===================================================================
# Availability
# ===================================================================

def is_injured(player: Player, on_date: date) -> bool:
    return player.injury is not None and on_date < player.injury.return_date


def is_suspended(player: Player, on_date: date) -> bool:
    return player.suspension is not None and on_date < player.suspension.return_date


def is_available(player: Player, on_date: date) -> bool:
    """False while the player is injured or suspended; lineup selection relies on this."""
    return not is_injured(player, on_date) and not is_suspended(player, on_date)


# ===================================================================
# Match load
# ===================================================================

def apply_match_load(
    player: Player,
    minutes_played: int,
    match_events: Iterable[MatchEvent],
    *,
    match_date: date,
    rng: random.Random,
    physio_quality: int = 50,
) -> Player:
    """Apply one match's physical and disciplinary consequences to *player*.

    Only events whose ``primary_player_id`` is this player are considered.
    A red card preceded by a yellow in the same match counts as a second
    yellow; a red on its own is a straight red.
    """
    own = [e for e in match_events if e.primary_player_id == player.id]
    yellows = sum(1 for e in own if e.type == EVENT_YELLOW)
    reds = sum(1 for e in own if e.type == EVENT_RED)
    injured_in_match = any(e.type == EVENT_INJURY for e in own)

    # Fitness
    endurance = (player.attributes.get("stamina", 50) + player.attributes.get("natural_fitness", 50)) / 198.0
    fatigue_factor = 1.2 - 0.4 * endurance
    loss = FITNESS_LOSS_PER_90 * fatigue_factor * max(0, minutes_played) / 90.0
    fitness = _clamp(player.match_fitness - loss)

    # Injury: in-match event, otherwise a small fatigue-driven chance
    injury = player.injury
    if injury is None and minutes_played > 0:
        fatigue_chance = (
            FATIGUE_INJURY_BASE
            * (1.0 + (CONDITION_MAX - fitness) / 50.0)
            * minutes_played / 90.0
            * (1.0 - 0.3 * physio_quality / 99.0)
        )
        if injured_in_match or rng.random() < fatigue_chance:
            injury_type, return_date = draw_injury(rng, match_date, physio_quality)
            injury = Injury(type=injury_type, return_date=return_date)

    # Discipline
    season_yellows = player.season_yellow_cards + yellows
    ban_matches = 0
    if reds:
        ban_matches += SECOND_YELLOW_BAN_MATCHES if yellows else STRAIGHT_RED_BAN_MATCHES
    if season_yellows // YELLOW_CARD_BAN_EVERY > player.season_yellow_cards // YELLOW_CARD_BAN_EVERY:
        ban_matches += 1
    suspension = player.suspension
    if ban_matches:
        suspension = Suspension(return_date=_ban_return_date(match_date, ban_matches), matches=ban_matches)

    return replace(
        player,
        match_fitness=fitness,
        injury=injury,
        suspension=suspension,
        season_yellow_cards=season_yellows,
    )


# ===================================================================
# Daily recovery
# ===================================================================

def apply_daily_recovery(player: Player, today: date, *, physio_quality: int = 50) -> Player:
    """One day of rest: fitness back toward 100, morale toward its baseline,
    injuries and suspensions cleared once their return date is reached."""
    injury = player.injury
    if injury is not None and today >= injury.return_date:
        injury = None
    suspension = player.suspension
    if suspension is not None and today >= suspension.return_date:
        suspension = None

    gain = DAILY_FITNESS_RECOVERY * (0.5 + player.attributes.get("natural_fitness", 50) / 198.0)
    gain *= 1.0 + 0.25 * physio_quality / 99.0
    if injury is not None:
        gain *= INJURED_RECOVERY_FACTOR
    fitness = _clamp(player.match_fitness + gain)

    morale = player.morale
    if morale > MORALE_BASELINE:
        morale = max(MORALE_BASELINE, morale - DAILY_MORALE_DRIFT)
    elif morale < MORALE_BASELINE:
        morale = min(MORALE_BASELINE, morale + DAILY_MORALE_DRIFT)

    if (fitness, _clamp(morale), injury, suspension) == (
        player.match_fitness, player.morale, player.injury, player.suspension
    ):
        return player
    return replace(player, match_fitness=fitness, morale=_clamp(morale), injury=injury, suspension=suspension)


# ===================================================================
# Morale and aging
# ===================================================================

def apply_morale_shift(player: Player, cause: MoraleCause) -> Player:
    return replace(player, morale=_clamp(player.morale + MORALE_SHIFTS[cause]))


def apply_aging(player: Player) -> Player:
    """Season rollover: one year older, market value recalculated."""
    age = player.age + 1
    return replace(
        player,
        age=age,
        market_value=compute_market_value(player.attributes, player.potential, age),
    )
