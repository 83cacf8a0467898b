"""
Player development, decline, wages and market value for Touchline.

Runs once a month.  Each club's training focus picks the attributes that
grow (see TRAINING_FOCUS_ATTRIBUTES); growth moves attributes toward the
player's potential, scaled by age and by the assistant manager's man
management.  Players over 30 lose physical attributes.  Expiring contracts
are renewed when a new season starts.
"""
from __future__ import annotations

import random
from dataclasses import replace
from datetime import date

from models.club import Club, Staff
from models.constants import (
    ATTRIBUTE_MAX,
    PHYSICAL_ATTRIBUTES,
    TRAINING_FOCUS_ATTRIBUTES,
    TRAINING_FOCUS_DEFAULT,
)
from models.player import Player
from models.ratings import compute_market_value
from simulation.condition import MoraleCause, apply_morale_shift

# Monthly growth: delta scales with (potential - current) / 99 so growth is smooth.
BASE_RATE = 2.5
DECLINE_AGE = 30
DECLINE_FLOOR = 30
WEEKS_PER_MONTH = 4
CONTRACT_RENEWAL_YEARS = (1, 3)
RENEWAL_WAGE_RISE = 1.1


# Assistant man management: 0-99 -> 0.7 to 1.3
def _coach_factor(man_management: int) -> float:
    return 0.7 + 0.006 * max(0, min(99, man_management))


def _age_factor(age: int) -> float:
    if age <= 21:
        return 1.3
    if age <= 25:
        return 1.0
    if age <= 28:
        return 0.6
    return 0.0


def _prob_round(value: float, rng: random.Random) -> int:
    whole = int(value)
    return whole + (1 if rng.random() < value - whole else 0)


def develop_player(player: Player, focus: str, coach_mult: float, rng: random.Random) -> Player:
    """One month of training and aging effects for a single player."""
    attrs_with_rate = TRAINING_FOCUS_ATTRIBUTES.get(focus) or TRAINING_FOCUS_ATTRIBUTES[TRAINING_FOCUS_DEFAULT]
    age_mult = _age_factor(player.age)
    attributes = dict(player.attributes)

    if age_mult > 0:
        for attr, rate_mult in attrs_with_rate:
            current = attributes.get(attr, 50)
            headroom = player.potential - current
            if headroom <= 0:
                continue
            delta = _prob_round(BASE_RATE * (headroom / 99.0) * coach_mult * rate_mult * age_mult, rng)
            if delta > 0:
                attributes[attr] = min(ATTRIBUTE_MAX, player.potential, current + delta)

    if player.age > DECLINE_AGE:
        chance = min(1.0, (player.age - DECLINE_AGE) / 10.0)
        for attr in PHYSICAL_ATTRIBUTES:
            if attributes.get(attr, 50) > DECLINE_FLOOR and rng.random() < chance * 0.5:
                attributes[attr] -= 1

    if attributes == player.attributes:
        return player
    return replace(
        player,
        attributes=attributes,
        market_value=compute_market_value(attributes, player.potential, player.age),
    )


def run_monthly_development(
    players: dict[int, Player],
    clubs: dict[int, Club],
    staff: dict[int, Staff],
    rng: random.Random,
) -> dict[int, Player]:
    """Develop every player under contract. Returns a new players dict."""
    coach_by_club: dict[int, float] = {}
    for club in clubs.values():
        assistant = staff.get(club.staff_ids.get("assistant", -1))
        man_management = assistant.attributes.get("man_management", 50) if assistant else 50
        coach_by_club[club.id] = _coach_factor(man_management)

    out: dict[int, Player] = {}
    for pid in sorted(players):
        player = players[pid]
        club = clubs.get(player.club_id)
        if club is None:
            out[pid] = player
            continue
        out[pid] = develop_player(player, club.training_focus, coach_by_club[club.id], rng)
    return out


def monthly_wage_bill(club_id: int, players: dict[int, Player], staff: dict[int, Staff]) -> int:
    weekly = sum(p.wage for p in players.values() if p.club_id == club_id)
    weekly += sum(s.wage for s in staff.values() if s.club_id == club_id)
    return weekly * WEEKS_PER_MONTH


def process_wages(
    clubs: dict[int, Club],
    players: dict[int, Player],
    staff: dict[int, Staff],
) -> dict[int, Club]:
    """Deduct one month of player and staff wages from every club's balance."""
    return {
        cid: replace(club, balance=club.balance - monthly_wage_bill(cid, players, staff))
        for cid, club in clubs.items()
    }


def renew_expiring_contracts(
    players: dict[int, Player],
    season_start: date,
    rng: random.Random,
) -> tuple[dict[int, Player], list[int]]:
    """Extend every contract that has run out by *season_start*.

    A renewal adds one to three seasons, raises the wage and lifts morale.
    Returns the new players dict and the renewed player ids.
    """
    out = dict(players)
    renewed: list[int] = []
    for pid in sorted(players):
        player = players[pid]
        if player.contract_expires >= season_start:
            continue
        years = rng.randint(*CONTRACT_RENEWAL_YEARS)
        wage = int(round(player.wage * RENEWAL_WAGE_RISE / 100.0)) * 100
        player = replace(
            player,
            contract_expires=date(season_start.year + years, 6, 30),
            wage=max(wage, player.wage),
        )
        out[pid] = apply_morale_shift(player, MoraleCause.CONTRACT_RENEWED)
        renewed.append(pid)
    return out, renewed
