"""
Generate divisions, clubs (with [City] [Suffix] names), players and staff.
Uses the config seed for reproducibility; the same config always yields the
same world.

Procedural logic:
- Club quality comes from division level plus a reputation offset; player
  attributes are drawn around that quality, higher for the attributes that
  matter to the player's role category (see models.ratings.CATEGORY_WEIGHTS).
- Potential sits above the current overall, with more headroom for the young.
- Every squad covers the category minimums (GK 2, DEF 6, MID 6, FWD 4) before
  the remaining places are filled.
"""
import logging
import random
from dataclasses import replace
from datetime import date
from itertools import product

from models import Club, Division, GameState, Player, PlayerSeasonStats, Staff
from models.constants import (
    ATTRIBUTE_MAX,
    ATTRIBUTE_MIN,
    ATTRIBUTES,
    CATEGORIES,
    CITIES,
    CLUB_SUFFIXES,
    COUNTRIES,
    DIVISION_NAMES,
    FIRST_NAMES,
    LAST_NAMES,
    PHYSICAL_ATTRIBUTES,
    ROLE_CATEGORIES,
    SQUAD_CATEGORY_MINIMUMS,
    STAFF_FIRST_NAMES,
    STAFF_LAST_NAMES,
    STAFF_ROLES,
)
from models.game_state import LeagueEntry, SeasonPhase
from models.ratings import CATEGORY_WEIGHTS, compute_market_value, compute_overall
from simulation.errors import ConfigurationError
from simulation.schedule import build_season_schedule
from simulation.season import season_label
from simulation.tactics import select_best_xi

from .config import WorldConfig

logger = logging.getLogger(__name__)

# Mean attribute level for a club at division level 1, 2, ...
LEVEL_QUALITY = (66, 58, 51, 45)
ATTRIBUTE_SPREAD = 8
KEY_ATTRIBUTE_BONUS = 8
KEY_ATTRIBUTE_WEIGHT = 0.10

# Extra squad places beyond the minimums are shared out with these odds.
EXTRA_CATEGORY_WEIGHTS = {"GK": 0.08, "DEF": 0.34, "MID": 0.34, "FWD": 0.24}
PRIMARY_ROLE = {"GK": "Goalkeeper", "DEF": "Central Defender", "MID": "Central Midfielder", "FWD": "Striker"}


def _seed_rng(seed: int | str | None) -> int | str:
    """Return the seed to use; if None, draw one so the world can be replayed."""
    if seed is None:
        return random.randint(0, 2**31 - 1)
    return seed


def _random_name(rng: random.Random) -> str:
    return f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"


def _unique_club_names(n: int, rng: random.Random) -> list[str]:
    """Generate n unique [City] [Suffix] club names."""
    pairs = list(product(CITIES, CLUB_SUFFIXES))
    if n > len(pairs):
        raise ConfigurationError(f"cannot name {n} clubs; at most {len(pairs)} names exist")
    rng.shuffle(pairs)
    return [f"{city} {suffix}" for city, suffix in pairs[:n]]


def _clamp_attr(value: float) -> int:
    return max(ATTRIBUTE_MIN, min(ATTRIBUTE_MAX, int(round(value))))


def _roles_by_category() -> dict[str, list[str]]:
    out: dict[str, list[str]] = {c: [] for c in CATEGORIES}
    for role, category in ROLE_CATEGORIES.items():
        out[category].append(role)
    return out


ROLES_BY_CATEGORY = _roles_by_category()


def _pick_role(category: str, rng: random.Random) -> str:
    """Half of each category plays the plain role; the rest a specialist one."""
    if rng.random() < 0.5:
        return PRIMARY_ROLE[category]
    return rng.choice(ROLES_BY_CATEGORY[category])


# --- Players ---

def _attributes(category: str, quality: float, age: int, rng: random.Random) -> dict[str, int]:
    weights = CATEGORY_WEIGHTS[category]
    attrs = {}
    for attr in ATTRIBUTES:
        mean = quality
        if weights.get(attr, 0.0) >= KEY_ATTRIBUTE_WEIGHT:
            mean += KEY_ATTRIBUTE_BONUS
        elif attr not in weights:
            mean -= KEY_ATTRIBUTE_BONUS / 2
        if attr in PHYSICAL_ATTRIBUTES and age > 30:
            mean -= (age - 30) * 1.5
        attrs[attr] = _clamp_attr(rng.gauss(mean, ATTRIBUTE_SPREAD))
    return attrs


def _potential(overall: int, age: int, rng: random.Random) -> int:
    if age <= 21:
        headroom = rng.randint(6, 24)
    elif age <= 25:
        headroom = rng.randint(2, 12)
    elif age <= 28:
        headroom = rng.randint(0, 5)
    else:
        headroom = 0
    return min(ATTRIBUTE_MAX, overall + headroom)


def _make_player(
    player_id: int,
    club_id: int,
    category: str,
    quality: float,
    season: str,
    season_start: date,
    rng: random.Random,
) -> Player:
    age = rng.randint(17, 34)
    attrs = _attributes(category, quality, age, rng)
    overall = compute_overall(attrs, category)
    potential = _potential(overall, age, rng)
    market_value = compute_market_value(attrs, potential, age)
    wage = max(500, int(round(market_value / 300 / 100)) * 100)
    return Player(
        id=player_id,
        club_id=club_id,
        name=_random_name(rng),
        age=age,
        nationality=rng.choice(COUNTRIES),
        natural_role=_pick_role(category, rng),
        attributes=attrs,
        potential=potential,
        wage=wage,
        contract_expires=date(season_start.year + rng.randint(1, 4), 6, 30),
        market_value=market_value,
        morale=rng.randint(60, 80),
        history=[PlayerSeasonStats(season=season, club_id=club_id)],
    )


def _squad_categories(size: int, rng: random.Random) -> list[str]:
    """Category of every squad place: the minimums first, then weighted extras."""
    slots: list[str] = []
    for category in CATEGORIES:
        slots.extend([category] * SQUAD_CATEGORY_MINIMUMS[category])
    extra = size - len(slots)
    cats = list(EXTRA_CATEGORY_WEIGHTS)
    weights = [EXTRA_CATEGORY_WEIGHTS[c] for c in cats]
    slots.extend(rng.choices(cats, weights=weights, k=max(0, extra)))
    return slots


# --- Staff ---

def _make_staff(staff_id: int, club_id: int, role: str, reputation: int, rng: random.Random) -> Staff:
    lo = max(20, reputation - 30)
    hi = min(95, reputation + 15)
    return Staff(
        id=staff_id,
        club_id=club_id,
        name=f"{rng.choice(STAFF_FIRST_NAMES)} {rng.choice(STAFF_LAST_NAMES)}",
        age=rng.randint(35, 65),
        nationality=rng.choice(COUNTRIES),
        role=role,
        wage=rng.randint(10, 40) * 100,
        attributes={attr: rng.randint(lo, hi) for attr in STAFF_ROLES[role]},
    )


def generate_world(config: WorldConfig | None = None) -> GameState:
    """
    Build a fresh world: divisions, clubs, squads, staff, AI lineups and the
    first season's schedule.  No match has been played and no club is the
    user's yet (phase PRE_SEASON).

    Raises ConfigurationError for a config that cannot produce a valid world.
    """
    config = (config or WorldConfig()).validate()
    actual_seed = _seed_rng(config.seed)
    rng = random.Random(actual_seed)
    season = season_label(config.season_start.year)
    logger.info("generating world (seed=%s, %d divisions)", actual_seed, config.num_divisions)

    divisions: dict[int, Division] = {}
    for level, name in enumerate(DIVISION_NAMES[:config.num_divisions], start=1):
        divisions[level] = Division(id=level, name=name, level=level)

    names = _unique_club_names(config.num_divisions * config.clubs_per_division, rng)
    clubs: dict[int, Club] = {}
    players: dict[int, Player] = {}
    staff: dict[int, Staff] = {}
    next_club_id = next_player_id = next_staff_id = 1

    for div_id, division in divisions.items():
        base_quality = LEVEL_QUALITY[min(division.level, len(LEVEL_QUALITY)) - 1]
        for _ in range(config.clubs_per_division):
            club_id = next_club_id
            next_club_id += 1
            offset = rng.randint(-6, 6)
            reputation = max(5, min(100, 90 - 15 * (division.level - 1) + offset))

            staff_ids = {}
            for role in STAFF_ROLES:
                staff[next_staff_id] = _make_staff(next_staff_id, club_id, role, reputation, rng)
                staff_ids[role] = next_staff_id
                next_staff_id += 1

            squad: list[Player] = []
            size = rng.randint(config.squad_size_min, config.squad_size_max)
            for category in _squad_categories(size, rng):
                player = _make_player(
                    next_player_id, club_id, category, base_quality + offset / 2,
                    season, config.season_start, rng,
                )
                squad.append(player)
                players[player.id] = player
                next_player_id += 1

            club = Club(
                id=club_id,
                name=names[club_id - 1],
                country=rng.choice(COUNTRIES[:4]),
                reputation=reputation,
                balance=reputation * 150_000 + rng.randint(0, 50) * 100_000,
                division_id=div_id,
                staff_ids=staff_ids,
            )
            clubs[club_id] = replace(club, tactics=select_best_xi(squad, config.season_start))

    division_clubs = {
        div_id: sorted(cid for cid, c in clubs.items() if c.division_id == div_id)
        for div_id in divisions
    }
    schedule = build_season_schedule(
        division_clubs,
        season=season,
        season_start=config.season_start,
        first_match_id=1,
        rng=random.Random(f"{actual_seed}:schedule:{config.season_start.year}"),
    )
    league_tables = {
        div_id: [LeagueEntry(club_id=cid) for cid in club_ids]
        for div_id, club_ids in division_clubs.items()
    }
    logger.info("world ready: %d clubs, %d players, %d fixtures", len(clubs), len(players), len(schedule))
    return GameState(
        current_date=config.season_start,
        season=season,
        phase=SeasonPhase.PRE_SEASON,
        seed=actual_seed,
        season_start=config.season_start,
        promotion_spots=config.promotion_spots,
        divisions=divisions,
        clubs=clubs,
        players=players,
        staff=staff,
        schedule=schedule,
        league_tables=league_tables,
        next_match_id=len(schedule) + 1,
    )
