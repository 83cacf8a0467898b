"""
Shared fixtures: a small seeded world (2 divisions x 4 clubs) and helpers to
drive it through a season.
"""
from datetime import date

import pytest

from generation import WorldConfig, generate_world
from models.constants import ATTRIBUTES
from models.game_state import SeasonPhase
from models.player import Player, PlayerSeasonStats
from simulation.intents import AdvanceDay, SelectPlayerClub
from simulation.season import reduce

SEASON_START = date(2024, 8, 1)


def make_player(player_id: int = 1, club_id: int = 1, role: str = "Striker", level: int = 60, **kwargs) -> Player:
    defaults = dict(
        id=player_id,
        club_id=club_id,
        name=f"Player {player_id}",
        age=24,
        nationality="England",
        natural_role=role,
        attributes={a: level for a in ATTRIBUTES},
        potential=level + 10,
        wage=1000,
        contract_expires=date(2027, 6, 30),
        market_value=1_000_000,
        history=[PlayerSeasonStats(season="2024/2025", club_id=club_id)],
    )
    defaults.update(kwargs)
    return Player(**defaults)


def advance_until(state, done, limit: int = 500):
    """Dispatch ADVANCE_DAY until done(state) holds."""
    for _ in range(limit):
        if done(state):
            return state
        state = reduce(state, AdvanceDay())
    raise AssertionError("condition not reached")


@pytest.fixture(scope="session")
def small_config() -> WorldConfig:
    return WorldConfig(
        num_divisions=2,
        clubs_per_division=4,
        squad_size_min=18,
        squad_size_max=20,
        season_start=SEASON_START,
        promotion_spots=1,
        seed=1234,
    )


@pytest.fixture(scope="session")
def world(small_config):
    return generate_world(small_config)


@pytest.fixture(scope="session")
def user_club_id(world) -> int:
    return min(world.clubs_in_division(1))


@pytest.fixture(scope="session")
def started(world, user_club_id):
    return reduce(world, SelectPlayerClub(club_id=user_club_id))


@pytest.fixture(scope="session")
def completed(started):
    return advance_until(started, lambda s: s.phase == SeasonPhase.SEASON_COMPLETE)
