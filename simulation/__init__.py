"""
Simulation engine for Touchline.
Runs the season state machine: match days, tables, player condition,
monthly development and wages, transfers and the season rollover.
"""
from .engine import simulate_match
from .errors import ConfigurationError, IllegalIntent, InvariantViolation
from .intents import intent_from_dict
from .schedule import build_season_schedule, generate_division_schedule
from .season import reduce
from .session import GameSession
from .table import compute_table

__all__ = [
    "simulate_match",
    "ConfigurationError",
    "IllegalIntent",
    "InvariantViolation",
    "intent_from_dict",
    "build_season_schedule",
    "generate_division_schedule",
    "reduce",
    "GameSession",
    "compute_table",
]
