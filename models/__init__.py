"""
Data model for Touchline: divisions, clubs, players, matches and the GameState snapshot.
"""
from .division import Division
from .club import Club, Staff, Tactics, LineupPlayer
from .player import Player, PlayerSeasonStats, Injury, Suspension
from .match import Match, MatchStats, MatchEvent, PlayerMatchStats, InjuryRecord
from .game_state import (
    GameState,
    SeasonPhase,
    LeagueEntry,
    PlayerAward,
    SeasonReviewData,
    TransferResult,
    NewsItem,
    MatchDayFixtures,
    MatchDayResults,
)

__all__ = [
    "Division",
    "Club",
    "Staff",
    "Tactics",
    "LineupPlayer",
    "Player",
    "PlayerSeasonStats",
    "Injury",
    "Suspension",
    "Match",
    "MatchStats",
    "MatchEvent",
    "PlayerMatchStats",
    "InjuryRecord",
    "GameState",
    "SeasonPhase",
    "LeagueEntry",
    "PlayerAward",
    "SeasonReviewData",
    "TransferResult",
    "NewsItem",
    "MatchDayFixtures",
    "MatchDayResults",
]
