"""
GameState aggregate root and the one-shot payloads it carries for the UI.

GameState is treated as an immutable snapshot: the season state machine builds a
new one for every accepted intent and never patches an old one in place.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Any, List, Optional

from .club import Club, Staff
from .division import Division
from .match import Match
from .player import Player


class SeasonPhase(str, Enum):
    PRE_SEASON = "PRE_SEASON"
    IN_SEASON = "IN_SEASON"
    SEASON_COMPLETE = "SEASON_COMPLETE"


@dataclass
class LeagueEntry:
    """One club's standing, derived entirely from played matches."""

    club_id: int = 0
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    def to_dict(self) -> Dict[str, Any]:
        return {
            "club_id": self.club_id,
            "played": self.played,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "goals_for": self.goals_for,
            "goals_against": self.goals_against,
            "goal_difference": self.goal_difference,
            "points": self.points,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeagueEntry":
        return cls(**{k: data.get(k, 0) for k in cls.__dataclass_fields__})


@dataclass
class PlayerAward:
    player_id: int = 0
    club_id: int = 0
    name: str = ""
    value: float = 0.0  # average rating, goals, ...

    def to_dict(self) -> Dict[str, Any]:
        return {"player_id": self.player_id, "club_id": self.club_id, "name": self.name, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> Optional["PlayerAward"]:
        if not data:
            return None
        return cls(
            player_id=data.get("player_id", 0),
            club_id=data.get("club_id", 0),
            name=data.get("name", ""),
            value=data.get("value", 0.0),
        )


@dataclass
class SeasonReviewData:
    """End-of-season snapshot, shown once by the UI and then discarded."""

    season: str = ""
    final_table: List[LeagueEntry] = field(default_factory=list)
    champion_id: int | None = None
    promoted_club_ids: List[int] = field(default_factory=list)
    relegated_club_ids: List[int] = field(default_factory=list)
    player_of_the_season: Optional[PlayerAward] = None
    top_scorer: Optional[PlayerAward] = None
    young_player: Optional[PlayerAward] = None
    prize_money: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "season": self.season,
            "final_table": [e.to_dict() for e in self.final_table],
            "champion_id": self.champion_id,
            "promoted_club_ids": list(self.promoted_club_ids),
            "relegated_club_ids": list(self.relegated_club_ids),
            "awards": {
                "player_of_the_season": self.player_of_the_season.to_dict() if self.player_of_the_season else None,
                "top_scorer": self.top_scorer.to_dict() if self.top_scorer else None,
                "young_player": self.young_player.to_dict() if self.young_player else None,
            },
            "prize_money": self.prize_money,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SeasonReviewData":
        awards = data.get("awards") or {}
        return cls(
            season=data.get("season", ""),
            final_table=[LeagueEntry.from_dict(e) for e in data.get("final_table", [])],
            champion_id=data.get("champion_id"),
            promoted_club_ids=list(data.get("promoted_club_ids", [])),
            relegated_club_ids=list(data.get("relegated_club_ids", [])),
            player_of_the_season=PlayerAward.from_dict(awards.get("player_of_the_season")),
            top_scorer=PlayerAward.from_dict(awards.get("top_scorer")),
            young_player=PlayerAward.from_dict(awards.get("young_player")),
            prize_money=data.get("prize_money", 0),
        )


@dataclass
class TransferResult:
    """Outcome of one negotiation attempt. Always carries a readable message."""

    success: bool = False
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransferResult":
        return cls(success=bool(data.get("success")), message=data.get("message", ""))


@dataclass
class NewsItem:
    id: int = 0
    date: date = date.min
    headline: str = ""
    content: str = ""
    type: str = ""  # round_summary | match_report | transfer_completed | injury_report | suspension_report | season_review
    related_entity_id: int | None = None
    is_read: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "headline": self.headline,
            "content": self.content,
            "type": self.type,
            "related_entity_id": self.related_entity_id,
            "is_read": self.is_read,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NewsItem":
        return cls(
            id=data.get("id", 0),
            date=date.fromisoformat(data["date"]),
            headline=data.get("headline", ""),
            content=data.get("content", ""),
            type=data.get("type", ""),
            related_entity_id=data.get("related_entity_id"),
            is_read=bool(data.get("is_read")),
        )


@dataclass
class MatchDayFixtures:
    """Today's fixtures; the user's match is kept apart from the rest."""

    player_match: Optional[Match] = None
    ai_matches: List[Match] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_match": self.player_match.to_dict() if self.player_match else None,
            "ai_matches": [m.to_dict() for m in self.ai_matches],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchDayFixtures":
        player_match = data.get("player_match")
        return cls(
            player_match=Match.from_dict(player_match) if player_match else None,
            ai_matches=[Match.from_dict(m) for m in data.get("ai_matches", [])],
        )


@dataclass
class MatchDayResults:
    player_result: Optional[Match] = None
    ai_results: List[Match] = field(default_factory=list)

    @property
    def all_results(self) -> List[Match]:
        head = [self.player_result] if self.player_result else []
        return head + list(self.ai_results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_result": self.player_result.to_dict() if self.player_result else None,
            "ai_results": [m.to_dict() for m in self.ai_results],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchDayResults":
        player_result = data.get("player_result")
        return cls(
            player_result=Match.from_dict(player_result) if player_result else None,
            ai_results=[Match.from_dict(m) for m in data.get("ai_results", [])],
        )


@dataclass
class GameState:
    """The whole world. Lookups are by id; rosters are derived by filtering players on club_id."""

    current_date: date = date.min
    season: str = ""
    phase: SeasonPhase = SeasonPhase.PRE_SEASON
    seed: int | str = 0
    season_start: date = date.min
    promotion_spots: int = 2
    player_club_id: int | None = None
    divisions: Dict[int, Division] = field(default_factory=dict)
    clubs: Dict[int, Club] = field(default_factory=dict)
    players: Dict[int, Player] = field(default_factory=dict)
    staff: Dict[int, Staff] = field(default_factory=dict)
    schedule: List[Match] = field(default_factory=list)
    league_tables: Dict[int, List[LeagueEntry]] = field(default_factory=dict)
    news: List[NewsItem] = field(default_factory=list)
    next_match_id: int = 1
    next_news_id: int = 1
    # Transient UI slots
    match_day_fixtures: Optional[MatchDayFixtures] = None
    match_day_results: Optional[MatchDayResults] = None
    transfer_result: Optional[TransferResult] = None
    season_review: Optional[SeasonReviewData] = None
    intent_error: str | None = None

    def squad(self, club_id: int) -> List[Player]:
        """Players currently registered to *club_id*, ordered by id."""
        return sorted((p for p in self.players.values() if p.club_id == club_id), key=lambda p: p.id)

    def clubs_in_division(self, division_id: int) -> List[int]:
        return sorted(cid for cid, c in self.clubs.items() if c.division_id == division_id)

    def fixtures_on(self, day: date) -> List[Match]:
        return [m for m in self.schedule if m.date == day and not m.played]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_date": self.current_date.isoformat(),
            "season": self.season,
            "phase": self.phase.value,
            "seed": self.seed,
            "season_start": self.season_start.isoformat(),
            "promotion_spots": self.promotion_spots,
            "player_club_id": self.player_club_id,
            "divisions": {str(k): v.to_dict() for k, v in self.divisions.items()},
            "clubs": {str(k): v.to_dict() for k, v in self.clubs.items()},
            "players": {str(k): v.to_dict() for k, v in self.players.items()},
            "staff": {str(k): v.to_dict() for k, v in self.staff.items()},
            "schedule": [m.to_dict() for m in self.schedule],
            "league_tables": {str(k): [e.to_dict() for e in v] for k, v in self.league_tables.items()},
            "news": [n.to_dict() for n in self.news],
            "match_day_fixtures": self.match_day_fixtures.to_dict() if self.match_day_fixtures else None,
            "match_day_results": self.match_day_results.to_dict() if self.match_day_results else None,
            "transfer_result": self.transfer_result.to_dict() if self.transfer_result else None,
            "season_review": self.season_review.to_dict() if self.season_review else None,
            "intent_error": self.intent_error,
            "next_match_id": self.next_match_id,
            "next_news_id": self.next_news_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameState":
        """Rebuild a snapshot saved with ``to_dict`` (e.g. from JSON)."""
        fixtures = data.get("match_day_fixtures")
        results = data.get("match_day_results")
        transfer = data.get("transfer_result")
        review = data.get("season_review")
        return cls(
            current_date=date.fromisoformat(data["current_date"]),
            season=data.get("season", ""),
            phase=SeasonPhase(data.get("phase", SeasonPhase.PRE_SEASON.value)),
            seed=data.get("seed", 0),
            season_start=date.fromisoformat(data["season_start"]),
            promotion_spots=data.get("promotion_spots", 2),
            player_club_id=data.get("player_club_id"),
            divisions={int(k): Division.from_dict(v) for k, v in data.get("divisions", {}).items()},
            clubs={int(k): Club.from_dict(v) for k, v in data.get("clubs", {}).items()},
            players={int(k): Player.from_dict(v) for k, v in data.get("players", {}).items()},
            staff={int(k): Staff.from_dict(v) for k, v in data.get("staff", {}).items()},
            schedule=[Match.from_dict(m) for m in data.get("schedule", [])],
            league_tables={
                int(k): [LeagueEntry.from_dict(e) for e in v] for k, v in data.get("league_tables", {}).items()
            },
            news=[NewsItem.from_dict(n) for n in data.get("news", [])],
            next_match_id=data.get("next_match_id", 1),
            next_news_id=data.get("next_news_id", 1),
            match_day_fixtures=MatchDayFixtures.from_dict(fixtures) if fixtures else None,
            match_day_results=MatchDayResults.from_dict(results) if results else None,
            transfer_result=TransferResult.from_dict(transfer) if transfer else None,
            season_review=SeasonReviewData.from_dict(review) if review else None,
            intent_error=data.get("intent_error"),
        )
