"""
Match DTOs for Touchline.

PlayerMatchStats holds the stat line for a single player in a single match.
MatchStats holds aggregate team stats for one side.
MatchEvent is one entry of the play-by-play log.
Match is a fixture; it carries scores, stats, lineups and the log once played.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Any, List, Optional

from .club import LineupPlayer

# Event types in the play-by-play log
EVENT_INFO = "Info"
EVENT_GOAL = "Goal"
EVENT_CHANCE = "Chance"
EVENT_YELLOW = "YellowCard"
EVENT_RED = "RedCard"
EVENT_INJURY = "Injury"
EVENT_SUB = "Sub"


@dataclass
class PlayerMatchStats:
    """One player's line for a single match."""

    player_id: int = 0
    club_id: int = 0
    minutes: int = 0
    started: bool = True
    goals: int = 0
    assists: int = 0
    shots: int = 0
    key_passes: int = 0
    passes: int = 0
    tackles: int = 0
    dribbles: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    rating: float = 6.0

    def to_dict(self) -> Dict[str, Any]:
        return {k: getattr(self, k) for k in self.__dataclass_fields__}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerMatchStats":
        return cls(**{k: data.get(k, getattr(cls(), k)) for k in cls.__dataclass_fields__})


@dataclass
class MatchStats:
    """Aggregate stats for one side of a match."""

    shots: int = 0
    shots_on_target: int = 0
    possession: int = 50
    passes: int = 0
    pass_accuracy: int = 0
    tackles: int = 0
    fouls: int = 0
    corners: int = 0
    offsides: int = 0
    xg: float = 0.0
    big_chances: int = 0

    def to_dict(self) -> Dict[str, Any]:
        d = {k: getattr(self, k) for k in self.__dataclass_fields__}
        d["xg"] = round(self.xg, 2)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchStats":
        return cls(**{k: data.get(k, getattr(cls(), k)) for k in cls.__dataclass_fields__})


@dataclass
class MatchEvent:
    """One play-by-play entry. Minutes never decrease along the log."""

    minute: int = 0
    type: str = EVENT_INFO
    text: str = ""
    club_id: int | None = None
    primary_player_id: int | None = None
    secondary_player_id: int | None = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "minute": self.minute,
            "type": self.type,
            "text": self.text,
            "club_id": self.club_id,
            "primary_player_id": self.primary_player_id,
            "secondary_player_id": self.secondary_player_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchEvent":
        return cls(**{k: data.get(k, getattr(cls(), k)) for k in cls.__dataclass_fields__})


@dataclass
class InjuryRecord:
    """An injury sustained in (or right after) a match."""

    player_id: int = 0
    type: str = ""
    return_date: date = date.min

    def to_dict(self) -> Dict[str, Any]:
        return {"player_id": self.player_id, "type": self.type, "return_date": self.return_date.isoformat()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InjuryRecord":
        return cls(
            player_id=data.get("player_id", 0),
            type=data.get("type", ""),
            return_date=date.fromisoformat(data["return_date"]),
        )


@dataclass
class Match:
    """A fixture. Unplayed until home_score/away_score are set, which happens exactly once."""

    id: int = 0
    season: str = ""
    division_id: int = 0
    date: date = date.min
    home_club_id: int = 0
    away_club_id: int = 0
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    home_stats: Optional[MatchStats] = None
    away_stats: Optional[MatchStats] = None
    home_lineup: List[LineupPlayer] = field(default_factory=list)
    away_lineup: List[LineupPlayer] = field(default_factory=list)
    player_stats: Dict[int, PlayerMatchStats] = field(default_factory=dict)
    log: List[MatchEvent] = field(default_factory=list)
    disciplinary_events: List[Dict[str, Any]] = field(default_factory=list)  # {player_id, type: yellow|red}
    injury_events: List[InjuryRecord] = field(default_factory=list)

    @property
    def played(self) -> bool:
        return self.home_score is not None

    def involves(self, club_id: int | None) -> bool:
        return club_id is not None and club_id in (self.home_club_id, self.away_club_id)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "season": self.season,
            "division_id": self.division_id,
            "date": self.date.isoformat(),
            "home_club_id": self.home_club_id,
            "away_club_id": self.away_club_id,
            "played": self.played,
        }
        if self.played:
            d.update({
                "home_score": self.home_score,
                "away_score": self.away_score,
                "home_stats": self.home_stats.to_dict() if self.home_stats else None,
                "away_stats": self.away_stats.to_dict() if self.away_stats else None,
                "home_lineup": [lp.to_dict() for lp in self.home_lineup],
                "away_lineup": [lp.to_dict() for lp in self.away_lineup],
                "player_stats": {str(pid): ps.to_dict() for pid, ps in self.player_stats.items()},
                "log": [e.to_dict() for e in self.log],
                "disciplinary_events": [dict(e) for e in self.disciplinary_events],
                "injury_events": [e.to_dict() for e in self.injury_events],
            })
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Match":
        home_stats = data.get("home_stats")
        away_stats = data.get("away_stats")
        return cls(
            id=data.get("id", 0),
            season=data.get("season", ""),
            division_id=data.get("division_id", 0),
            date=date.fromisoformat(data["date"]),
            home_club_id=data.get("home_club_id", 0),
            away_club_id=data.get("away_club_id", 0),
            home_score=data.get("home_score"),
            away_score=data.get("away_score"),
            home_stats=MatchStats.from_dict(home_stats) if home_stats else None,
            away_stats=MatchStats.from_dict(away_stats) if away_stats else None,
            home_lineup=[LineupPlayer.from_dict(lp) for lp in data.get("home_lineup", [])],
            away_lineup=[LineupPlayer.from_dict(lp) for lp in data.get("away_lineup", [])],
            player_stats={
                int(pid): PlayerMatchStats.from_dict(ps) for pid, ps in data.get("player_stats", {}).items()
            },
            log=[MatchEvent.from_dict(e) for e in data.get("log", [])],
            disciplinary_events=[dict(e) for e in data.get("disciplinary_events", [])],
            injury_events=[InjuryRecord.from_dict(e) for e in data.get("injury_events", [])],
        )
