"""
Player DTO for Touchline.
Attributes are 1-99; morale and match fitness are 0-100. History holds one
PlayerSeasonStats per season; entries are sealed when their season ends.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Any, List, Optional

from .ratings import role_category


def _parse_date(value: Any) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


@dataclass
class Injury:
    """An active injury: type from the injury catalog plus expected return date."""

    type: str = ""
    return_date: date = date.min

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "return_date": self.return_date.isoformat()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Injury":
        return cls(type=data.get("type", ""), return_date=_parse_date(data["return_date"]))


@dataclass
class Suspension:
    """An active ban. The player is available again on return_date."""

    return_date: date = date.min
    matches: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"return_date": self.return_date.isoformat(), "matches": self.matches}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Suspension":
        return cls(return_date=_parse_date(data["return_date"]), matches=data.get("matches", 1))


@dataclass
class PlayerSeasonStats:
    """A player's aggregated on-pitch statistics for one season."""

    season: str = ""
    club_id: int = 0
    apps: int = 0
    sub_on: int = 0
    goals: int = 0
    assists: int = 0
    shots: int = 0
    tackles: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    rating_points: float = 0.0  # sum of match ratings
    sealed: bool = False

    @property
    def average_rating(self) -> float:
        return self.rating_points / self.apps if self.apps else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "season": self.season,
            "club_id": self.club_id,
            "apps": self.apps,
            "sub_on": self.sub_on,
            "goals": self.goals,
            "assists": self.assists,
            "shots": self.shots,
            "tackles": self.tackles,
            "yellow_cards": self.yellow_cards,
            "red_cards": self.red_cards,
            "rating_points": round(self.rating_points, 2),
            "sealed": self.sealed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerSeasonStats":
        return cls(**{k: data.get(k, getattr(cls(), k)) for k in cls.__dataclass_fields__})


@dataclass
class Player:
    """A player. Belongs to at most one club at a time through club_id."""

    id: int = 0
    club_id: int = 0
    name: str = ""
    age: int = 0
    nationality: str = ""
    natural_role: str = ""
    attributes: Dict[str, int] = field(default_factory=dict)
    potential: int = 0  # 1-99
    wage: int = 0  # weekly
    contract_expires: date = date.min
    market_value: int = 0
    morale: int = 70  # 0-100
    match_fitness: int = 100  # 0-100
    injury: Optional[Injury] = None
    suspension: Optional[Suspension] = None
    season_yellow_cards: int = 0
    history: List[PlayerSeasonStats] = field(default_factory=list)

    @property
    def category(self) -> str:
        return role_category(self.natural_role)

    def current_season_stats(self, season: str) -> PlayerSeasonStats | None:
        """The open (unsealed) history entry for *season*, if any."""
        for entry in reversed(self.history):
            if entry.season == season and not entry.sealed:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "club_id": self.club_id,
            "name": self.name,
            "age": self.age,
            "nationality": self.nationality,
            "natural_role": self.natural_role,
            "category": self.category,
            "attributes": dict(self.attributes),
            "potential": self.potential,
            "wage": self.wage,
            "contract_expires": self.contract_expires.isoformat(),
            "market_value": self.market_value,
            "morale": self.morale,
            "match_fitness": self.match_fitness,
            "injury": self.injury.to_dict() if self.injury else None,
            "suspension": self.suspension.to_dict() if self.suspension else None,
            "season_yellow_cards": self.season_yellow_cards,
            "history": [h.to_dict() for h in self.history],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        injury = data.get("injury")
        suspension = data.get("suspension")
        return cls(
            id=data.get("id", 0),
            club_id=data.get("club_id", 0),
            name=data.get("name", ""),
            age=data.get("age", 0),
            nationality=data.get("nationality", ""),
            natural_role=data.get("natural_role", ""),
            attributes=dict(data.get("attributes", {})),
            potential=data.get("potential", 0),
            wage=data.get("wage", 0),
            contract_expires=_parse_date(data.get("contract_expires")) or date.min,
            market_value=data.get("market_value", 0),
            morale=data.get("morale", 70),
            match_fitness=data.get("match_fitness", 100),
            injury=Injury.from_dict(injury) if injury else None,
            suspension=Suspension.from_dict(suspension) if suspension else None,
            season_yellow_cards=data.get("season_yellow_cards", 0),
            history=[PlayerSeasonStats.from_dict(h) for h in data.get("history", [])],
        )
