"""
Club, tactics and staff DTOs for Touchline.
Clubs have name, reputation, balance and division; players point back to their club by id.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List

from .constants import DEFAULT_FORMATION, DEFAULT_MENTALITY, TRAINING_FOCUS_DEFAULT


@dataclass
class LineupPlayer:
    """One starting slot: the player, the role to play and the pitch position (0-100)."""

    player_id: int = 0
    role: str = ""
    x: int = 50
    y: int = 50

    def to_dict(self) -> Dict[str, Any]:
        return {"player_id": self.player_id, "role": self.role, "position": {"x": self.x, "y": self.y}}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineupPlayer":
        pos = data.get("position") or {}
        return cls(
            player_id=int(data.get("player_id", 0)),
            role=data.get("role", ""),
            x=int(pos.get("x", data.get("x", 50))),
            y=int(pos.get("y", data.get("y", 50))),
        )


@dataclass
class Tactics:
    """Formation, mentality, starting eleven and bench."""

    formation: str = DEFAULT_FORMATION
    mentality: str = DEFAULT_MENTALITY
    lineup: List[LineupPlayer] = field(default_factory=list)
    bench: List[int] = field(default_factory=list)

    @property
    def lineup_ids(self) -> List[int]:
        return [lp.player_id for lp in self.lineup]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "formation": self.formation,
            "mentality": self.mentality,
            "lineup": [lp.to_dict() for lp in self.lineup],
            "bench": list(self.bench),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tactics":
        return cls(
            formation=data.get("formation", DEFAULT_FORMATION),
            mentality=data.get("mentality", DEFAULT_MENTALITY),
            lineup=[LineupPlayer.from_dict(lp) for lp in data.get("lineup", [])],
            bench=[int(pid) for pid in data.get("bench", [])],
        )


@dataclass
class Staff:
    """A member of a club's backroom staff (assistant, physio or scout). Attributes 0-99."""

    id: int = 0
    club_id: int | None = None  # None if unemployed
    name: str = ""
    age: int = 0
    nationality: str = ""
    role: str = ""
    wage: int = 0
    attributes: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "club_id": self.club_id,
            "name": self.name,
            "age": self.age,
            "nationality": self.nationality,
            "role": self.role,
            "wage": self.wage,
            "attributes": dict(self.attributes),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Staff":
        return cls(
            id=data.get("id", 0),
            club_id=data.get("club_id"),
            name=data.get("name", ""),
            age=data.get("age", 0),
            nationality=data.get("nationality", ""),
            role=data.get("role", ""),
            wage=data.get("wage", 0),
            attributes=dict(data.get("attributes", {})),
        )


@dataclass
class Club:
    """A club in a division. The roster is every player whose club_id is this id."""

    id: int = 0
    name: str = ""
    country: str = ""
    reputation: int = 50  # 0-100
    balance: int = 0
    division_id: int = 0
    tactics: Tactics = field(default_factory=Tactics)
    training_focus: str = TRAINING_FOCUS_DEFAULT
    staff_ids: Dict[str, int] = field(default_factory=dict)  # role -> staff id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "reputation": self.reputation,
            "balance": self.balance,
            "division_id": self.division_id,
            "tactics": self.tactics.to_dict(),
            "training_focus": self.training_focus,
            "staff_ids": dict(self.staff_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Club":
        return cls(
            id=data.get("id", 0),
            name=data.get("name", ""),
            country=data.get("country", ""),
            reputation=data.get("reputation", 50),
            balance=data.get("balance", 0),
            division_id=data.get("division_id", 0),
            tactics=Tactics.from_dict(data.get("tactics") or {}),
            training_focus=data.get("training_focus", TRAINING_FOCUS_DEFAULT),
            staff_ids=dict(data.get("staff_ids", {})),
        )
