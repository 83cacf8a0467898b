"""
Division DTO for Touchline.
Divisions are ranked by level (1 = top flight); promotion and relegation move clubs between adjacent levels.
"""
from dataclasses import dataclass
from typing import Dict, Any


@dataclass
class Division:
    """A league division (e.g. Premier Division, Championship)."""

    id: int = 0
    name: str = ""
    level: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "level": self.level}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Division":
        return cls(
            id=data.get("id", 0),
            name=data.get("name", ""),
            level=data.get("level", 1),
        )
