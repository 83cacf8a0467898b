"""
World configuration: size of the league pyramid, squad bounds, calendar start
and the random seed.  ``from_env`` builds one from TOUCHLINE_* variables.
"""
import os
from dataclasses import dataclass
from datetime import date

from models.constants import DIVISION_NAMES, SQUAD_CATEGORY_MINIMUMS
from simulation.errors import ConfigurationError

ENV_PREFIX = "TOUCHLINE_"


@dataclass
class WorldConfig:
    num_divisions: int = 2
    clubs_per_division: int = 8
    squad_size_min: int = 18
    squad_size_max: int = 24
    season_start: date = date(2024, 8, 1)
    promotion_spots: int = 2
    seed: int | str | None = None

    def validate(self) -> "WorldConfig":
        """Raise ConfigurationError on a world that cannot be built. Returns self."""
        if not 1 <= self.num_divisions <= len(DIVISION_NAMES):
            raise ConfigurationError(f"num_divisions must be between 1 and {len(DIVISION_NAMES)}")
        if self.clubs_per_division < 2 or self.clubs_per_division % 2:
            raise ConfigurationError("clubs_per_division must be an even number of at least 2")
        needed = sum(SQUAD_CATEGORY_MINIMUMS.values())
        if self.squad_size_min < needed:
            raise ConfigurationError(f"squad_size_min must be at least {needed}")
        if self.squad_size_max < self.squad_size_min:
            raise ConfigurationError("squad_size_max is below squad_size_min")
        if self.promotion_spots < 0 or self.promotion_spots > self.clubs_per_division // 2:
            raise ConfigurationError("promotion_spots must be between 0 and half a division")
        return self

    @classmethod
    def from_env(cls, environ=None) -> "WorldConfig":
        env = os.environ if environ is None else environ

        def _int(name: str, default: int) -> int:
            raw = env.get(ENV_PREFIX + name)
            if raw is None or raw == "":
                return default
            try:
                return int(raw)
            except ValueError as exc:
                raise ConfigurationError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc

        defaults = cls()
        start = env.get(ENV_PREFIX + "SEASON_START")
        try:
            season_start = date.fromisoformat(start) if start else defaults.season_start
        except ValueError as exc:
            raise ConfigurationError(f"{ENV_PREFIX}SEASON_START must be YYYY-MM-DD, got {start!r}") from exc
        seed = env.get(ENV_PREFIX + "SEED") or None
        if seed is not None and seed.lstrip("-").isdigit():
            seed = int(seed)
        return cls(
            num_divisions=_int("NUM_DIVISIONS", defaults.num_divisions),
            clubs_per_division=_int("CLUBS_PER_DIVISION", defaults.clubs_per_division),
            squad_size_min=_int("SQUAD_SIZE_MIN", defaults.squad_size_min),
            squad_size_max=_int("SQUAD_SIZE_MAX", defaults.squad_size_max),
            season_start=season_start,
            promotion_spots=_int("PROMOTION_SPOTS", defaults.promotion_spots),
            seed=seed,
        ).validate()
