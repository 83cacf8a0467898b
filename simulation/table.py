"""
League table engine for Touchline.

Standings are a projection of played matches: recomputed from scratch, never
patched.  Ordering is points, goal difference, goals for (all descending),
then club id ascending, so there are no unresolved ties.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from models.constants import PRIZE_MONEY_BY_LEVEL, PRIZE_MONEY_DEFAULT
from models.game_state import LeagueEntry
from models.match import Match

POINTS_WIN = 3
POINTS_DRAW = 1
POINTS_LOSS = 0


@dataclass
class SeasonOutcome:
    champion_id: int | None = None
    promoted: list[int] = field(default_factory=list)
    relegated: list[int] = field(default_factory=list)


def sort_key(entry: LeagueEntry) -> tuple[int, int, int, int]:
    return (-entry.points, -entry.goal_difference, -entry.goals_for, entry.club_id)


def compute_table(club_ids: Iterable[int], played_matches: Iterable[Match]) -> list[LeagueEntry]:
    """Fold played matches between *club_ids* into ordered standings.

    Unplayed fixtures and matches involving clubs outside the division are ignored.
    """
    entries = {cid: LeagueEntry(club_id=cid) for cid in club_ids}
    for m in played_matches:
        if not m.played:
            continue
        home = entries.get(m.home_club_id)
        away = entries.get(m.away_club_id)
        if home is None or away is None:
            continue
        home.played += 1
        away.played += 1
        home.goals_for += m.home_score
        home.goals_against += m.away_score
        away.goals_for += m.away_score
        away.goals_against += m.home_score
        if m.home_score > m.away_score:
            home.wins += 1
            away.losses += 1
            home.points += POINTS_WIN
            away.points += POINTS_LOSS
        elif m.home_score < m.away_score:
            away.wins += 1
            home.losses += 1
            away.points += POINTS_WIN
            home.points += POINTS_LOSS
        else:
            home.draws += 1
            away.draws += 1
            home.points += POINTS_DRAW
            away.points += POINTS_DRAW
    return sorted(entries.values(), key=sort_key)


def points_awarded(table: Iterable[LeagueEntry]) -> int:
    return sum(e.points for e in table)


def resolve_season_end(
    table: list[LeagueEntry],
    *,
    promotion_spots: int,
    relegation_spots: int,
) -> SeasonOutcome:
    """Champion plus promotion/relegation windows taken from the ordered table.

    A window larger than the table takes as many entries as exist.  Relegation
    is drawn only from clubs outside the promotion window, so no club is in both.
    """
    if not table:
        return SeasonOutcome()
    promoted = [e.club_id for e in table[:max(0, promotion_spots)]]
    rest = table[len(promoted):]
    relegated = [e.club_id for e in rest[len(rest) - min(len(rest), max(0, relegation_spots)):]]
    return SeasonOutcome(champion_id=table[0].club_id, promoted=promoted, relegated=relegated)


def prize_money_for(position: int, table_size: int, level: int) -> int:
    """Prize for finishing *position* (1-based): the champion takes the full
    level prize, the bottom club a share of 1 / table_size."""
    if table_size <= 0 or not 1 <= position <= table_size:
        return 0
    top = PRIZE_MONEY_BY_LEVEL.get(level, PRIZE_MONEY_DEFAULT)
    share = (table_size - position + 1) / table_size
    return int(round(top * share / 1000) * 1000)
