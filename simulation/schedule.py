"""
Round-robin schedule generation for Touchline.

Each division plays a double round-robin: every pair meets twice, once at
each venue.  The circle method guarantees every club plays exactly once per
round.  All divisions share the same calendar: round 1 is one week after the
season start, then one round per week.
"""
from __future__ import annotations

import random
from datetime import date, timedelta

from models.constants import FIRST_ROUND_OFFSET_DAYS, DAYS_BETWEEN_ROUNDS
from models.match import Match
from simulation.errors import ConfigurationError


def generate_division_schedule(
    club_ids: list[int],
    rng: random.Random | None = None,
) -> list[tuple[int, int, int]]:
    """Generate a full double round-robin for one division.

    Parameters
    ----------
    club_ids : list[int]
        An even number (at least 2) of club ids.
    rng : random.Random | None
        Optional RNG; if given the initial ordering is shuffled so
        schedules differ across divisions even with the same seed.

    Returns
    -------
    list of (round, home_club_id, away_club_id)
        ``round`` is 1-indexed (1 through 2 * (n - 1)).
    """
    n = len(club_ids)
    if n < 2 or n % 2 != 0:
        raise ConfigurationError(f"round-robin needs an even number of clubs (got {n})")

    clubs = list(club_ids)
    if rng is not None:
        rng.shuffle(clubs)

    fixed = clubs[0]
    rotating = list(clubs[1:])
    num_rounds = n - 1

    first_half: list[tuple[int, int, int]] = []

    for round_idx in range(num_rounds):
        rnd = round_idx + 1
        pairs: list[tuple[int, int]] = []

        # Fixed club vs first rotating; alternate venue each round
        if round_idx % 2 == 0:
            pairs.append((fixed, rotating[0]))
        else:
            pairs.append((rotating[0], fixed))

        for i in range(1, n // 2):
            c1 = rotating[i]
            c2 = rotating[n - 1 - i]
            if i % 2 == 0:
                pairs.append((c1, c2))
            else:
                pairs.append((c2, c1))

        first_half.extend((rnd, home, away) for home, away in pairs)

        rotating = [rotating[-1]] + rotating[:-1]

    # Second half: same pairings with venues swapped
    second_half = [(rnd + num_rounds, away, home) for rnd, home, away in first_half]

    return first_half + second_half


def round_date(season_start: date, rnd: int) -> date:
    return season_start + timedelta(days=FIRST_ROUND_OFFSET_DAYS + DAYS_BETWEEN_ROUNDS * (rnd - 1))


def build_season_schedule(
    division_clubs: dict[int, list[int]],
    *,
    season: str,
    season_start: date,
    first_match_id: int,
    rng: random.Random | None = None,
) -> list[Match]:
    """Unplayed fixtures for every division, ordered by date then id.

    Match ids are allocated consecutively from *first_match_id*.
    """
    rows: list[tuple[int, int, int, int]] = []
    for division_id in sorted(division_clubs):
        for rnd, home, away in generate_division_schedule(division_clubs[division_id], rng):
            rows.append((rnd, division_id, home, away))
    rows.sort(key=lambda r: (r[0], r[1]))

    return [
        Match(
            id=first_match_id + i,
            season=season,
            division_id=division_id,
            date=round_date(season_start, rnd),
            home_club_id=home,
            away_club_id=away,
        )
        for i, (rnd, division_id, home, away) in enumerate(rows)
    ]
