"""
Lineup selection for Touchline.

AI clubs pick their best available eleven for a formation every match day;
the user's lineup is kept as chosen, except that unavailable or departed
players are swapped for the best available replacement.
"""
from __future__ import annotations

from datetime import date

from models.club import LineupPlayer, Tactics
from models.constants import BENCH_SIZE, DEFAULT_FORMATION, DEFAULT_MENTALITY, FORMATIONS, GK, LINEUP_SIZE
from models.player import Player
from models.ratings import compute_overall, compute_overall_in_role, role_category
from simulation.condition import is_available


def _slot_score(player: Player, role: str) -> float:
    return compute_overall_in_role(player.attributes, player.natural_role, role)


def _best_for_slot(role: str, candidates: list[Player]) -> Player | None:
    """Highest-rated candidate for *role*, preferring players of the role's category."""
    if not candidates:
        return None
    same = [p for p in candidates if p.category == role_category(role)]
    pool = same or candidates
    return max(pool, key=lambda p: (_slot_score(p, role), -p.id))


def _pick_bench(available: list[Player], lineup_ids: set[int]) -> list[int]:
    rest = [p for p in available if p.id not in lineup_ids]
    rest.sort(key=lambda p: (-compute_overall(p.attributes, p.category), p.id))
    bench: list[Player] = []
    keeper = next((p for p in rest if p.category == GK), None)
    if keeper is not None:
        bench.append(keeper)
    bench.extend(p for p in rest if p is not keeper)
    return [p.id for p in bench[:BENCH_SIZE]]


def select_best_xi(
    squad: list[Player],
    on_date: date,
    formation: str = DEFAULT_FORMATION,
    mentality: str = DEFAULT_MENTALITY,
) -> Tactics:
    """Best available eleven plus a bench of seven for *formation*.

    Injured and suspended players are never picked.  Slots are filled in
    formation order; when a category runs dry the slot takes the best
    remaining player from any category.
    """
    slots = FORMATIONS.get(formation) or FORMATIONS[DEFAULT_FORMATION]
    available = [p for p in sorted(squad, key=lambda p: p.id) if is_available(p, on_date)]
    remaining = list(available)
    lineup: list[LineupPlayer] = []
    for role, x, y in slots:
        pick = _best_for_slot(role, remaining)
        if pick is None:
            break
        remaining.remove(pick)
        lineup.append(LineupPlayer(player_id=pick.id, role=role, x=x, y=y))
    chosen = {lp.player_id for lp in lineup}
    return Tactics(formation=formation, mentality=mentality, lineup=lineup, bench=_pick_bench(available, chosen))


def repair_lineup(tactics: Tactics, squad: list[Player], on_date: date) -> Tactics:
    """The user's tactics with every unusable pick replaced.

    Players who left the club or are unavailable on *on_date* are swapped for
    the best available bench or squad player for that slot; empty slots are
    filled from the formation.  An empty lineup gets a full AI selection.
    """
    if not tactics.lineup:
        return select_best_xi(squad, on_date, tactics.formation, tactics.mentality)

    by_id = {p.id: p for p in squad}
    available = [p for p in sorted(squad, key=lambda p: p.id) if is_available(p, on_date)]
    usable_ids = {p.id for p in available}

    kept = {lp.player_id for lp in tactics.lineup if lp.player_id in usable_ids}
    bench_first = [by_id[pid] for pid in tactics.bench if pid in usable_ids and pid not in kept]
    others = [p for p in available if p.id not in kept and p not in bench_first]

    lineup: list[LineupPlayer] = []
    for lp in tactics.lineup:
        if lp.player_id in kept:
            lineup.append(lp)
            continue
        pick = _best_for_slot(lp.role, bench_first) or _best_for_slot(lp.role, others)
        if pick is None:
            continue
        (bench_first if pick in bench_first else others).remove(pick)
        lineup.append(LineupPlayer(player_id=pick.id, role=lp.role, x=lp.x, y=lp.y))

    slots = FORMATIONS.get(tactics.formation) or FORMATIONS[DEFAULT_FORMATION]
    for role, x, y in slots[len(lineup):LINEUP_SIZE]:
        pick = _best_for_slot(role, bench_first) or _best_for_slot(role, others)
        if pick is None:
            break
        (bench_first if pick in bench_first else others).remove(pick)
        lineup.append(LineupPlayer(player_id=pick.id, role=role, x=x, y=y))

    chosen = {lp.player_id for lp in lineup}
    bench = [p.id for p in bench_first if p.id not in chosen]
    if len(bench) < BENCH_SIZE:
        bench.extend(pid for pid in _pick_bench(available, chosen | set(bench)) if pid not in bench)
    return Tactics(
        formation=tactics.formation,
        mentality=tactics.mentality,
        lineup=lineup,
        bench=bench[:BENCH_SIZE],
    )
