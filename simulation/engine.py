"""
Match engine for Touchline.

Simulates one fixture between two team sheets, producing a score, a
play-by-play log, per-player stats and ratings, and team stats.  Key design
goals:

1. **Attribute-driven**: Team strength comes from role-weighted overall
   ratings, positional familiarity, fitness and morale (``FormStrength``).
   Each side's expected goals follow from its attack against the opponent's
   defence, home advantage and mentality.
2. **Consistent xG**: Play runs minute by minute.  Every shot carries its own
   xG value and scores with exactly that probability, so recorded xG and
   realised goals agree in expectation over many matches.
3. **Deterministic**: All randomness comes from the injected
   ``random.Random``; same inputs plus same seed give the same result.
4. **Condition-aware**: Every player who featured gets one history increment
   and one ``apply_match_load`` call.
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field, replace

from models.club import Tactics
from models.constants import GK, DEF, MID, FWD, LINEUP_SIZE, MAX_SUBSTITUTIONS
from models.match import (
    Match,
    MatchEvent,
    MatchStats,
    PlayerMatchStats,
    InjuryRecord,
    EVENT_INFO,
    EVENT_GOAL,
    EVENT_CHANCE,
    EVENT_YELLOW,
    EVENT_RED,
    EVENT_INJURY,
    EVENT_SUB,
)
from models.player import Player, PlayerSeasonStats
from models.ratings import compute_overall_in_role, role_category
from simulation.condition import apply_match_load
from simulation.errors import InvariantViolation

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tuning constants
# ---------------------------------------------------------------------------
BASE_XG = 1.35
STRENGTH_SCALE = 15.0
HOME_ADVANTAGE = 1.10
XG_MIN = 0.15
XG_MAX = 4.5
SHOT_XG = 0.11                # mean xG of a single shot
SHOT_XG_CAP = 0.8
BIG_CHANCE_XG = 0.3
ON_TARGET_IF_MISSED = 0.35
ASSIST_PROBABILITY = 0.75
MAN_DOWN_PENALTY = 0.15       # per player sent off
FOUL_RATE = 0.12              # per side per minute
YELLOW_PER_FOUL = 0.15
STRAIGHT_RED_PER_FOUL = 0.006
INJURY_HAZARD = 0.00008       # per player per minute
PLANNED_SUB_WINDOW = (60, 85)
MATCH_MINUTES = 90
HALF_TIME = 45

MENTALITY_ATTACK: dict[str, float] = {"Defensive": 0.85, "Balanced": 1.0, "Offensive": 1.15}
MENTALITY_CONCEDE: dict[str, float] = {"Defensive": 0.85, "Balanced": 1.0, "Offensive": 1.12}

# How much each slot category feeds each unit of FormStrength
ATTACK_WEIGHTS: dict[str, float] = {GK: 0.0, DEF: 0.1, MID: 0.35, FWD: 0.55}
MIDFIELD_WEIGHTS: dict[str, float] = {GK: 0.0, DEF: 0.2, MID: 0.6, FWD: 0.2}
DEFENCE_WEIGHTS: dict[str, float] = {GK: 0.3, DEF: 0.5, MID: 0.15, FWD: 0.05}

# Who ends up on the end of chances, making them, and winning the ball
SHOOTER_WEIGHTS: dict[str, float] = {GK: 0.0, DEF: 0.15, MID: 0.6, FWD: 1.6}
CREATOR_WEIGHTS: dict[str, float] = {GK: 0.02, DEF: 0.3, MID: 1.0, FWD: 0.8}
TACKLE_WEIGHTS: dict[str, float] = {GK: 0.05, DEF: 1.6, MID: 1.0, FWD: 0.3}
DRIBBLE_WEIGHTS: dict[str, float] = {GK: 0.0, DEF: 0.3, MID: 0.9, FWD: 1.4}
PASS_WEIGHTS: dict[str, float] = {GK: 0.4, DEF: 1.0, MID: 1.5, FWD: 0.7}


# ===================================================================
# Helper utilities
# ===================================================================

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _weighted_partition(
    total: int,
    weights: list[float],
    rng: random.Random,
    noise: float = 0.04,
) -> list[int]:
    """Split *total* into ``len(weights)`` non-negative ints that sum to
    *total*, roughly proportional to *weights* with small Gaussian noise.

    The noise parameter controls how much randomness is injected (0 = exact
    proportional split, 0.04 = slight match-to-match variance).
    """
    n = len(weights)
    if n == 0:
        return []
    if total <= 0:
        return [0] * n

    w_sum = sum(weights)
    if w_sum <= 0:
        weights = [1.0] * n
        w_sum = float(n)

    noisy = [max(0.001, w / w_sum + rng.gauss(0, noise)) for w in weights]
    n_sum = sum(noisy)

    raw = [total * (nw / n_sum) for nw in noisy]
    result = [max(0, int(r)) for r in raw]

    # Distribute rounding remainder to the highest-weighted slots
    remainder = total - sum(result)
    if remainder != 0:
        indices = sorted(range(n), key=lambda i: noisy[i], reverse=True)
        step = 1 if remainder > 0 else -1
        for i in range(abs(remainder)):
            idx = indices[i % n]
            result[idx] = max(0, result[idx] + step)

    diff = total - sum(result)
    if diff != 0:
        idx = max(range(n), key=lambda i: result[i])
        result[idx] = max(0, result[idx] + diff)

    return result


# ===================================================================
# Form strength
# ===================================================================

@dataclass
class FormStrength:
    """Condensed strength of one eleven (roughly 0-99 per unit)."""

    attack: float = 30.0
    midfield: float = 30.0
    defence: float = 30.0
    overall: float = 30.0


def player_match_value(player: Player, role: str) -> float:
    """A player's effective quality in *role* today: familiarity, fitness and morale applied."""
    base = compute_overall_in_role(player.attributes, player.natural_role, role)
    fitness_factor = 0.75 + 0.25 * player.match_fitness / 100.0
    morale_factor = 0.9 + 0.2 * player.morale / 100.0
    return base * fitness_factor * morale_factor


def compute_form_strength(
    players: dict[int, Player],
    tactics: Tactics,
    bonus: float = 0.0,
) -> FormStrength:
    """Derive unit strengths from the starting eleven in *tactics*.

    *bonus* is a small additive boost (from the assistant manager).  A short
    lineup is scaled down by the share of the eleven actually present.
    """
    slots = [(players[lp.player_id], lp.role) for lp in tactics.lineup if lp.player_id in players]
    if not slots:
        return FormStrength(0.0, 0.0, 0.0, 0.0)

    coverage = min(1.0, len(slots) / LINEUP_SIZE)
    values = [(player_match_value(p, role), role_category(role)) for p, role in slots]

    def unit(weights: dict[str, float]) -> float:
        w_sum = sum(weights[cat] for _, cat in values)
        if w_sum <= 0:
            return 0.0
        mean = sum(v * weights[cat] for v, cat in values) / w_sum
        return _clamp(mean * coverage + bonus, 0, 99)

    attack = unit(ATTACK_WEIGHTS)
    midfield = unit(MIDFIELD_WEIGHTS)
    defence = unit(DEFENCE_WEIGHTS)
    return FormStrength(attack, midfield, defence, (attack + midfield + defence) / 3.0)


def expected_goals(
    attacking: FormStrength,
    defending: FormStrength,
    *,
    attacking_mentality: str,
    defending_mentality: str,
    home: bool,
) -> float:
    """Expected goals for one side: BASE_XG * exp((attack - opp defence) / SCALE),
    nudged by midfield control, home advantage and both mentalities."""
    xg = BASE_XG * math.exp((attacking.attack - defending.defence) / STRENGTH_SCALE)
    xg *= math.exp((attacking.midfield - defending.midfield) / (4 * STRENGTH_SCALE))
    if home:
        xg *= HOME_ADVANTAGE
    xg *= MENTALITY_ATTACK.get(attacking_mentality, 1.0)
    xg *= MENTALITY_CONCEDE.get(defending_mentality, 1.0)
    return _clamp(xg, XG_MIN, XG_MAX)


# ===================================================================
# Team sheets and in-match state
# ===================================================================

@dataclass
class TeamSheet:
    """Everything the engine needs about one side.

    ``players`` holds the matchday squad (starters plus bench) by id.
    """

    club_id: int
    name: str
    tactics: Tactics
    players: dict[int, Player]
    strength: FormStrength
    physio_quality: int = 50


@dataclass
class MatchResult:
    match: Match
    players: dict[int, Player] = field(default_factory=dict)  # everyone who featured


@dataclass
class _OnPitch:
    player: Player
    role: str
    stamina: float
    entered: int = 0
    left: int | None = None
    yellows: int = 0

    @property
    def category(self) -> str:
        return role_category(self.role)


@dataclass
class _Side:
    sheet: TeamSheet
    is_home: bool
    xg_rate: float
    active: list[_OnPitch]
    bench: list[Player]
    sub_minutes: list[int]
    starting_count: int
    featured: dict[int, _OnPitch] = field(default_factory=dict)
    pstats: dict[int, PlayerMatchStats] = field(default_factory=dict)
    stats: MatchStats = field(default_factory=MatchStats)
    goals: int = 0
    subs_made: int = 0

    @property
    def men_down(self) -> int:
        return max(0, self.starting_count - len(self.active))


def _build_side(sheet: TeamSheet, xg_rate: float, is_home: bool, rng: random.Random) -> _Side:
    active: list[_OnPitch] = []
    seen: set[int] = set()
    for lp in sheet.tactics.lineup:
        if __debug__ and lp.player_id in seen:
            raise InvariantViolation(f"player {lp.player_id} listed twice in lineup of club {sheet.club_id}")
        seen.add(lp.player_id)
        player = sheet.players.get(lp.player_id)
        if player is None:
            continue
        active.append(_OnPitch(player=player, role=lp.role, stamina=float(player.match_fitness)))
    bench = [sheet.players[pid] for pid in sheet.tactics.bench if pid in sheet.players and pid not in seen]
    planned = min(len(bench), MAX_SUBSTITUTIONS - 1)
    sub_minutes = sorted(rng.sample(range(PLANNED_SUB_WINDOW[0], PLANNED_SUB_WINDOW[1] + 1), planned))
    side = _Side(
        sheet=sheet,
        is_home=is_home,
        xg_rate=xg_rate,
        active=active,
        bench=bench,
        sub_minutes=sub_minutes,
        starting_count=len(active),
    )
    for op in active:
        side.featured[op.player.id] = op
        side.pstats[op.player.id] = PlayerMatchStats(player_id=op.player.id, club_id=sheet.club_id, started=True)
    return side


def _pick(candidates: list[_OnPitch], weights: list[float], rng: random.Random) -> _OnPitch:
    if sum(weights) <= 0:
        weights = [1.0] * len(candidates)
    return rng.choices(candidates, weights=weights, k=1)[0]


# ===================================================================
# Minute events
# ===================================================================

def _substitute(
    side: _Side,
    out: _OnPitch,
    minute: int,
    log: list[MatchEvent],
    *,
    reason: str,
) -> bool:
    """Replace *out* with the best-fitting bench player. Returns False if none can come on."""
    if not side.bench or side.subs_made >= MAX_SUBSTITUTIONS:
        return False
    same = [p for p in side.bench if p.category == out.category]
    incoming = (same or side.bench)[0]
    side.bench.remove(incoming)
    out.left = minute
    new = _OnPitch(player=incoming, role=out.role, stamina=float(incoming.match_fitness), entered=minute)
    side.active[side.active.index(out)] = new
    side.featured[incoming.id] = new
    side.pstats[incoming.id] = PlayerMatchStats(player_id=incoming.id, club_id=side.sheet.club_id, started=False)
    side.subs_made += 1
    log.append(MatchEvent(
        minute=minute,
        type=EVENT_SUB,
        text=f"{reason} for {side.sheet.name}: {incoming.name} replaces {out.player.name}.",
        club_id=side.sheet.club_id,
        primary_player_id=incoming.id,
        secondary_player_id=out.player.id,
    ))
    return True


def _remove(side: _Side, op: _OnPitch, minute: int) -> None:
    op.left = minute
    side.active.remove(op)


def _shot(side: _Side, minute: int, log: list[MatchEvent], rng: random.Random) -> None:
    outfield = side.active
    shooter = _pick(
        outfield,
        [SHOOTER_WEIGHTS[op.category] * op.player.attributes.get("shooting", 50) / 50.0 for op in outfield],
        rng,
    )
    q = min(SHOT_XG_CAP, rng.expovariate(1.0 / SHOT_XG))
    side.stats.shots += 1
    side.stats.xg += q
    if q > BIG_CHANCE_XG:
        side.stats.big_chances += 1
    side.pstats[shooter.player.id].shots += 1

    creator = None
    others = [op for op in side.active if op is not shooter]
    if others and rng.random() < ASSIST_PROBABILITY:
        creator = _pick(
            others,
            [
                CREATOR_WEIGHTS[op.category]
                * (op.player.attributes.get("passing", 50) + op.player.attributes.get("creativity", 50)) / 100.0
                for op in others
            ],
            rng,
        )
        side.pstats[creator.player.id].key_passes += 1

    if rng.random() < q:
        side.goals += 1
        side.stats.shots_on_target += 1
        side.pstats[shooter.player.id].goals += 1
        text = f"GOAL! {shooter.player.name} scores for {side.sheet.name}"
        if creator is not None:
            side.pstats[creator.player.id].assists += 1
            text += f", set up by {creator.player.name}"
        log.append(MatchEvent(
            minute=minute,
            type=EVENT_GOAL,
            text=text + ".",
            club_id=side.sheet.club_id,
            primary_player_id=shooter.player.id,
            secondary_player_id=creator.player.id if creator else None,
        ))
        return

    if rng.random() < ON_TARGET_IF_MISSED:
        side.stats.shots_on_target += 1
    if q > BIG_CHANCE_XG:
        log.append(MatchEvent(
            minute=minute,
            type=EVENT_CHANCE,
            text=f"Huge chance for {side.sheet.name}, but {shooter.player.name} can't convert.",
            club_id=side.sheet.club_id,
            primary_player_id=shooter.player.id,
        ))


def _foul(side: _Side, minute: int, log: list[MatchEvent], rng: random.Random) -> None:
    offender = _pick(side.active, [op.player.attributes.get("aggression", 50) for op in side.active], rng)
    side.stats.fouls += 1
    aggression = offender.player.attributes.get("aggression", 50)
    pid = offender.player.id
    if rng.random() < STRAIGHT_RED_PER_FOUL:
        side.pstats[pid].red_cards += 1
        log.append(MatchEvent(minute=minute, type=EVENT_RED, club_id=side.sheet.club_id, primary_player_id=pid,
                              text=f"Straight red card! {offender.player.name} is sent off."))
        _remove(side, offender, minute)
        return
    if rng.random() < YELLOW_PER_FOUL * (0.6 + aggression / 125.0):
        offender.yellows += 1
        side.pstats[pid].yellow_cards += 1
        log.append(MatchEvent(minute=minute, type=EVENT_YELLOW, club_id=side.sheet.club_id, primary_player_id=pid,
                              text=f"{offender.player.name} is booked."))
        if offender.yellows >= 2:
            side.pstats[pid].red_cards += 1
            log.append(MatchEvent(minute=minute, type=EVENT_RED, club_id=side.sheet.club_id, primary_player_id=pid,
                                  text=f"Second yellow! {offender.player.name} is sent off."))
            _remove(side, offender, minute)


def _injuries(side: _Side, minute: int, log: list[MatchEvent], rng: random.Random) -> None:
    for op in list(side.active):
        hazard = INJURY_HAZARD * (1.0 + (100.0 - op.stamina) / 50.0)
        if rng.random() >= hazard:
            continue
        log.append(MatchEvent(minute=minute, type=EVENT_INJURY, club_id=side.sheet.club_id,
                              primary_player_id=op.player.id,
                              text=f"{op.player.name} goes down injured and can't continue."))
        if not _substitute(side, op, minute, log, reason="Forced substitution"):
            _remove(side, op, minute)


def _drain(side: _Side) -> None:
    for op in side.active:
        endurance = (op.player.attributes.get("stamina", 50) + op.player.attributes.get("natural_fitness", 50)) / 198.0
        op.stamina = max(0.0, op.stamina - 0.12 * (1.2 - 0.4 * endurance))


# ===================================================================
# Full-time: team stats, ratings, player updates
# ===================================================================

def _team_stats(side: _Side, opp: _Side, possession: int, rng: random.Random) -> None:
    s = side.stats
    s.possession = possession
    s.passes = max(0, round(possession * rng.uniform(8.0, 11.0)))
    mid_diff = side.sheet.strength.midfield - opp.sheet.strength.midfield
    s.pass_accuracy = int(_clamp(round(76 + mid_diff * 0.5 + rng.gauss(0, 3)), 55, 93))
    s.tackles = max(0, round(rng.uniform(12, 22) * (100 - possession) / 50.0))
    s.corners = max(0, round(s.shots * 0.4 + rng.gauss(0, 1)))
    s.offsides = rng.randint(0, 4)

    ids = list(side.featured)
    minutes = [side.pstats[pid].minutes or 1 for pid in ids]

    def split(total: int, weights_by_cat: dict[str, float], attr: str) -> list[int]:
        w = [
            weights_by_cat[side.featured[pid].category] * side.featured[pid].player.attributes.get(attr, 50)
            * minutes[i] / 90.0
            for i, pid in enumerate(ids)
        ]
        return _weighted_partition(total, w, rng)

    completed = round(s.passes * s.pass_accuracy / 100.0)
    dribbles = max(0, round(rng.uniform(5, 15) * (0.8 + possession / 250.0)))
    for pid, passes, tackles, drib in zip(
        ids,
        split(completed, PASS_WEIGHTS, "passing"),
        split(s.tackles, TACKLE_WEIGHTS, "tackling"),
        split(dribbles, DRIBBLE_WEIGHTS, "dribbling"),
    ):
        ps = side.pstats[pid]
        ps.passes, ps.tackles, ps.dribbles = passes, tackles, drib


def _rating(ps: PlayerMatchStats, category: str, goals_for: int, goals_against: int, rng: random.Random) -> float:
    r = 6.0 + 1.0 * ps.goals + 0.6 * ps.assists + 0.15 * ps.key_passes + 0.05 * ps.tackles + 0.1 * ps.dribbles
    if goals_for > goals_against:
        r += 0.3
    elif goals_for < goals_against:
        r -= 0.3
    if category in (GK, DEF):
        if goals_against == 0 and ps.minutes >= 60:
            r += 0.5
        r -= 0.15 * goals_against
    r -= 0.3 * ps.yellow_cards + 1.5 * ps.red_cards
    r += rng.gauss(0, 0.35)
    return round(_clamp(r, 1.0, 10.0), 1)


def _record_history(player: Player, ps: PlayerMatchStats, club_id: int, season: str) -> Player:
    """One history increment for this appearance; a sealed entry is never written."""
    history = list(player.history)
    idx = next((i for i in range(len(history) - 1, -1, -1) if history[i].season == season), None)
    if idx is None:
        history.append(PlayerSeasonStats(season=season, club_id=club_id))
        idx = len(history) - 1
    entry = history[idx]
    if __debug__ and entry.sealed:
        raise InvariantViolation(f"player {player.id}: history entry for {season} is sealed")
    history[idx] = replace(
        entry,
        club_id=club_id,
        apps=entry.apps + 1,
        sub_on=entry.sub_on + (0 if ps.started else 1),
        goals=entry.goals + ps.goals,
        assists=entry.assists + ps.assists,
        shots=entry.shots + ps.shots,
        tackles=entry.tackles + ps.tackles,
        yellow_cards=entry.yellow_cards + ps.yellow_cards,
        red_cards=entry.red_cards + ps.red_cards,
        rating_points=entry.rating_points + ps.rating,
    )
    return replace(player, history=history)


# ===================================================================
# Public API
# ===================================================================

def simulate_match(
    fixture: Match,
    home: TeamSheet,
    away: TeamSheet,
    rng: random.Random,
    *,
    season: str,
) -> MatchResult:
    """Simulate a single fixture between two team sheets.

    Parameters
    ----------
    fixture : Match
        The unplayed fixture.
    home, away : TeamSheet
        Matchday squads, tactics and precomputed strengths.
    rng : random.Random
        The only source of randomness.
    season : str
        Season label whose history entries receive this match.

    Returns
    -------
    MatchResult
        The played match and the updated players who featured.
    """
    if __debug__ and fixture.played:
        raise InvariantViolation(f"match {fixture.id} has already been played")

    home_xg = expected_goals(home.strength, away.strength, attacking_mentality=home.tactics.mentality,
                             defending_mentality=away.tactics.mentality, home=True)
    away_xg = expected_goals(away.strength, home.strength, attacking_mentality=away.tactics.mentality,
                             defending_mentality=home.tactics.mentality, home=False)
    h = _build_side(home, home_xg, True, rng)
    a = _build_side(away, away_xg, False, rng)

    log: list[MatchEvent] = [MatchEvent(minute=0, type=EVENT_INFO, text=f"Kick-off: {home.name} v {away.name}.")]

    for minute in range(1, MATCH_MINUTES + 1):
        for side in (h, a):
            if not side.active:
                continue
            rate = side.xg_rate * max(0.2, 1.0 - MAN_DOWN_PENALTY * side.men_down)
            if rng.random() < rate / (MATCH_MINUTES * SHOT_XG):
                _shot(side, minute, log, rng)
            if side.active and rng.random() < FOUL_RATE:
                _foul(side, minute, log, rng)
            _injuries(side, minute, log, rng)
            outfield = [op for op in side.active if op.category != GK]
            if minute in side.sub_minutes and outfield:
                tired = min(outfield, key=lambda op: (op.stamina, op.player.id))
                _substitute(side, tired, minute, log, reason="Substitution")
            _drain(side)
        if minute == HALF_TIME:
            log.append(MatchEvent(minute=minute, type=EVENT_INFO,
                                  text=f"Half-time: {home.name} {h.goals}-{a.goals} {away.name}."))
    log.append(MatchEvent(minute=MATCH_MINUTES, type=EVENT_INFO,
                          text=f"Full-time: {home.name} {h.goals}-{a.goals} {away.name}."))

    # Possession and distributed team stats
    mid_diff = home.strength.midfield - away.strength.midfield
    home_possession = int(_clamp(round(50 + mid_diff * 1.2 + rng.gauss(0, 3)), 30, 70))
    for side, opp, pos in ((h, a, home_possession), (a, h, 100 - home_possession)):
        for pid, op in side.featured.items():
            side.pstats[pid].minutes = max(0, (op.left if op.left is not None else MATCH_MINUTES) - op.entered)
        _team_stats(side, opp, pos, rng)

    # Ratings, history, condition
    updated: dict[int, Player] = {}
    injury_records: list[InjuryRecord] = []
    for side, goals_for, goals_against in ((h, h.goals, a.goals), (a, a.goals, h.goals)):
        for pid, op in side.featured.items():
            ps = side.pstats[pid]
            ps.rating = _rating(ps, op.category, goals_for, goals_against, rng)
            player = _record_history(op.player, ps, side.sheet.club_id, season)
            before = player.injury
            player = apply_match_load(
                player,
                ps.minutes,
                log,
                match_date=fixture.date,
                rng=rng,
                physio_quality=side.sheet.physio_quality,
            )
            if player.injury is not None and player.injury is not before:
                injury_records.append(InjuryRecord(player.id, player.injury.type, player.injury.return_date))
            updated[pid] = player

    disciplinary = [
        {"player_id": e.primary_player_id, "type": "yellow" if e.type == EVENT_YELLOW else "red"}
        for e in log
        if e.type in (EVENT_YELLOW, EVENT_RED)
    ]
    player_stats = {pid: ps for side in (h, a) for pid, ps in side.pstats.items()}

    match = replace(
        fixture,
        home_score=h.goals,
        away_score=a.goals,
        home_stats=h.stats,
        away_stats=a.stats,
        home_lineup=list(home.tactics.lineup),
        away_lineup=list(away.tactics.lineup),
        player_stats=player_stats,
        log=log,
        disciplinary_events=disciplinary,
        injury_events=injury_records,
    )
    logger.debug(
        "match %d: %s %d-%d %s (xG %.2f-%.2f)",
        match.id, home.name, h.goals, a.goals, away.name, h.stats.xg, a.stats.xg,
    )
    return MatchResult(match=match, players=updated)
