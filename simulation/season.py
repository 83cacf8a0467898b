"""
Season state machine for Touchline.

``reduce(state, intent)`` is the pure reducer: it never modifies *state* and
returns the next GameState.  Phases run
PRE_SEASON -> IN_SEASON -> SEASON_COMPLETE -> (new season) IN_SEASON.

Illegal intents raise IllegalIntent inside their handler; ``reduce`` logs
them and reports the reason through the ``intent_error`` slot, leaving the
world untouched.
"""
from __future__ import annotations

import logging
import random
from dataclasses import replace
from datetime import date, timedelta
from typing import Callable

from models.club import Club
from models.constants import (
    AWARD_MIN_APPEARANCES_SHARE,
    BENCH_SIZE,
    FORMATIONS,
    LINEUP_SIZE,
    MENTALITIES,
    ROLES,
    TRAINING_FOCUSES,
    YOUNG_PLAYER_MAX_AGE,
)
from models.game_state import (
    GameState,
    MatchDayFixtures,
    MatchDayResults,
    NewsItem,
    PlayerAward,
    SeasonPhase,
    SeasonReviewData,
)
from models.match import Match
from models.player import Player, PlayerSeasonStats
from simulation import news
from simulation.condition import (
    MoraleCause,
    apply_aging,
    apply_daily_recovery,
    apply_morale_shift,
    is_available,
)
from simulation.development import process_wages, renew_expiring_contracts, run_monthly_development
from simulation.engine import MatchResult, TeamSheet, compute_form_strength, simulate_match
from simulation.errors import IllegalIntent, InvariantViolation
from simulation.intents import (
    ADVANCE_DAY,
    CLEAR_INTENT_ERROR,
    CLEAR_MATCH_DAY_FIXTURES,
    CLEAR_MATCH_RESULTS,
    CLEAR_TRANSFER_RESULT,
    CRITICISE,
    MAKE_TRANSFER_OFFER,
    MARK_NEWS_AS_READ,
    PLAYER_INTERACTION,
    PRAISE,
    SELECT_PLAYER_CLUB,
    SET_TRAINING_FOCUS,
    START_NEW_SEASON,
    UPDATE_TACTICS,
    Intent,
)
from simulation.schedule import build_season_schedule
from simulation.table import SeasonOutcome, compute_table, prize_money_for, resolve_season_end
from simulation.tactics import repair_lineup, select_best_xi
from simulation.transfers import TransferOffer, apply_settlement, plan_ai_transfers, resolve_offer

logger = logging.getLogger(__name__)

ASSISTANT_BONUS_MAX = 3.0
DEFAULT_STAFF_QUALITY = 50


def season_label(start_year: int) -> str:
    return f"{start_year}/{start_year + 1}"


def _rng(state: GameState, purpose: str, key: int) -> random.Random:
    """Independent, reproducible stream per (world seed, purpose, key)."""
    return random.Random(f"{state.seed}:{purpose}:{key}")


def _add_news(state: GameState, items: list[NewsItem]) -> GameState:
    """Number *items* from the counter and put them at the top of the feed."""
    if not items:
        return state
    numbered = [replace(item, id=state.next_news_id + i) for i, item in enumerate(items)]
    return replace(
        state,
        news=list(reversed(numbered)) + state.news,
        next_news_id=state.next_news_id + len(numbered),
    )


def _require_phase(state: GameState, intent_type: str, *phases: SeasonPhase) -> None:
    if state.phase not in phases:
        raise IllegalIntent(intent_type, f"not allowed during {state.phase.value}")


def _require_user_club(state: GameState, intent_type: str) -> int:
    if state.player_club_id is None:
        raise IllegalIntent(intent_type, "no club has been selected yet")
    return state.player_club_id


def _staff_attribute(state: GameState, club: Club, role: str, attribute: str) -> int:
    member = state.staff.get(club.staff_ids.get(role, -1))
    if member is None:
        return DEFAULT_STAFF_QUALITY
    return member.attributes.get(attribute, DEFAULT_STAFF_QUALITY)


def _physio_quality(state: GameState, club_id: int | None) -> int:
    club = state.clubs.get(club_id)
    if club is None:
        return DEFAULT_STAFF_QUALITY
    return _staff_attribute(state, club, "physio", "physiotherapy")


def _fixtures_slot(state: GameState, day: date) -> MatchDayFixtures | None:
    fixtures = sorted(state.fixtures_on(day), key=lambda m: m.id)
    if not fixtures:
        return None
    user = next((m for m in fixtures if m.involves(state.player_club_id)), None)
    return MatchDayFixtures(player_match=user, ai_matches=[m for m in fixtures if m is not user])


def _recover(state: GameState, players: dict[int, Player], skip: set[int], today: date) -> dict[int, Player]:
    out = dict(players)
    for pid, p in players.items():
        if pid not in skip:
            out[pid] = apply_daily_recovery(p, today, physio_quality=_physio_quality(state, p.club_id))
    return out


# ===================================================================
# ADVANCE_DAY
# ===================================================================

def _team_sheet(state: GameState, club: Club) -> TeamSheet:
    ids = club.tactics.lineup_ids + list(club.tactics.bench)
    players = {pid: state.players[pid] for pid in ids if pid in state.players}
    tactical = _staff_attribute(state, club, "assistant", "tactical_knowledge")
    bonus = ASSISTANT_BONUS_MAX * tactical / 99.0
    return TeamSheet(
        club_id=club.id,
        name=club.name,
        tactics=club.tactics,
        players=players,
        strength=compute_form_strength(players, club.tactics, bonus),
        physio_quality=_physio_quality(state, club.id),
    )


def _pick_lineups(state: GameState, fixtures: list[Match]) -> GameState:
    """AI clubs get a fresh best eleven; the user's lineup is repaired."""
    today = state.current_date
    clubs = dict(state.clubs)
    playing = sorted({cid for m in fixtures for cid in (m.home_club_id, m.away_club_id)})
    for cid in playing:
        club = clubs[cid]
        squad = state.squad(cid)
        if cid == state.player_club_id:
            tactics = repair_lineup(club.tactics, squad, today)
        else:
            tactics = select_best_xi(squad, today, club.tactics.formation, club.tactics.mentality)
        clubs[cid] = replace(club, tactics=tactics)
    return replace(state, clubs=clubs)


def _result_cause(match: Match, club_id: int) -> MoraleCause:
    ours = match.home_score if club_id == match.home_club_id else match.away_score
    theirs = match.away_score if club_id == match.home_club_id else match.home_score
    if ours > theirs:
        return MoraleCause.WIN
    if ours < theirs:
        return MoraleCause.LOSS
    return MoraleCause.DRAW


def _recompute_tables(state: GameState, schedule: list[Match]) -> dict:
    return {
        div_id: compute_table(
            state.clubs_in_division(div_id),
            [m for m in schedule if m.division_id == div_id],
        )
        for div_id in sorted(state.divisions)
    }


def _play_match_day(state: GameState, fixtures: list[Match]) -> GameState:
    today = state.current_date
    if _month_turned(state, today):
        state = _monthly(state)
    state = _pick_lineups(state, fixtures)
    sheets = {cid: _team_sheet(state, state.clubs[cid]) for m in fixtures for cid in (m.home_club_id, m.away_club_id)}

    results: list[MatchResult] = []
    for fixture in sorted(fixtures, key=lambda m: m.id):
        rng = _rng(state, "match", fixture.id)
        results.append(simulate_match(
            fixture,
            sheets[fixture.home_club_id],
            sheets[fixture.away_club_id],
            rng,
            season=state.season,
        ))

    # Merge by fixture id
    played = {r.match.id: r.match for r in results}
    schedule = [played.get(m.id, m) for m in state.schedule]
    players = dict(state.players)
    featured: set[int] = set()
    for r in results:
        players.update(r.players)
        featured.update(r.players)

    # Morale: result for those who played, a knock for fit players left out
    for r in results:
        m = r.match
        for cid in (m.home_club_id, m.away_club_id):
            cause = _result_cause(m, cid)
            for p in [p for p in players.values() if p.club_id == cid]:
                if p.id in featured:
                    players[p.id] = apply_morale_shift(p, cause)
                elif is_available(p, today):
                    players[p.id] = apply_morale_shift(p, MoraleCause.DROPPED)

    # News
    user = state.player_club_id
    user_result = next((r.match for r in results if r.match.involves(user)), None)
    ai_results = [r.match for r in results if r.match is not user_result]
    items: list[NewsItem] = []
    if ai_results:
        items.append(news.round_summary(ai_results, state.clubs, today))
    if user_result is not None:
        items.append(news.match_report(user_result, user, state.clubs, today))
        for pid in sorted(featured):
            before, after = state.players[pid], players[pid]
            if after.club_id != user:
                continue
            if after.injury is not None and after.injury != before.injury:
                items.append(news.injury_report(after, today))
            if after.suspension is not None and after.suspension != before.suspension:
                items.append(news.suspension_report(after, today))

    next_day = today + timedelta(days=1)
    players = _recover(state, players, featured, next_day)

    state = replace(
        state,
        schedule=schedule,
        players=players,
        match_day_results=MatchDayResults(player_result=user_result, ai_results=ai_results),
        match_day_fixtures=None,
    )
    state = replace(state, league_tables=_recompute_tables(state, schedule))
    logger.info("%s: played %d fixtures", today.isoformat(), len(results))
    return _add_news(state, items)


def _month_turned(state: GameState, today: date) -> bool:
    """True on the first match day of a calendar month after the season's first round."""
    last = max((m.date for m in state.schedule if m.played), default=None)
    return last is not None and (last.year, last.month) != (today.year, today.month)


def _monthly(state: GameState) -> GameState:
    """Development, wages and AI transfer activity, once per month on its first match day."""
    rng = _rng(state, "month", state.current_date.toordinal())
    players = run_monthly_development(state.players, state.clubs, state.staff, rng)
    clubs = process_wages(state.clubs, players, state.staff)
    state = replace(state, players=players, clubs=clubs)

    items: list[NewsItem] = []
    for offer in plan_ai_transfers(state, rng):
        if offer.player_id not in state.players:
            continue
        decision = resolve_offer(state, offer)
        if not decision.accepted:
            logger.debug("AI bid rejected: %s", decision.result.message)
            continue
        seller = state.clubs[state.players[offer.player_id].club_id]
        state = apply_settlement(state, decision)
        items.append(news.transfer_completed(decision.player, seller, decision.buyer, decision.fee, state.current_date))
    logger.info("%s: monthly processing, %d AI transfers", state.current_date.isoformat(), len(items))
    return _add_news(state, items)


def _advance_day(state: GameState, intent: Intent) -> GameState:
    _require_phase(state, ADVANCE_DAY, SeasonPhase.IN_SEASON)
    today = state.current_date
    fixtures = state.fixtures_on(today)
    if fixtures:
        state = _play_match_day(state, fixtures)
    else:
        state = replace(state, players=_recover(state, state.players, set(), today + timedelta(days=1)))

    state = replace(state, current_date=today + timedelta(days=1))

    if fixtures and all(m.played for m in state.schedule):
        return _complete_season(state)

    slot = _fixtures_slot(state, state.current_date)
    if slot is not None:
        state = replace(state, match_day_fixtures=slot)
    return state


# ===================================================================
# Season end
# ===================================================================

def _divisions_by_level(state: GameState) -> list[int]:
    return sorted(state.divisions, key=lambda d: (state.divisions[d].level, d))


def _season_outcomes(state: GameState) -> dict[int, SeasonOutcome]:
    ordered = _divisions_by_level(state)
    outcomes: dict[int, SeasonOutcome] = {}
    for i, div_id in enumerate(ordered):
        outcomes[div_id] = resolve_season_end(
            state.league_tables.get(div_id, []),
            promotion_spots=0 if i == 0 else state.promotion_spots,
            relegation_spots=0 if i == len(ordered) - 1 else state.promotion_spots,
        )
    return outcomes


def _season_entry(player: Player, season: str) -> PlayerSeasonStats | None:
    return next((h for h in reversed(player.history) if h.season == season), None)


def _awards(state: GameState, club_ids: set[int], rounds: int) -> tuple:
    min_apps = max(1, int(rounds * AWARD_MIN_APPEARANCES_SHARE))
    rows = []
    for p in state.players.values():
        entry = _season_entry(p, state.season)
        if entry is not None and entry.club_id in club_ids and entry.apps > 0:
            rows.append((p, entry))

    def award(p: Player, entry: PlayerSeasonStats, value: float) -> PlayerAward:
        return PlayerAward(player_id=p.id, club_id=entry.club_id, name=p.name, value=round(value, 2))

    regulars = [(p, e) for p, e in rows if e.apps >= min_apps]
    best = max(regulars, key=lambda r: (r[1].average_rating, -r[0].id), default=None)
    scorers = [(p, e) for p, e in rows if e.goals > 0]
    top = max(scorers, key=lambda r: (r[1].goals, -r[1].apps, -r[0].id), default=None)
    young = max(
        [(p, e) for p, e in regulars if p.age <= YOUNG_PLAYER_MAX_AGE],
        key=lambda r: (r[1].average_rating, -r[0].id),
        default=None,
    )
    return (
        award(best[0], best[1], best[1].average_rating) if best else None,
        award(top[0], top[1], top[1].goals) if top else None,
        award(young[0], young[1], young[1].average_rating) if young else None,
    )


def _complete_season(state: GameState) -> GameState:
    outcomes = _season_outcomes(state)

    clubs = dict(state.clubs)
    prizes: dict[int, int] = {}
    for div_id, table in state.league_tables.items():
        level = state.divisions[div_id].level
        for pos, entry in enumerate(table, start=1):
            prize = prize_money_for(pos, len(table), level)
            prizes[entry.club_id] = prize
            club = clubs[entry.club_id]
            clubs[entry.club_id] = replace(club, balance=club.balance + prize)
    state = replace(state, clubs=clubs)

    user = state.player_club_id
    if user is not None:
        review_div = state.clubs[user].division_id
    else:
        review_div = _divisions_by_level(state)[0]
    table = state.league_tables.get(review_div, [])
    rounds = 2 * max(0, len(table) - 1)
    best, top, young = _awards(state, {e.club_id for e in table}, rounds)

    review = SeasonReviewData(
        season=state.season,
        final_table=list(table),
        champion_id=outcomes[review_div].champion_id,
        promoted_club_ids=[c for div_id in _divisions_by_level(state) for c in outcomes[div_id].promoted],
        relegated_club_ids=[c for div_id in _divisions_by_level(state) for c in outcomes[div_id].relegated],
        player_of_the_season=best,
        top_scorer=top,
        young_player=young,
        prize_money=prizes.get(user, 0) if user is not None else 0,
    )
    logger.info("season %s complete; champion club %s", state.season, review.champion_id)
    state = replace(state, phase=SeasonPhase.SEASON_COMPLETE, season_review=review, match_day_fixtures=None)
    return _add_news(state, [news.season_review(review, state.clubs, state.current_date)])


def _next_season_start(season_start: date, after: date) -> date:
    """First anniversary of *season_start* that falls after *after*."""
    year = season_start.year + 1
    while True:
        try:
            start = season_start.replace(year=year)
        except ValueError:  # 29 February
            start = season_start.replace(year=year, day=28)
        if start > after:
            return start
        year += 1


def _start_new_season(state: GameState, intent: Intent) -> GameState:
    _require_phase(state, START_NEW_SEASON, SeasonPhase.SEASON_COMPLETE)
    outcomes = _season_outcomes(state)
    ordered = _divisions_by_level(state)

    # Promotion and relegation between adjacent levels
    clubs = dict(state.clubs)
    for i, div_id in enumerate(ordered):
        for cid in outcomes[div_id].promoted:
            clubs[cid] = replace(clubs[cid], division_id=ordered[i - 1])
        for cid in outcomes[div_id].relegated:
            clubs[cid] = replace(clubs[cid], division_id=ordered[i + 1])

    new_start = _next_season_start(state.season_start, state.current_date)
    start_year = new_start.year
    new_season = season_label(start_year)

    players: dict[int, Player] = {}
    for pid, p in state.players.items():
        history = [h if h.sealed else replace(h, sealed=True) for h in p.history]
        history.append(PlayerSeasonStats(season=new_season, club_id=p.club_id))
        players[pid] = apply_aging(replace(p, history=history, season_yellow_cards=0))
    players, renewed = renew_expiring_contracts(players, new_start, _rng(state, "contracts", start_year))
    logger.info("%d expiring contracts renewed", len(renewed))

    division_clubs = {
        div_id: sorted(cid for cid, c in clubs.items() if c.division_id == div_id)
        for div_id in state.divisions
    }
    schedule = build_season_schedule(
        division_clubs,
        season=new_season,
        season_start=new_start,
        first_match_id=state.next_match_id,
        rng=_rng(state, "schedule", start_year),
    )
    state = replace(
        state,
        season=new_season,
        season_start=new_start,
        current_date=new_start,
        phase=SeasonPhase.IN_SEASON,
        clubs=clubs,
        players=players,
        schedule=schedule,
        next_match_id=state.next_match_id + len(schedule),
        match_day_fixtures=None,
        match_day_results=None,
        transfer_result=None,
        season_review=None,
        intent_error=None,
    )
    state = replace(state, league_tables=_recompute_tables(state, schedule))
    logger.info("season %s started with %d fixtures", new_season, len(schedule))
    return replace(state, match_day_fixtures=_fixtures_slot(state, new_start))


# ===================================================================
# Club management intents
# ===================================================================

def _select_player_club(state: GameState, intent: Intent) -> GameState:
    if state.player_club_id is not None:
        raise IllegalIntent(SELECT_PLAYER_CLUB, "a club has already been selected")
    _require_phase(state, SELECT_PLAYER_CLUB, SeasonPhase.PRE_SEASON)
    if intent.club_id not in state.clubs:
        raise IllegalIntent(SELECT_PLAYER_CLUB, f"unknown club {intent.club_id}")
    logger.info("user takes charge of club %d", intent.club_id)
    state = replace(state, player_club_id=intent.club_id, phase=SeasonPhase.IN_SEASON)
    return replace(state, match_day_fixtures=_fixtures_slot(state, state.current_date))


def _make_transfer_offer(state: GameState, intent: Intent) -> GameState:
    _require_phase(state, MAKE_TRANSFER_OFFER, SeasonPhase.IN_SEASON)
    user = _require_user_club(state, MAKE_TRANSFER_OFFER)
    if intent.player_id not in state.players:
        raise IllegalIntent(MAKE_TRANSFER_OFFER, f"unknown player {intent.player_id}")
    seller_id = state.players[intent.player_id].club_id
    decision = resolve_offer(state, TransferOffer(player_id=intent.player_id, buying_club_id=user, fee=intent.fee))
    if decision.accepted:
        seller = state.clubs[seller_id]
        state = apply_settlement(state, decision)
        state = _add_news(state, [
            news.transfer_completed(decision.player, seller, decision.buyer, decision.fee, state.current_date),
        ])
    return replace(state, transfer_result=decision.result)


def _update_tactics(state: GameState, intent: Intent) -> GameState:
    user = _require_user_club(state, UPDATE_TACTICS)
    club_id = user if intent.club_id is None else intent.club_id
    if club_id != user:
        raise IllegalIntent(UPDATE_TACTICS, "only the user's own club can be changed")
    tactics = intent.tactics
    if tactics.formation not in FORMATIONS:
        raise IllegalIntent(UPDATE_TACTICS, f"unknown formation {tactics.formation!r}")
    if tactics.mentality not in MENTALITIES:
        raise IllegalIntent(UPDATE_TACTICS, f"unknown mentality {tactics.mentality!r}")
    if len(tactics.lineup) > LINEUP_SIZE:
        raise IllegalIntent(UPDATE_TACTICS, f"a lineup has at most {LINEUP_SIZE} players")
    if len(tactics.bench) > BENCH_SIZE:
        raise IllegalIntent(UPDATE_TACTICS, f"a bench has at most {BENCH_SIZE} players")
    ids = tactics.lineup_ids + list(tactics.bench)
    if len(ids) != len(set(ids)):
        raise IllegalIntent(UPDATE_TACTICS, "a player is listed more than once")
    for pid in ids:
        player = state.players.get(pid)
        if player is None or player.club_id != club_id:
            raise IllegalIntent(UPDATE_TACTICS, f"player {pid} is not in the squad")
    for lp in tactics.lineup:
        if lp.role not in ROLES:
            raise IllegalIntent(UPDATE_TACTICS, f"unknown role {lp.role!r}")
    clubs = dict(state.clubs)
    clubs[club_id] = replace(clubs[club_id], tactics=tactics)
    return replace(state, clubs=clubs)


def _set_training_focus(state: GameState, intent: Intent) -> GameState:
    user = _require_user_club(state, SET_TRAINING_FOCUS)
    if intent.focus not in TRAINING_FOCUSES:
        raise IllegalIntent(SET_TRAINING_FOCUS, f"unknown training focus {intent.focus!r}")
    clubs = dict(state.clubs)
    clubs[user] = replace(clubs[user], training_focus=intent.focus)
    return replace(state, clubs=clubs)


def _player_interaction(state: GameState, intent: Intent) -> GameState:
    user = _require_user_club(state, PLAYER_INTERACTION)
    player = state.players.get(intent.player_id)
    if player is None or player.club_id != user:
        raise IllegalIntent(PLAYER_INTERACTION, f"player {intent.player_id} is not in the squad")
    causes = {PRAISE: MoraleCause.PRAISED, CRITICISE: MoraleCause.CRITICISED}
    if intent.action not in causes:
        raise IllegalIntent(PLAYER_INTERACTION, f"unknown interaction {intent.action!r}")
    players = dict(state.players)
    players[player.id] = apply_morale_shift(player, causes[intent.action])
    return replace(state, players=players)


# ===================================================================
# Transient slots
# ===================================================================

def _clear_match_day_fixtures(state: GameState, intent: Intent) -> GameState:
    return replace(state, match_day_fixtures=None)


def _clear_match_results(state: GameState, intent: Intent) -> GameState:
    return replace(state, match_day_results=None)


def _clear_transfer_result(state: GameState, intent: Intent) -> GameState:
    return replace(state, transfer_result=None)


def _clear_intent_error(state: GameState, intent: Intent) -> GameState:
    return replace(state, intent_error=None)


def _mark_news_as_read(state: GameState, intent: Intent) -> GameState:
    items = [replace(n, is_read=True) if n.id == intent.news_id and not n.is_read else n for n in state.news]
    return replace(state, news=items)


# ===================================================================
# Reducer
# ===================================================================

_HANDLERS: dict[str, Callable[[GameState, Intent], GameState]] = {
    ADVANCE_DAY: _advance_day,
    SELECT_PLAYER_CLUB: _select_player_club,
    MAKE_TRANSFER_OFFER: _make_transfer_offer,
    UPDATE_TACTICS: _update_tactics,
    SET_TRAINING_FOCUS: _set_training_focus,
    PLAYER_INTERACTION: _player_interaction,
    START_NEW_SEASON: _start_new_season,
    CLEAR_MATCH_DAY_FIXTURES: _clear_match_day_fixtures,
    CLEAR_MATCH_RESULTS: _clear_match_results,
    CLEAR_TRANSFER_RESULT: _clear_transfer_result,
    CLEAR_INTENT_ERROR: _clear_intent_error,
    MARK_NEWS_AS_READ: _mark_news_as_read,
}


def _check_invariants(state: GameState) -> None:
    for m in state.schedule:
        if m.played and (m.away_score is None or m.home_score < 0 or m.away_score < 0):
            raise InvariantViolation(f"match {m.id} is played without a valid score")
    for p in state.players.values():
        if sum(1 for h in p.history if not h.sealed) > 1:
            raise InvariantViolation(f"player {p.id} has more than one open history entry")
        if p.club_id not in state.clubs:
            raise InvariantViolation(f"player {p.id} belongs to unknown club {p.club_id}")


def reduce(state: GameState, intent: Intent) -> GameState:
    """Apply *intent* to *state* and return the next snapshot."""
    handler = _HANDLERS.get(intent.type)
    if handler is None:
        logger.info("rejected unknown intent %r", intent.type)
        return replace(state, intent_error=f"unknown intent {intent.type!r}")
    try:
        new_state = handler(state, intent)
    except IllegalIntent as exc:
        logger.info("rejected %s: %s", exc.intent_type, exc.reason)
        return replace(state, intent_error=exc.reason)
    if __debug__:
        _check_invariants(new_state)
    return new_state
