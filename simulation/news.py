"""
News feed items for Touchline.

Builders return NewsItem objects with id 0; the season state machine numbers
them from its counter when it adds them to the feed.
"""
from __future__ import annotations

from datetime import date

from models.club import Club
from models.game_state import NewsItem, SeasonReviewData
from models.match import Match
from models.player import Player

ROUND_SUMMARY = "round_summary"
MATCH_REPORT = "match_report"
TRANSFER_COMPLETED = "transfer_completed"
INJURY_REPORT = "injury_report"
SUSPENSION_REPORT = "suspension_report"
SEASON_REVIEW = "season_review"


def _scoreline(match: Match, clubs: dict[int, Club]) -> str:
    return f"{clubs[match.home_club_id].name} {match.home_score} - {match.away_score} {clubs[match.away_club_id].name}"


def round_summary(results: list[Match], clubs: dict[int, Club], today: date) -> NewsItem:
    lines = "\n".join(_scoreline(m, clubs) for m in results)
    return NewsItem(
        date=today,
        headline="League Round-up",
        content=f"Here are the results from around the league:\n\n{lines}",
        type=ROUND_SUMMARY,
    )


def match_report(match: Match, user_club_id: int, clubs: dict[int, Club], today: date) -> NewsItem:
    """Narrative report of the user's match, from the user's perspective."""
    home, away = clubs[match.home_club_id], clubs[match.away_club_id]
    ours = home if user_club_id == home.id else away
    theirs = away if ours is home else home
    our_goals = match.home_score if ours is home else match.away_score
    their_goals = match.away_score if ours is home else match.home_score

    if our_goals > their_goals:
        if our_goals - their_goals >= 3:
            headline = f"Dominant Victory for {ours.name}"
        else:
            headline = f"{ours.name} Secure Hard-Fought Win"
    elif our_goals < their_goals:
        headline = f"Disappointment for {ours.name} in {theirs.name} Clash"
    elif match.home_score >= 2:
        headline = f"Thrilling Draw in {home.name} vs {away.name} Encounter"
    else:
        headline = f"Stalemate Between {home.name} and {away.name}"

    hs, as_ = match.home_stats, match.away_stats
    parts = [
        f"The final whistle blows on {home.name} against {away.name}, "
        f"with the scoreline reading {match.home_score}-{match.away_score}."
    ]
    if hs and as_:
        if hs.possession > 60:
            parts.append(f"{home.name} controlled the game with {hs.possession}% of the ball.")
        elif as_.possession > 60:
            parts.append(f"{away.name} saw the lion's share of the ball, holding {as_.possession}% possession.")
        else:
            parts.append(f"Possession was evenly split ({hs.possession}%-{as_.possession}%).")
        parts.append(
            f"Shots {hs.shots}-{as_.shots}, on target {hs.shots_on_target}-{as_.shots_on_target}, "
            f"xG {hs.xg:.2f}-{as_.xg:.2f}."
        )
    return NewsItem(
        date=today,
        headline=headline,
        content=" ".join(parts),
        type=MATCH_REPORT,
        related_entity_id=match.id,
    )


def transfer_completed(player: Player, seller: Club, buyer: Club, fee: int, today: date) -> NewsItem:
    return NewsItem(
        date=today,
        headline=f"Transfer Confirmed: {player.name} joins {buyer.name}",
        content=f"{player.name} has completed a move from {seller.name} to {buyer.name} for a fee of {fee:,}.",
        type=TRANSFER_COMPLETED,
        related_entity_id=player.id,
    )


def injury_report(player: Player, today: date) -> NewsItem:
    return NewsItem(
        date=today,
        headline=f"Injury Blow: {player.name}",
        content=(
            f"{player.name} has suffered a {player.injury.type.lower()} "
            f"and is expected back on {player.injury.return_date.isoformat()}."
        ),
        type=INJURY_REPORT,
        related_entity_id=player.id,
    )


def suspension_report(player: Player, today: date) -> NewsItem:
    matches = player.suspension.matches
    return NewsItem(
        date=today,
        headline=f"{player.name} Suspended",
        content=f"{player.name} will miss the next {matches} match{'es' if matches != 1 else ''} through suspension.",
        type=SUSPENSION_REPORT,
        related_entity_id=player.id,
    )


def season_review(review: SeasonReviewData, clubs: dict[int, Club], today: date) -> NewsItem:
    champion = clubs[review.champion_id].name if review.champion_id is not None else "Nobody"
    lines = [f"{champion} are champions of the {review.season} season."]
    if review.promoted_club_ids:
        lines.append("Promoted: " + ", ".join(clubs[c].name for c in review.promoted_club_ids) + ".")
    if review.relegated_club_ids:
        lines.append("Relegated: " + ", ".join(clubs[c].name for c in review.relegated_club_ids) + ".")
    if review.top_scorer:
        lines.append(f"Top scorer: {review.top_scorer.name} ({int(review.top_scorer.value)} goals).")
    return NewsItem(
        date=today,
        headline=f"Season {review.season} Review",
        content="\n".join(lines),
        type=SEASON_REVIEW,
        related_entity_id=review.champion_id,
    )
