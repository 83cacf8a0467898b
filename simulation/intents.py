"""
Intents accepted by the season state machine.

Each intent is a frozen dataclass tagged with ``type``; it carries only the
data its action needs.  ``intent_from_dict`` builds one from a JSON payload.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from models.club import Tactics

ADVANCE_DAY = "ADVANCE_DAY"
SELECT_PLAYER_CLUB = "SELECT_PLAYER_CLUB"
MAKE_TRANSFER_OFFER = "MAKE_TRANSFER_OFFER"
UPDATE_TACTICS = "UPDATE_TACTICS"
SET_TRAINING_FOCUS = "SET_TRAINING_FOCUS"
PLAYER_INTERACTION = "PLAYER_INTERACTION"
START_NEW_SEASON = "START_NEW_SEASON"
CLEAR_MATCH_DAY_FIXTURES = "CLEAR_MATCH_DAY_FIXTURES"
CLEAR_MATCH_RESULTS = "CLEAR_MATCH_RESULTS"
CLEAR_TRANSFER_RESULT = "CLEAR_TRANSFER_RESULT"
CLEAR_INTENT_ERROR = "CLEAR_INTENT_ERROR"
MARK_NEWS_AS_READ = "MARK_NEWS_AS_READ"

PRAISE = "praise"
CRITICISE = "criticise"


@dataclass(frozen=True)
class Intent:
    type: ClassVar[str] = ""


@dataclass(frozen=True)
class AdvanceDay(Intent):
    type: ClassVar[str] = ADVANCE_DAY


@dataclass(frozen=True)
class SelectPlayerClub(Intent):
    type: ClassVar[str] = SELECT_PLAYER_CLUB
    club_id: int = 0


@dataclass(frozen=True)
class MakeTransferOffer(Intent):
    type: ClassVar[str] = MAKE_TRANSFER_OFFER
    player_id: int = 0
    fee: int = 0


@dataclass(frozen=True)
class UpdateTactics(Intent):
    """New tactics for a club; club_id None means the user's club."""

    type: ClassVar[str] = UPDATE_TACTICS
    tactics: Tactics = field(default_factory=Tactics)
    club_id: int | None = None


@dataclass(frozen=True)
class SetTrainingFocus(Intent):
    type: ClassVar[str] = SET_TRAINING_FOCUS
    focus: str = ""


@dataclass(frozen=True)
class PlayerInteraction(Intent):
    type: ClassVar[str] = PLAYER_INTERACTION
    player_id: int = 0
    action: str = PRAISE


@dataclass(frozen=True)
class StartNewSeason(Intent):
    type: ClassVar[str] = START_NEW_SEASON


@dataclass(frozen=True)
class ClearMatchDayFixtures(Intent):
    type: ClassVar[str] = CLEAR_MATCH_DAY_FIXTURES


@dataclass(frozen=True)
class ClearMatchResults(Intent):
    type: ClassVar[str] = CLEAR_MATCH_RESULTS


@dataclass(frozen=True)
class ClearTransferResult(Intent):
    type: ClassVar[str] = CLEAR_TRANSFER_RESULT


@dataclass(frozen=True)
class ClearIntentError(Intent):
    type: ClassVar[str] = CLEAR_INTENT_ERROR


@dataclass(frozen=True)
class MarkNewsAsRead(Intent):
    type: ClassVar[str] = MARK_NEWS_AS_READ
    news_id: int = 0


INTENT_TYPES: dict[str, type[Intent]] = {
    cls.type: cls
    for cls in (
        AdvanceDay,
        SelectPlayerClub,
        MakeTransferOffer,
        UpdateTactics,
        SetTrainingFocus,
        PlayerInteraction,
        StartNewSeason,
        ClearMatchDayFixtures,
        ClearMatchResults,
        ClearTransferResult,
        ClearIntentError,
        MarkNewsAsRead,
    )
}


def intent_from_dict(data: dict[str, Any]) -> Intent:
    """Build an intent from ``{"type": ..., "payload": {...}}``.

    Raises ValueError for an unknown type or a malformed payload.
    """
    if not isinstance(data, dict):
        raise ValueError("intent must be a JSON object")
    kind = data.get("type")
    cls = INTENT_TYPES.get(kind)
    if cls is None:
        raise ValueError(f"unknown intent type: {kind!r}")
    payload = data.get("payload") or {}
    if not isinstance(payload, dict):
        raise ValueError("intent payload must be a JSON object")
    try:
        if cls is SelectPlayerClub:
            return SelectPlayerClub(club_id=int(payload["club_id"]))
        if cls is MakeTransferOffer:
            return MakeTransferOffer(player_id=int(payload["player_id"]), fee=int(payload["fee"]))
        if cls is UpdateTactics:
            club_id = payload.get("club_id")
            return UpdateTactics(
                tactics=Tactics.from_dict(payload["tactics"]),
                club_id=int(club_id) if club_id is not None else None,
            )
        if cls is SetTrainingFocus:
            return SetTrainingFocus(focus=str(payload["focus"]))
        if cls is PlayerInteraction:
            return PlayerInteraction(player_id=int(payload["player_id"]), action=str(payload["action"]))
        if cls is MarkNewsAsRead:
            return MarkNewsAsRead(news_id=int(payload["news_id"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"bad payload for {kind}: {exc}") from exc
    return cls()
