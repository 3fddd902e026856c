"""
PickService helpers - normalization, merging and completeness rules for picks.

Raw pick documents come from several storage generations:
- current shape: ``{"userId": ..., "picks": [ {...}, {...} ]}``
- legacy shape:  ``{"userId": ..., "picks": {"<matchId>": {...}}}``

Both are parsed here into canonical ``Pick`` records; nothing past this module
ever sees the ambiguous raw shape.
"""

import logging
import math
from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, TypeVar

from league.models.match import Match, Side, Decision
from league.models.pick import Pick, PickInput, PickOutcome, UserPicksDoc
from league.services.identity_service import normalize_identity_key

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


# ============================================
# 📌 PARSING
# ============================================

def as_utc(value: datetime) -> datetime:
    """Naive datetimes are treated as UTC so every timestamp is comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any, fallback: datetime) -> datetime:
    """
    ISO strings, datetimes and storage timestamp objects exposing
    ``to_datetime()`` are accepted; anything else is the fallback.
    """
    if isinstance(value, datetime):
        return as_utc(value)
    to_datetime = getattr(value, "to_datetime", None)
    if callable(to_datetime):
        converted = to_datetime()
        if isinstance(converted, datetime):
            return as_utc(converted)
        return as_utc(fallback)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(text))
        except ValueError:
            return as_utc(fallback)
    return as_utc(fallback)


def parse_optional_score(value: Any) -> Optional[int]:
    """
    Lenient score parsing.

    Ints, integral floats and numeric-looking strings are accepted.
    Everything else (bools, blanks, garbage, negatives, fractions) is absent.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None

    if isinstance(value, int):
        return value if value >= 0 else None

    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer() or value < 0:
            return None
        return int(value)

    return None


def parse_enum(enum_cls: type[E], value: Any) -> Optional[E]:
    """Exactly one of the enum's values, or None. Never guesses."""
    if isinstance(value, str) and value in enum_cls._value2member_map_:
        return enum_cls(value)
    return None


def non_blank(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _parse_pick(
    record: Any,
    user_id: str,
    fallback_timestamp: datetime,
    fallback_match_id: Optional[str] = None
) -> Optional[Pick]:
    if not isinstance(record, Mapping):
        return None

    match_id = non_blank(record.get("matchId")) or non_blank(fallback_match_id)
    if not match_id:
        logger.warning("Skipping pick without match id for user %s", user_id)
        return None

    pick_user_id = non_blank(record.get("userId")) or user_id

    return Pick(
        id=non_blank(record.get("id")) or f"pick-{pick_user_id}-{match_id}",
        match_id=match_id,
        user_id=pick_user_id,
        home_score=parse_optional_score(record.get("homeScore")),
        away_score=parse_optional_score(record.get("awayScore")),
        outcome=parse_enum(PickOutcome, record.get("outcome")),
        advances=parse_enum(Side, record.get("advances")),
        winner=parse_enum(Side, record.get("winner")),
        decided_by=parse_enum(Decision, record.get("decidedBy")),
        created_at=parse_timestamp(record.get("createdAt"), fallback_timestamp),
        updated_at=parse_timestamp(record.get("updatedAt"), fallback_timestamp),
    )


def normalize_user_picks(
    user_id: str,
    raw_picks: Any,
    fallback_timestamp: datetime
) -> list[Pick]:
    """
    Parse one user's raw picks into canonical records, one per match.

    ``raw_picks`` may be a list of pick records or a legacy mapping keyed by
    match id. When two records share a match, the later-or-equal
    ``updated_at`` wins, so on a tie the later-encountered record is kept.
    """
    parsed: list[Pick] = []

    if isinstance(raw_picks, Mapping):
        for match_id, record in raw_picks.items():
            pick = _parse_pick(record, user_id, fallback_timestamp, str(match_id))
            if pick:
                parsed.append(pick)
    elif isinstance(raw_picks, Iterable) and not isinstance(raw_picks, (str, bytes)):
        for record in raw_picks:
            pick = _parse_pick(record, user_id, fallback_timestamp)
            if pick:
                parsed.append(pick)

    return list(select_latest_pick_by_match(parsed).values())


def normalize_picks_docs(
    raw_docs: Iterable[Any],
    now: Optional[datetime] = None
) -> list[UserPicksDoc]:
    """
    Normalize whole storage documents.

    The user id comes from ``userId``, falling back to the document ``id``.
    Documents with neither are unidentifiable and skipped.
    """
    fallback = now or datetime.now(timezone.utc)
    docs: list[UserPicksDoc] = []

    for raw in raw_docs:
        if not isinstance(raw, Mapping):
            continue

        user_id = non_blank(raw.get("userId")) or non_blank(raw.get("id"))
        if not user_id:
            logger.warning("Skipping picks document without user id")
            continue

        updated_at = parse_timestamp(raw.get("updatedAt"), fallback)
        docs.append(UserPicksDoc(
            user_id=user_id,
            updated_at=updated_at,
            picks=normalize_user_picks(user_id, raw.get("picks"), updated_at),
        ))

    return docs


def index_picks_by_identity(docs: Iterable[UserPicksDoc]) -> dict[str, list[Pick]]:
    """
    Picks keyed by normalized identity.

    Each pick is listed under its document's user id and under its own
    ``user_id`` when they differ, so a pick stored in a member's uid document
    with an older inner user id is still found.
    """
    picks_by_key: dict[str, list[Pick]] = defaultdict(list)
    for doc in docs:
        doc_key = normalize_identity_key(doc.user_id)
        for pick in doc.picks:
            keys = {doc_key, normalize_identity_key(pick.user_id)}
            keys.discard(None)
            for key in keys:
                picks_by_key[key].append(pick)
    return picks_by_key


# ============================================
# 📌 MERGE
# ============================================

def select_latest_pick_by_match(picks: Iterable[Pick]) -> dict[str, Pick]:
    """Latest pick per match id; ties go to the later-encountered pick."""
    by_match: dict[str, Pick] = {}
    for pick in picks:
        current = by_match.get(pick.match_id)
        if current is None or as_utc(pick.updated_at) >= as_utc(current.updated_at):
            by_match[pick.match_id] = pick
    return by_match


def _pick_key(pick: Pick) -> tuple[str, str]:
    return (normalize_identity_key(pick.user_id) or "", pick.match_id)


def merge_picks(server_picks: Iterable[Pick], local_picks: Iterable[Pick]) -> list[Pick]:
    """
    Merge the server copy of a user's picks with a locally cached copy.

    For each (user, match) the local pick wins only when its ``updated_at``
    is strictly newer; at parity the server copy is canonical.
    """
    merged: dict[tuple[str, str], Pick] = {}

    for pick in server_picks:
        key = _pick_key(pick)
        current = merged.get(key)
        if current is None or as_utc(pick.updated_at) >= as_utc(current.updated_at):
            merged[key] = pick

    for pick in local_picks:
        key = _pick_key(pick)
        current = merged.get(key)
        if current is None or as_utc(pick.updated_at) > as_utc(current.updated_at):
            merged[key] = pick

    return list(merged.values())


# ============================================
# 📌 RULES
# ============================================

def get_outcome_from_scores(
    home_score: Optional[int],
    away_score: Optional[int]
) -> Optional[PickOutcome]:
    if home_score is None or away_score is None:
        return None
    if home_score > away_score:
        return PickOutcome.WIN
    if home_score < away_score:
        return PickOutcome.LOSS
    return PickOutcome.DRAW


def get_pick_outcome(pick: Pick) -> Optional[PickOutcome]:
    """Explicit outcome field first, otherwise derived from the scores."""
    if pick.outcome is not None:
        return pick.outcome
    return get_outcome_from_scores(pick.home_score, pick.away_score)


def resolve_advancing_side(pick: Pick) -> Optional[Side]:
    """
    Predicted advancing side for a tied knockout pick.

    Precedence: ``advances`` is the current field and always wins. The legacy
    ``winner`` field is only consulted when ``advances`` is absent.
    """
    if pick.advances is not None:
        return pick.advances
    return pick.winner


def is_pick_complete(match: Match, pick: Optional[Pick]) -> bool:
    """
    Both scores are required. A tied pick on a knockout match also needs an
    advancing side; group-stage ties do not.
    """
    if pick is None:
        return False
    if pick.home_score is None or pick.away_score is None:
        return False
    if pick.home_score == pick.away_score and match.is_knockout:
        return resolve_advancing_side(pick) is not None
    return True


def upsert_pick(picks: list[Pick], pick_input: PickInput, now: datetime) -> list[Pick]:
    """
    Create or update a user's pick for a match.

    The outcome is always derived from the submitted scores. ``created_at``
    survives updates; ``updated_at`` is stamped with ``now``. Returns a new
    list, the input list is left untouched.
    """
    now = as_utc(now)
    outcome = get_outcome_from_scores(pick_input.home_score, pick_input.away_score)
    input_key = (normalize_identity_key(pick_input.user_id) or "", pick_input.match_id)

    for index, existing in enumerate(picks):
        if _pick_key(existing) != input_key:
            continue
        updated = existing.model_copy(update={
            "home_score": pick_input.home_score,
            "away_score": pick_input.away_score,
            "outcome": outcome,
            "advances": pick_input.advances,
            "winner": None,  # legacy field, superseded by advances
            "decided_by": pick_input.decided_by,
            "updated_at": now,
        })
        return [*picks[:index], updated, *picks[index + 1:]]

    created = Pick(
        id=f"pick-{pick_input.user_id}-{pick_input.match_id}",
        match_id=pick_input.match_id,
        user_id=pick_input.user_id,
        home_score=pick_input.home_score,
        away_score=pick_input.away_score,
        outcome=outcome,
        advances=pick_input.advances,
        decided_by=pick_input.decided_by,
        created_at=now,
        updated_at=now,
    )
    return [*picks, created]
