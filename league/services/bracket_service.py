"""
BracketService - group standings, best-third qualifiers and bracket scoring.

The bracket subtotal is independent of individual match picks: it compares a
member's predicted group top-two, best-third qualifiers and knockout advancing
sides against the real tournament.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from league.models.bracket import (
    BracketGroupDoc,
    BracketKnockoutDoc,
    BracketPrediction,
    GroupPrediction,
    GroupStanding,
    GroupSummary,
)
from league.models.match import Match, MatchStage, Side, Team
from league.models.scoring import BracketScoring
from league.services.pick_service import non_blank, parse_enum, parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_BEST_THIRD_SLOTS = 8


def normalize_team_codes(codes: Optional[Iterable[str]]) -> list[str]:
    """Trimmed, upper-cased, de-duplicated codes in their original order."""
    if not codes:
        return []
    normalized = []
    for code in codes:
        value = str(code or "").strip().upper()
        if value and value not in normalized:
            normalized.append(value)
    return normalized


def _standing_sort_key(standing: GroupStanding):
    return (-standing.points, -standing.goal_diff, -standing.goals_for, standing.team.code)


def build_group_standings(matches: Iterable[Match]) -> dict[str, GroupSummary]:
    """
    Group tables from finished group matches (3 points a win, 1 a draw).

    A group is complete only when every one of its matches is finished with
    a score. Order: points, goal difference, goals for, team code.
    """
    groups: dict[str, dict[str, GroupStanding]] = {}
    complete: dict[str, bool] = {}

    def ensure_team(group_id: str, team: Team) -> GroupStanding:
        teams = groups.setdefault(group_id, {})
        if team.code not in teams:
            teams[team.code] = GroupStanding(team=team)
        return teams[team.code]

    for match in matches:
        if match.stage is not MatchStage.GROUP or not match.group:
            continue

        home = ensure_team(match.group, match.home_team)
        away = ensure_team(match.group, match.away_team)
        complete.setdefault(match.group, True)

        if not match.is_finished or match.score is None:
            complete[match.group] = False
            continue

        home.goals_for += match.score.home
        home.goals_against += match.score.away
        away.goals_for += match.score.away
        away.goals_against += match.score.home

        if match.score.home > match.score.away:
            home.points += 3
        elif match.score.home < match.score.away:
            away.points += 3
        else:
            home.points += 1
            away.points += 1

    return {
        group_id: GroupSummary(
            complete=complete[group_id],
            standings=sorted(teams.values(), key=_standing_sort_key),
        )
        for group_id, teams in groups.items()
    }


def resolve_best_third_qualifiers(
    standings: dict[str, GroupSummary],
    overrides: Optional[Iterable[str]] = None,
    slots: int = DEFAULT_BEST_THIRD_SLOTS
) -> Optional[list[str]]:
    """
    Team codes of the best third-placed teams.

    Explicit overrides (the officially accepted list) always win. Otherwise
    the answer is None until every group is complete.
    """
    override_codes = normalize_team_codes(overrides)
    if override_codes:
        return override_codes

    thirds: list[GroupStanding] = []
    for summary in standings.values():
        if not summary.complete or len(summary.standings) < 3:
            return None
        thirds.append(summary.standings[2])

    thirds.sort(key=_standing_sort_key)
    return [standing.team.code for standing in thirds[:slots]]


def score_bracket_prediction(
    prediction: BracketPrediction,
    matches: list[Match],
    scoring: Optional[BracketScoring],
    best_third_qualifiers: Optional[Iterable[str]] = None,
    standings: Optional[dict[str, GroupSummary]] = None
) -> int:
    """
    Bracket points for one prediction.

    - every predicted top-two team that finished top-two of a complete group
    - every predicted best third that is among the actual qualifiers
    - every finished knockout match whose predicted advancing side won
    """
    if scoring is None:
        return 0

    if standings is None:
        standings = build_group_standings(matches)

    points = 0

    for group_id, summary in standings.items():
        if not summary.complete:
            continue
        predicted = prediction.groups.get(group_id)
        if predicted is None:
            continue
        top_two = set(normalize_team_codes(
            standing.team.code for standing in summary.standings[:2]
        ))
        for code in normalize_team_codes([predicted.first, predicted.second]):
            if code in top_two:
                points += scoring.group_qualifiers

    actual_thirds = resolve_best_third_qualifiers(standings, best_third_qualifiers)
    if actual_thirds:
        third_points = scoring.third_place_qualifiers
        if third_points is None:
            third_points = scoring.group_qualifiers
        actual = set(actual_thirds)
        for code in normalize_team_codes(prediction.best_thirds):
            if code in actual:
                points += third_points

    for match in matches:
        if not match.is_knockout or not match.is_finished or match.winner is None:
            continue
        stage_predictions = prediction.knockout.get(match.stage)
        if not stage_predictions:
            continue
        if stage_predictions.get(match.id) == match.winner:
            points += scoring.knockout.get(match.stage, 0)

    return points


def _parse_updated_at(value: Any, fallback: datetime) -> Optional[datetime]:
    if value is None:
        return None
    return parse_timestamp(value, fallback)


def _parse_group_prediction(raw: Any) -> Optional[GroupPrediction]:
    if not isinstance(raw, Mapping):
        return None
    first = normalize_team_codes([raw["first"]]) if isinstance(raw.get("first"), str) else []
    second = normalize_team_codes([raw["second"]]) if isinstance(raw.get("second"), str) else []
    return GroupPrediction(
        first=first[0] if first else None,
        second=second[0] if second else None,
    )


def normalize_bracket_group_docs(
    raw_docs: Iterable[Any],
    now: Optional[datetime] = None
) -> list[BracketGroupDoc]:
    """
    Parse raw group-stage bracket documents.

    Unusable group entries and non-string best thirds are dropped; a document
    without a user id is skipped. Nothing here raises.
    """
    fallback = now or datetime.now(timezone.utc)
    docs: list[BracketGroupDoc] = []

    for raw in raw_docs:
        if not isinstance(raw, Mapping):
            logger.warning("Skipping malformed bracket group document")
            continue

        user_id = non_blank(raw.get("userId")) or non_blank(raw.get("id"))
        if not user_id:
            logger.warning("Skipping bracket group document without user id")
            continue

        groups: dict[str, GroupPrediction] = {}
        raw_groups = raw.get("groups")
        if isinstance(raw_groups, Mapping):
            for group_id, raw_prediction in raw_groups.items():
                prediction = _parse_group_prediction(raw_prediction)
                if prediction is None:
                    logger.warning("Skipping group %s prediction for user %s", group_id, user_id)
                    continue
                groups[str(group_id)] = prediction

        raw_thirds = raw.get("bestThirds")
        best_thirds = []
        if isinstance(raw_thirds, list):
            best_thirds = normalize_team_codes(code for code in raw_thirds if isinstance(code, str))

        docs.append(BracketGroupDoc(
            user_id=user_id,
            groups=groups,
            best_thirds=best_thirds,
            updated_at=_parse_updated_at(raw.get("updatedAt"), fallback),
        ))

    return docs


def normalize_bracket_knockout_docs(
    raw_docs: Iterable[Any],
    now: Optional[datetime] = None
) -> list[BracketKnockoutDoc]:
    """
    Parse raw knockout bracket documents.

    Unknown or non-knockout stage keys and advancing sides other than
    HOME/AWAY are dropped with a warning; the rest of the document is kept.
    """
    fallback = now or datetime.now(timezone.utc)
    docs: list[BracketKnockoutDoc] = []

    for raw in raw_docs:
        if not isinstance(raw, Mapping):
            logger.warning("Skipping malformed bracket knockout document")
            continue

        user_id = non_blank(raw.get("userId")) or non_blank(raw.get("id"))
        if not user_id:
            logger.warning("Skipping bracket knockout document without user id")
            continue

        knockout: dict[MatchStage, dict[str, Side]] = {}
        raw_knockout = raw.get("knockout")
        if isinstance(raw_knockout, Mapping):
            for stage_key, raw_stage in raw_knockout.items():
                stage = parse_enum(MatchStage, stage_key)
                if stage is None or not stage.is_knockout or not isinstance(raw_stage, Mapping):
                    logger.warning("Skipping bracket stage %r for user %s", stage_key, user_id)
                    continue

                stage_predictions = {}
                for match_id, raw_side in raw_stage.items():
                    side = parse_enum(Side, raw_side)
                    if side is None:
                        logger.warning(
                            "Skipping bracket pick %r on %s for user %s", raw_side, match_id, user_id
                        )
                        continue
                    stage_predictions[str(match_id)] = side
                if stage_predictions:
                    knockout[stage] = stage_predictions

        docs.append(BracketKnockoutDoc(
            user_id=user_id,
            knockout=knockout,
            updated_at=_parse_updated_at(raw.get("updatedAt"), fallback),
        ))

    return docs


def combine_bracket_predictions(
    group_docs: Iterable[BracketGroupDoc],
    knockout_docs: Iterable[BracketKnockoutDoc],
    now: Optional[datetime] = None
) -> list[BracketPrediction]:
    """Join the group and knockout documents of each user into one prediction."""
    group_by_user = {doc.user_id: doc for doc in group_docs}
    knockout_by_user = {doc.user_id: doc for doc in knockout_docs}
    fallback = now or datetime.now(timezone.utc)

    predictions = []
    for user_id in dict.fromkeys([*group_by_user, *knockout_by_user]):
        group_doc = group_by_user.get(user_id)
        knockout_doc = knockout_by_user.get(user_id)
        updated_at = (
            (knockout_doc.updated_at if knockout_doc else None)
            or (group_doc.updated_at if group_doc else None)
            or fallback
        )
        predictions.append(BracketPrediction(
            id=f"bracket-{user_id}",
            user_id=user_id,
            groups=group_doc.groups if group_doc else {},
            best_thirds=group_doc.best_thirds if group_doc else [],
            knockout=knockout_doc.knockout if knockout_doc else {},
            created_at=updated_at,
            updated_at=updated_at,
        ))
    return predictions


def has_bracket_data(prediction: BracketPrediction) -> bool:
    if any(code for code in prediction.best_thirds):
        return True
    if any(group.first or group.second for group in prediction.groups.values()):
        return True
    return any(stage_predictions for stage_predictions in prediction.knockout.values())
