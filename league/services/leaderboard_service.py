"""
LeaderboardService - Builds ranked leaderboards from matches, picks and brackets.

Leaderboards are computed fresh on every call; entries are never updated in
place and nothing is persisted here.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from typing import Optional

from league.models.bracket import BracketPrediction
from league.models.leaderboard import LeaderboardEntry
from league.models.match import Match
from league.models.member import Member
from league.models.pick import Pick, UserPicksDoc
from league.models.scoring import ScoringConfig
from league.services.bracket_service import build_group_standings, score_bracket_prediction
from league.services.identity_service import (
    normalize_identity_key,
    resolve_identity_keys,
)
from league.services.pick_service import (
    as_utc,
    index_picks_by_identity,
    is_pick_complete,
    select_latest_pick_by_match,
)
from league.services.points_service import PointsService

logger = logging.getLogger(__name__)


def leaderboard_sort_key(entry: LeaderboardEntry):
    """Total desc, exact hits desc, then display name so the order is strict."""
    name = entry.member.name
    return (-entry.total_points, -entry.exact_count, name.casefold(), name, entry.member.id)


def resolve_leaderboard_members(
    members: list[Member],
    picks_docs: Iterable[UserPicksDoc] = (),
    bracket_user_ids: Iterable[str] = ()
) -> list[Member]:
    """
    Members plus a placeholder for every active user nobody covers.

    Active users are those with a picks document or a bracket prediction.
    When every member id is an email the member list is authoritative and no
    placeholders are added (uid-keyed docs belong to email-keyed members).
    """
    resolved = list(members)
    if members and all("@" in member.id for member in members):
        return resolved

    known_keys = set()
    for member in members:
        known_keys.update(resolve_identity_keys(member))

    active_ids = {doc.user_id for doc in picks_docs}
    active_ids.update(bracket_user_ids)

    for user_id in sorted(active_ids):
        key = normalize_identity_key(user_id)
        if key is None or key in known_keys:
            continue
        known_keys.add(key)
        resolved.append(Member(id=user_id, name=user_id))

    return resolved


class LeaderboardService:
    def __init__(self, scoring: ScoringConfig):
        self.scoring = scoring
        self.points_service = PointsService(scoring)

    def build_leaderboard(
        self,
        members: list[Member],
        matches: list[Match],
        picks_docs: Iterable[UserPicksDoc],
        bracket_predictions: Iterable[BracketPrediction] = (),
        best_third_qualifiers: Optional[list[str]] = None
    ) -> list[LeaderboardEntry]:
        """
        Ranked leaderboard.

        For every member: resolve identity keys, gather the picks recorded
        under any of them (by document or pick user id, latest pick per
        match), score every finished match and add the bracket subtotal.
        Members without picks still appear with zero totals.
        """
        match_by_id = {match.id: match for match in matches}
        standings = build_group_standings(matches)
        picks_by_key = index_picks_by_identity(picks_docs)

        brackets_by_key: dict[str, list[BracketPrediction]] = defaultdict(list)
        for prediction in bracket_predictions:
            key = normalize_identity_key(prediction.user_id)
            if key:
                brackets_by_key[key].append(prediction)

        entries = [
            self._build_entry(member, match_by_id, picks_by_key, brackets_by_key, matches,
                              standings, best_third_qualifiers)
            for member in members
        ]

        entries.sort(key=leaderboard_sort_key)
        for rank, entry in enumerate(entries, start=1):
            entry.rank = rank

        logger.info(
            "Built leaderboard with %d entries over %d finished matches",
            len(entries),
            sum(1 for match in matches if match.is_finished),
        )
        return entries

    def _build_entry(
        self,
        member: Member,
        match_by_id: dict[str, Match],
        picks_by_key: dict[str, list[Pick]],
        brackets_by_key: dict[str, list[BracketPrediction]],
        matches: list[Match],
        standings,
        best_third_qualifiers: Optional[list[str]]
    ) -> LeaderboardEntry:
        entry = LeaderboardEntry(member=member)
        keys = sorted(resolve_identity_keys(member))

        member_picks = [pick for key in keys for pick in picks_by_key.get(key, [])]
        for match_id, pick in select_latest_pick_by_match(member_picks).items():
            match = match_by_id.get(match_id)
            if match is None:
                logger.debug("Pick %s references unknown match %s", pick.id, match_id)
                continue
            if not match.is_finished or not is_pick_complete(match, pick):
                continue

            breakdown = self.points_service.calculate_points(match, pick)
            entry.exact_points += breakdown.exact_points
            entry.result_points += breakdown.result_points
            entry.knockout_points += breakdown.knockout_points
            entry.picks_count += 1
            if breakdown.exact_hit:
                entry.exact_count += 1

            created_at = as_utc(pick.created_at)
            if entry.earliest_submission is None or created_at < entry.earliest_submission:
                entry.earliest_submission = created_at

        predictions = [p for key in keys for p in brackets_by_key.get(key, [])]
        if predictions:
            latest = max(predictions, key=lambda p: as_utc(p.updated_at))
            entry.bracket_points = score_bracket_prediction(
                latest,
                matches,
                self.scoring.bracket,
                best_third_qualifiers,
                standings=standings,
            )

        entry.total_points = (
            entry.exact_points
            + entry.result_points
            + entry.knockout_points
            + entry.bracket_points
        )
        return entry
