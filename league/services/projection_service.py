"""
ProjectionService - "what-if" standings under simulated future results.

The real leaderboard is the baseline: its totals are not recomputed, only the
points each member would earn on the simulated matches are added on top.
Entries passed in are never modified.
"""

import logging
from collections.abc import Mapping

from league.models.leaderboard import LeaderboardEntry, ProjectedLeaderboardRow, SimulatedOutcome
from league.models.match import Decision, Match, MatchScore, MatchStatus, Side
from league.models.pick import UserPicksDoc
from league.models.scoring import ScoringConfig
from league.services.identity_service import resolve_identity_keys
from league.services.pick_service import index_picks_by_identity, select_latest_pick_by_match
from league.services.points_service import PointsService

logger = logging.getLogger(__name__)


def build_simulated_match(match: Match, outcome: SimulatedOutcome) -> Match:
    """
    Copy of ``match`` finished with the simulated score.

    The winner follows the score; a simulated tie with an advancing side is
    treated as decided on penalties. The input match is left untouched.
    """
    winner = None
    decided_by = None
    if outcome.home_score > outcome.away_score:
        winner = Side.HOME
    elif outcome.home_score < outcome.away_score:
        winner = Side.AWAY
    elif match.is_knockout and outcome.advances is not None:
        winner = outcome.advances
        decided_by = Decision.PENS

    return match.model_copy(update={
        "status": MatchStatus.FINISHED,
        "score": MatchScore(home=outcome.home_score, away=outcome.away_score),
        "winner": winner,
        "decided_by": decided_by,
    })


def projected_sort_key(row: ProjectedLeaderboardRow):
    name = row.entry.member.name
    return (
        -row.projected_total_points,
        -row.entry.total_points,
        name.casefold(),
        name,
        row.entry.member.id,
    )


class ProjectionService:
    def __init__(self, scoring: ScoringConfig):
        self.points_service = PointsService(scoring)

    def build_projected_leaderboard(
        self,
        entries: list[LeaderboardEntry],
        matches: list[Match],
        picks_docs: list[UserPicksDoc],
        simulated_outcomes: Mapping[str, SimulatedOutcome]
    ) -> list[ProjectedLeaderboardRow]:
        """
        Leaderboard users would have if the simulated outcomes happened.

        Finished matches are ground truth and unknown match ids are ignored.
        Rows are ranked by projected total, then real total, then name.
        """
        match_by_id = {match.id: match for match in matches}

        simulated: dict[str, Match] = {}
        for match_id, outcome in simulated_outcomes.items():
            match = match_by_id.get(match_id)
            if match is None:
                logger.debug("Ignoring simulated outcome for unknown match %s", match_id)
                continue
            if match.is_finished:
                logger.debug("Ignoring simulated outcome for finished match %s", match_id)
                continue
            simulated[match_id] = build_simulated_match(match, outcome)

        picks_by_key = index_picks_by_identity(picks_docs)

        rows = []
        for entry in entries:
            keys = sorted(resolve_identity_keys(entry.member))
            member_picks = [pick for key in keys for pick in picks_by_key.get(key, [])]
            pick_by_match = select_latest_pick_by_match(member_picks)

            delta = 0
            for match_id, match in simulated.items():
                pick = pick_by_match.get(match_id)
                if pick is None:
                    continue
                delta += self.points_service.calculate_points(match, pick).total

            rows.append(ProjectedLeaderboardRow(
                entry=entry,
                projected_total_points=entry.total_points + delta,
                projected_delta=delta,
            ))

        rows.sort(key=projected_sort_key)
        for rank, row in enumerate(rows, start=1):
            row.projected_rank = rank

        return rows
