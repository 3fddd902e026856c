"""
Pytest fixtures and configuration for all tests.
"""

import pytest
from datetime import datetime, timedelta, timezone

from league.models.match import Match, MatchStage, MatchStatus, MatchScore, Team
from league.models.member import Member
from league.models.pick import Pick
from league.models.scoring import BracketScoring, ScoringConfig, StageScoring


KICKOFF = datetime(2026, 6, 11, 19, 0, tzinfo=timezone.utc)

TEAMS = {
    "MEX": "Mexico",
    "RSA": "South Africa",
    "KOR": "Korea Republic",
    "DEN": "Denmark",
    "CAN": "Canada",
    "USA": "United States",
    "ARG": "Argentina",
    "BRA": "Brazil",
}


def team(code: str) -> Team:
    return Team(code=code, name=TEAMS.get(code, code))


@pytest.fixture
def scoring_config():
    """Rule table used across tests: 5 exact, 2 one side, 3 result, 2 advancing side."""
    knockout_table = StageScoring(
        exact_score_both=5,
        exact_score_one=2,
        result=3,
        knockout_winner=2
    )
    return ScoringConfig(
        group=StageScoring(exact_score_both=5, exact_score_one=2, result=3),
        knockout={
            MatchStage.R32: knockout_table,
            MatchStage.R16: knockout_table,
            MatchStage.QF: knockout_table,
            MatchStage.SF: knockout_table,
            MatchStage.THIRD: knockout_table,
            MatchStage.FINAL: knockout_table,
        },
        bracket=BracketScoring(
            group_qualifiers=4,
            third_place_qualifiers=2,
            knockout={MatchStage.R32: 3, MatchStage.FINAL: 10}
        )
    )


@pytest.fixture
def make_match():
    """Factory for matches; a score makes the match FINISHED unless a status is given."""
    def _make(
        match_id="m1",
        stage=MatchStage.GROUP,
        home="MEX",
        away="RSA",
        score=None,
        status=None,
        group=None,
        winner=None,
        decided_by=None,
        kickoff=KICKOFF
    ):
        if status is None:
            status = MatchStatus.FINISHED if score is not None else MatchStatus.SCHEDULED
        if group is None and stage is MatchStage.GROUP:
            group = "A"
        return Match(
            id=match_id,
            stage=stage,
            group=group,
            kickoff_utc=kickoff,
            status=status,
            home_team=team(home),
            away_team=team(away),
            score=MatchScore(home=score[0], away=score[1]) if score is not None else None,
            winner=winner,
            decided_by=decided_by
        )
    return _make


@pytest.fixture
def make_pick():
    """Factory for canonical picks."""
    def _make(
        match_id="m1",
        user_id="ana@example.com",
        home_score=None,
        away_score=None,
        updated_at=KICKOFF - timedelta(days=1),
        created_at=None,
        **extra
    ):
        return Pick(
            id=extra.pop("id", f"pick-{user_id}-{match_id}"),
            match_id=match_id,
            user_id=user_id,
            home_score=home_score,
            away_score=away_score,
            created_at=created_at or updated_at,
            updated_at=updated_at,
            **extra
        )
    return _make


@pytest.fixture
def sample_members():
    """Members known by different aliases (email ids, uid, mixed case)."""
    return [
        Member(id="ana@example.com", name="Ana", uid="uid-ana"),
        Member(id="bruno@example.com", name="Bruno", email="Bruno@Example.com"),
        Member(id="carla@example.com", name="Carla", uid="uid-carla"),
    ]


@pytest.fixture
def sample_picks_docs():
    """Raw storage documents: one current shape, one legacy map-keyed shape."""
    return [
        {
            "userId": "uid-ana",
            "updatedAt": "2026-06-10T12:00:00Z",
            "picks": [
                {
                    "matchId": "m1",
                    "homeScore": 2,
                    "awayScore": 1,
                    "createdAt": "2026-06-09T10:00:00Z",
                    "updatedAt": "2026-06-09T10:00:00Z",
                },
            ],
        },
        {
            "id": "bruno@example.com",
            "updatedAt": "2026-06-10T12:00:00Z",
            "picks": {
                "m1": {"homeScore": "1", "awayScore": "1", "updatedAt": "2026-06-09T11:00:00Z"},
            },
        },
    ]
