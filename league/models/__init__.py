from .match import Match, MatchScore, MatchStage, MatchStatus, Team, Side, Decision
from .pick import Pick, PickInput, PickOutcome, UserPicksDoc
from .member import Member
from .scoring import ScoringConfig, StageScoring, BracketScoring, PointBreakdown
from .bracket import BracketPrediction, BracketGroupDoc, BracketKnockoutDoc, GroupPrediction
from .leaderboard import (
    LeaderboardEntry,
    LeaderboardUserContext,
    ProjectedLeaderboardRow,
    SimulatedOutcome,
)
from .knockout import FixtureState, KnockoutActivationState

__all__ = [
    "Match",
    "MatchScore",
    "MatchStage",
    "MatchStatus",
    "Team",
    "Side",
    "Decision",
    "Pick",
    "PickInput",
    "PickOutcome",
    "UserPicksDoc",
    "Member",
    "ScoringConfig",
    "StageScoring",
    "BracketScoring",
    "PointBreakdown",
    "BracketPrediction",
    "BracketGroupDoc",
    "BracketKnockoutDoc",
    "GroupPrediction",
    "LeaderboardEntry",
    "LeaderboardUserContext",
    "ProjectedLeaderboardRow",
    "SimulatedOutcome",
    "FixtureState",
    "KnockoutActivationState",
]
