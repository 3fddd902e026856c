"""
Knockout activation - decides whether the knockout bracket counts as "active".

Real fixture state is the source of truth. In demo mode a scenario override
can force activation; the resolver then explains what the fixtures say, but
the warning never blocks the forced state.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from league.models.knockout import FixtureState, KnockoutActivationState
from league.models.match import Match, MatchStage, MatchStatus
from league.services.pick_service import as_utc

DEFAULT_FORCED_SCENARIOS = frozenset({
    "end-group-draw-confirmed",
    "mid-knockout",
    "world-cup-final-pending",
})

UNRESOLVED_TEAM_CODES = frozenset({"", "TBD"})


def _inference_reason(group_complete: bool, draw_ready: bool, knockout_started: bool) -> str:
    blockers = []
    if not group_complete:
        blockers.append("group stage is not complete")
    if not draw_ready:
        blockers.append("fixture draw is incomplete")
    if knockout_started:
        blockers.append("knockout has already started")
    if not blockers:
        return "fixture inference marks knockout as active"
    return f"fixture inference marks knockout inactive because {', '.join(blockers)}"


def resolve_knockout_activation(
    mode: str,
    demo_scenario_override: Optional[str],
    group_complete: bool,
    draw_ready: bool,
    knockout_started: bool,
    forced_scenarios: Iterable[str] = DEFAULT_FORCED_SCENARIOS
) -> KnockoutActivationState:
    inferred_active = group_complete and draw_ready and not knockout_started
    forced = (
        mode == "demo"
        and demo_scenario_override is not None
        and demo_scenario_override in frozenset(forced_scenarios)
    )

    if not forced:
        return KnockoutActivationState(
            active=inferred_active,
            inferred_active=inferred_active,
            forced_by_override=False,
            mismatch_warning=None,
            source_label="Fixture inference",
        )

    warning = None
    if not inferred_active:
        reason = _inference_reason(group_complete, draw_ready, knockout_started)
        warning = (
            f"Demo scenario override keeps knockout active ({demo_scenario_override}) "
            f"while {reason}."
        )

    return KnockoutActivationState(
        active=True,
        inferred_active=inferred_active,
        forced_by_override=True,
        mismatch_warning=warning,
        source_label=f"Demo scenario override ({demo_scenario_override})",
    )


def _is_resolved_team_code(code: str) -> bool:
    return code.strip().upper() not in UNRESOLVED_TEAM_CODES


def infer_fixture_state(matches: list[Match], now: datetime) -> FixtureState:
    """
    Fixture flags for the activation resolver.

    - group_complete: there are group matches and all of them finished
    - draw_ready: every round-of-32 match has both teams resolved
    - knockout_started: a knockout match left SCHEDULED, or the first
      knockout kickoff is in the past
    """
    group_matches = [m for m in matches if m.stage is MatchStage.GROUP]
    knockout_matches = [m for m in matches if m.is_knockout]
    round_of_32 = [m for m in knockout_matches if m.stage is MatchStage.R32]

    group_complete = bool(group_matches) and all(m.is_finished for m in group_matches)
    draw_ready = bool(round_of_32) and all(
        _is_resolved_team_code(m.home_team.code) and _is_resolved_team_code(m.away_team.code)
        for m in round_of_32
    )

    knockout_started = any(m.status is not MatchStatus.SCHEDULED for m in knockout_matches)
    if not knockout_started and knockout_matches:
        first_kickoff = min(as_utc(m.kickoff_utc) for m in knockout_matches)
        knockout_started = as_utc(now) >= first_kickoff

    return FixtureState(
        group_complete=group_complete,
        draw_ready=draw_ready,
        knockout_started=knockout_started,
    )
