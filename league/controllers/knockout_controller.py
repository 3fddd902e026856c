"""
Controlador de eliminatorias - Estado de activación del cuadro
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from league.core.dependencies import AppSettings
from league.models.knockout import KnockoutActivationState
from league.models.match import Match
from league.services.knockout_service import infer_fixture_state, resolve_knockout_activation


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/knockout", tags=["knockout"])


class KnockoutActivationRequest(BaseModel):
    """
    Flags del calendario o, si faltan, los partidos para inferirlos.
    """
    mode: str = "live"  # "live" o "demo"
    demo_scenario_override: Optional[str] = None
    group_complete: Optional[bool] = None
    draw_ready: Optional[bool] = None
    knockout_started: Optional[bool] = None
    matches: list[Match] = []
    now: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


@router.post("/activation", response_model=KnockoutActivationState)
async def get_knockout_activation(
    request: KnockoutActivationRequest,
    settings: AppSettings
):
    """
    Decidir si el cuadro de eliminatorias está activo.

    En modo demo un escenario forzado lo mantiene activo aunque el
    calendario diga lo contrario; en ese caso se devuelve un aviso.
    """
    inferred = infer_fixture_state(request.matches, request.now or datetime.now(timezone.utc))

    def flag(value: Optional[bool], fallback: bool) -> bool:
        return fallback if value is None else value

    state = resolve_knockout_activation(
        mode=request.mode,
        demo_scenario_override=request.demo_scenario_override,
        group_complete=flag(request.group_complete, inferred.group_complete),
        draw_ready=flag(request.draw_ready, inferred.draw_ready),
        knockout_started=flag(request.knockout_started, inferred.knockout_started),
        forced_scenarios=settings.forced_scenarios,
    )

    if state.mismatch_warning:
        logger.warning(state.mismatch_warning)

    return state
