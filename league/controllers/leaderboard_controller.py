"""
Controlador de leaderboards - Endpoints de clasificación

Las tablas se calculan en cada request a partir de los datos que envía el
cliente (partidos, miembros, picks y cuadros). No se guarda nada.
"""

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from league.core.dependencies import AppSettings, DefaultScoring
from league.models.leaderboard import LeaderboardEntry, ProjectedLeaderboardRow, SimulatedOutcome
from league.models.match import Match
from league.models.member import Member
from league.models.scoring import ScoringConfig
from league.services.bracket_service import (
    build_group_standings,
    combine_bracket_predictions,
    normalize_bracket_group_docs,
    normalize_bracket_knockout_docs,
    resolve_best_third_qualifiers,
)
from league.services.identity_service import (
    build_viewer_key_set,
    resolve_leaderboard_user_context,
)
from league.services.leaderboard_service import LeaderboardService, resolve_leaderboard_members
from league.services.pick_service import normalize_picks_docs
from league.services.points_service import ScoringConfigError
from league.services.projection_service import ProjectionService


router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


class LeaderboardRequest(BaseModel):
    """Datos crudos para calcular la tabla."""
    members: list[Member]
    matches: list[Match]
    picks: list[dict[str, Any]] = []  # documentos de picks (forma actual o legacy)
    bracket_group: list[dict[str, Any]] = []  # documentos de cuadro, se validan en el service
    bracket_knockout: list[dict[str, Any]] = []
    best_third_qualifiers: list[str] = []
    scoring: Optional[ScoringConfig] = None
    include_active_users: bool = True  # añade usuarios con picks que no son miembros

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntry]

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UserPositionRequest(BaseModel):
    """Tabla ya calculada y los alias del usuario actual (id, uid, email)."""
    entries: list[LeaderboardEntry]
    viewer: list[Optional[str]]

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ProjectionRequest(BaseModel):
    entries: list[LeaderboardEntry]
    matches: list[Match]
    picks: list[dict[str, Any]] = []
    simulated_outcomes: dict[str, SimulatedOutcome]
    scoring: Optional[ScoringConfig] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


@router.post("", response_model=LeaderboardResponse)
async def build_leaderboard(
    request: LeaderboardRequest,
    settings: AppSettings,
    default_scoring: DefaultScoring
):
    """
    Calcular el leaderboard ordenado.

    Orden: puntos totales, aciertos exactos y nombre.
    """
    picks_docs = normalize_picks_docs(request.picks)
    predictions = combine_bracket_predictions(
        normalize_bracket_group_docs(request.bracket_group),
        normalize_bracket_knockout_docs(request.bracket_knockout),
    )

    members = request.members
    if request.include_active_users:
        members = resolve_leaderboard_members(
            members,
            picks_docs,
            [prediction.user_id for prediction in predictions],
        )

    best_thirds = resolve_best_third_qualifiers(
        build_group_standings(request.matches),
        request.best_third_qualifiers,
        slots=settings.best_third_slots,
    )

    leaderboard_service = LeaderboardService(request.scoring or default_scoring)
    try:
        entries = leaderboard_service.build_leaderboard(
            members,
            request.matches,
            picks_docs,
            predictions,
            best_thirds,
        )
    except ScoringConfigError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )

    return LeaderboardResponse(entries=entries)


@router.post("/me", response_model=dict)
async def get_my_leaderboard_position(request: UserPositionRequest):
    """
    Obtener la posición del usuario actual en el leaderboard.
    """
    context = resolve_leaderboard_user_context(
        request.entries,
        build_viewer_key_set(request.viewer),
    )

    if not context:
        return {"rank": None, "entry": None, "above": None, "below": None}

    return {
        "rank": context.current.rank,
        "entry": context.current.model_dump(mode="json", by_alias=True),
        "above": context.above.model_dump(mode="json", by_alias=True) if context.above else None,
        "below": context.below.model_dump(mode="json", by_alias=True) if context.below else None,
    }


@router.post("/projection", response_model=list[ProjectedLeaderboardRow])
async def build_projected_leaderboard(
    request: ProjectionRequest,
    default_scoring: DefaultScoring
):
    """
    Tabla hipotética ("what-if") con resultados simulados.

    Solo aplica a partidos no terminados; la tabla real no se modifica.
    """
    projection_service = ProjectionService(request.scoring or default_scoring)
    try:
        return projection_service.build_projected_leaderboard(
            request.entries,
            request.matches,
            normalize_picks_docs(request.picks),
            request.simulated_outcomes,
        )
    except ScoringConfigError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )
