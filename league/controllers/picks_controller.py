"""
Controlador de picks - Normalización, merge y puntuación de picks
"""

from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from league.core.dependencies import DefaultScoring
from league.models.match import Match
from league.models.pick import Pick, PickInput, UserPicksDoc
from league.models.scoring import ScoringConfig
from league.services.pick_service import (
    is_pick_complete,
    merge_picks,
    normalize_picks_docs,
    upsert_pick,
)
from league.services.points_service import PointsService, ScoringConfigError


router = APIRouter(prefix="/picks", tags=["picks"])


class NormalizePicksRequest(BaseModel):
    """Documentos de picks tal cual vienen del storage."""
    docs: list[dict[str, Any]]


class MergePicksRequest(BaseModel):
    server: list[Pick]
    local: list[Pick] = []


class UpsertPickRequest(BaseModel):
    picks: list[Pick] = []
    pick: PickInput

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ScorePickRequest(BaseModel):
    match: Match
    pick: Pick
    scoring: Optional[ScoringConfig] = None


class PickScoreResponse(BaseModel):
    """Desglose de puntos de un pick."""
    exact_points: int
    result_points: int
    knockout_points: int
    total_points: int
    exact_hit: bool
    complete: bool

    class Config:
        alias_generator = to_camel
        populate_by_name = True


@router.post("/normalize", response_model=list[UserPicksDoc])
async def normalize_picks(request: NormalizePicksRequest):
    """
    Convertir documentos de picks (forma actual o legacy) a picks canónicos.

    Un pick por partido y usuario; los documentos sin usuario se descartan.
    """
    return normalize_picks_docs(request.docs)


@router.post("/merge", response_model=list[Pick])
async def merge_user_picks(request: MergePicksRequest):
    """
    Combinar la copia del servidor con la copia local del usuario.

    La copia local solo gana si su updatedAt es estrictamente más nuevo.
    """
    return merge_picks(request.server, request.local)


@router.post("/upsert", response_model=list[Pick])
async def upsert_user_pick(request: UpsertPickRequest):
    """
    Crear o actualizar un pick dentro de la lista del usuario.
    """
    return upsert_pick(request.picks, request.pick, datetime.now(timezone.utc))


@router.post("/score", response_model=PickScoreResponse)
async def score_pick(
    request: ScorePickRequest,
    default_scoring: DefaultScoring
):
    """
    Calcular los puntos de un pick contra el resultado del partido.
    """
    points_service = PointsService(request.scoring or default_scoring)

    try:
        breakdown = points_service.calculate_points(request.match, request.pick)
    except ScoringConfigError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )

    return PickScoreResponse(
        exact_points=breakdown.exact_points,
        result_points=breakdown.result_points,
        knockout_points=breakdown.knockout_points,
        total_points=breakdown.total,
        exact_hit=breakdown.exact_hit,
        complete=is_pick_complete(request.match, request.pick)
    )
