from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from league.models.match import Side
from league.models.member import Member


class LeaderboardEntry(BaseModel):
    """Entrada en una tabla de clasificación (resultado agregado)"""

    member: Member
    rank: int = 0

    total_points: int = 0
    exact_points: int = 0
    result_points: int = 0
    knockout_points: int = 0
    bracket_points: int = 0

    # Solo para mostrar/exportar, no afectan al orden salvo exact_count
    exact_count: int = 0
    picks_count: int = 0
    earliest_submission: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class LeaderboardUserContext(BaseModel):
    """Posición del usuario actual y sus vecinos en la tabla"""

    current: LeaderboardEntry
    above: Optional[LeaderboardEntry] = None
    below: Optional[LeaderboardEntry] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SimulatedOutcome(BaseModel):
    """Marcador hipotético para un partido aún no jugado"""

    home_score: int
    away_score: int
    advances: Optional[Side] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ProjectedLeaderboardRow(BaseModel):
    entry: LeaderboardEntry
    projected_total_points: int
    projected_delta: int
    projected_rank: int = 0

    class Config:
        alias_generator = to_camel
        populate_by_name = True
