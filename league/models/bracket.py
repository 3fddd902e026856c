from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from league.models.match import MatchStage, Side, Team


class GroupPrediction(BaseModel):
    """Primer y segundo clasificado pronosticados para un grupo"""

    first: Optional[str] = None
    second: Optional[str] = None


class BracketGroupDoc(BaseModel):
    """Documento de almacenamiento: pronósticos de fase de grupos"""

    user_id: str
    groups: dict[str, GroupPrediction] = {}
    best_thirds: list[str] = []
    updated_at: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class BracketKnockoutDoc(BaseModel):
    """Documento de almacenamiento: pronósticos de cruces"""

    user_id: str
    knockout: dict[MatchStage, dict[str, Side]] = {}
    updated_at: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class BracketPrediction(BaseModel):
    """Cuadro completo de un usuario (grupos + mejores terceros + cruces)"""

    id: str  # bracket-{user_id}
    user_id: str

    groups: dict[str, GroupPrediction] = {}
    best_thirds: list[str] = []
    knockout: dict[MatchStage, dict[str, Side]] = {}

    created_at: datetime
    updated_at: datetime

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class GroupStanding(BaseModel):
    team: Team
    points: int = 0
    goals_for: int = 0
    goals_against: int = 0

    @property
    def goal_diff(self) -> int:
        return self.goals_for - self.goals_against


class GroupSummary(BaseModel):
    complete: bool
    standings: list[GroupStanding]
