from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class MatchStage(str, Enum):
    GROUP = "Group"
    R32 = "R32"
    R16 = "R16"
    QF = "QF"
    SF = "SF"
    THIRD = "Third"
    FINAL = "Final"

    @property
    def is_knockout(self) -> bool:
        return self is not MatchStage.GROUP


class MatchStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PLAY = "IN_PLAY"
    FINISHED = "FINISHED"


class Side(str, Enum):
    """Lado de un partido (local | visitante)"""
    HOME = "HOME"
    AWAY = "AWAY"


class Decision(str, Enum):
    """Cómo se decidió un partido de eliminación"""
    REG = "REG"
    ET = "ET"
    PENS = "PENS"


class Team(BaseModel):
    code: str
    name: str


class MatchScore(BaseModel):
    home: int
    away: int


class Match(BaseModel):
    """Partido del torneo, tal como lo entrega el feed de resultados"""

    id: str
    stage: MatchStage
    group: Optional[str] = None  # solo fase de grupos: "A", "B", ...

    kickoff_utc: datetime
    status: MatchStatus = MatchStatus.SCHEDULED

    home_team: Team
    away_team: Team

    # Solo en partidos terminados
    score: Optional[MatchScore] = None
    winner: Optional[Side] = None
    decided_by: Optional[Decision] = None

    @property
    def is_finished(self) -> bool:
        return self.status is MatchStatus.FINISHED

    @property
    def is_knockout(self) -> bool:
        return self.stage.is_knockout

    class Config:
        alias_generator = to_camel
        populate_by_name = True
