from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from league.models.match import MatchStage


class StageScoring(BaseModel):
    """Tabla de puntos para una fase"""

    exact_score_both: int
    exact_score_one: int
    result: int
    knockout_winner: Optional[int] = None  # solo eliminatorias

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class BracketScoring(BaseModel):
    """Puntos del cuadro: clasificados de grupo, mejores terceros y cruces"""

    group_qualifiers: int
    third_place_qualifiers: Optional[int] = None  # si falta, se usa group_qualifiers
    knockout: dict[MatchStage, int] = {}

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ScoringConfig(BaseModel):
    group: StageScoring
    knockout: dict[MatchStage, StageScoring]
    bracket: Optional[BracketScoring] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PointBreakdown(BaseModel):
    """Desglose de puntos de un pick (resultado del motor de puntuación)"""

    exact_points: int = 0
    result_points: int = 0
    knockout_points: int = 0
    exact_hit: bool = False  # acertó el marcador exacto (ambos lados)

    @property
    def total(self) -> int:
        return self.exact_points + self.result_points + self.knockout_points

    class Config:
        alias_generator = to_camel
        populate_by_name = True


_KNOCKOUT_TABLE = {"exact_score_both": 3, "exact_score_one": 1, "result": 2, "knockout_winner": 1}

DEFAULT_SCORING_CONFIG = ScoringConfig(
    group=StageScoring(exact_score_both=3, exact_score_one=1, result=2),
    knockout={
        MatchStage.R32: StageScoring(**_KNOCKOUT_TABLE),
        MatchStage.R16: StageScoring(**_KNOCKOUT_TABLE),
        MatchStage.QF: StageScoring(**_KNOCKOUT_TABLE),
        MatchStage.SF: StageScoring(**_KNOCKOUT_TABLE),
        MatchStage.THIRD: StageScoring(**_KNOCKOUT_TABLE),
        MatchStage.FINAL: StageScoring(**{**_KNOCKOUT_TABLE, "knockout_winner": 3}),
    },
    bracket=BracketScoring(
        group_qualifiers=8,
        third_place_qualifiers=4,
        knockout={
            MatchStage.R32: 2,
            MatchStage.R16: 3,
            MatchStage.QF: 4,
            MatchStage.SF: 5,
            MatchStage.THIRD: 2,
            MatchStage.FINAL: 8,
        },
    ),
)
