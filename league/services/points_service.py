"""
Servicio de Puntos - Calcula los puntos de un pick contra el resultado real
"""

from league.models.match import Decision, Match, MatchScore, MatchStage
from league.models.pick import Pick, PickOutcome
from league.models.scoring import PointBreakdown, ScoringConfig, StageScoring
from league.services.pick_service import (
    get_pick_outcome,
    is_pick_complete,
    resolve_advancing_side,
)


class PointsServiceError(Exception):
    """Base exception for points service errors."""
    pass


class ScoringConfigError(PointsServiceError):
    """Raised when the scoring config cannot score a match (e.g. missing stage)."""
    pass


TIE_BREAK_DECISIONS = frozenset({Decision.ET, Decision.PENS})


def get_actual_outcome(score: MatchScore) -> PickOutcome:
    if score.home > score.away:
        return PickOutcome.WIN
    if score.home < score.away:
        return PickOutcome.LOSS
    return PickOutcome.DRAW


class PointsService:
    """
    Servicio para calcular puntos por pick.

    Categorías (valores según la tabla de la fase):
    - Marcador exacto: ambos lados (exact_score_both) o solo uno (exact_score_one)
    - Resultado: acertar local / empate / visitante (result)
    - Eliminatorias: acertar quién pasa cuando se decide en prórroga o penaltis
      (knockout_winner)

    Es una función pura: mismo (partido, pick, config) -> mismo desglose.
    """

    def __init__(self, scoring: ScoringConfig):
        self.scoring = scoring

    def resolve_stage_scoring(self, stage: MatchStage) -> StageScoring:
        """Tabla de la fase. Una fase sin tabla es un error de configuración."""
        if stage is MatchStage.GROUP:
            return self.scoring.group

        config = self.scoring.knockout.get(stage)
        if config is None:
            raise ScoringConfigError(f"No scoring rules configured for stage {stage.value}")
        return config

    def calculate_points(self, match: Match, pick: Pick) -> PointBreakdown:
        """
        Calcular el desglose de puntos de un pick.

        Args:
            match: partido con resultado final
            pick: pick canónico del usuario para ese partido

        Returns:
            PointBreakdown con exact/result/knockout (todo a cero si el partido
            no terminó, no tiene marcador o el pick está incompleto)
        """
        if match.score is None or not match.is_finished:
            return PointBreakdown()
        if not is_pick_complete(match, pick):
            return PointBreakdown()

        config = self.resolve_stage_scoring(match.stage)

        exact_points, exact_hit = self._score_exact(match.score, pick, config)

        return PointBreakdown(
            exact_points=exact_points,
            result_points=self._score_result(match.score, pick, config),
            knockout_points=self._score_knockout(match, pick, config),
            exact_hit=exact_hit,
        )

    def _score_exact(
        self,
        score: MatchScore,
        pick: Pick,
        config: StageScoring
    ) -> tuple[int, bool]:
        home_match = pick.home_score == score.home
        away_match = pick.away_score == score.away

        if home_match and away_match:
            return config.exact_score_both, True

        # Exactamente un lado acertado
        if home_match != away_match:
            return config.exact_score_one, False

        return 0, False

    def _score_result(self, score: MatchScore, pick: Pick, config: StageScoring) -> int:
        predicted = get_pick_outcome(pick)
        if predicted is not None and predicted == get_actual_outcome(score):
            return config.result
        return 0

    def _score_knockout(self, match: Match, pick: Pick, config: StageScoring) -> int:
        # Solo eliminatorias decididas en prórroga o penaltis
        if not match.is_knockout or not config.knockout_winner:
            return 0
        if match.decided_by not in TIE_BREAK_DECISIONS or match.winner is None:
            return 0

        predicted = resolve_advancing_side(pick)
        if predicted is not None and predicted == match.winner:
            return config.knockout_winner
        return 0
