"""
Dependencies de FastAPI para configuración y tabla de puntos
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from league.core.config import Settings, get_settings, load_scoring_config
from league.models.scoring import ScoringConfig


@lru_cache()
def _cached_scoring_config(path: str | None) -> ScoringConfig:
    return load_scoring_config(path)


def get_scoring_config(
    settings: Annotated[Settings, Depends(get_settings)]
) -> ScoringConfig:
    """
    Dependency con la tabla de puntos por defecto.

    Los endpoints la usan cuando el request no trae su propia tabla.
    """
    return _cached_scoring_config(settings.scoring_config_path)


# Alias de tipos para que se vea mas limpio en los endpoints
AppSettings = Annotated[Settings, Depends(get_settings)]
DefaultScoring = Annotated[ScoringConfig, Depends(get_scoring_config)]
