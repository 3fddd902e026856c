"""
Configuración de la app cargada desde variables de entorno (.env)

Todo lo que varía entre desarrollo/producción va aquí. Los services no leen
esta configuración: los controllers la resuelven y se la pasan como parámetros.
"""

import json
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

from league.models.scoring import DEFAULT_SCORING_CONFIG, ScoringConfig

APP_VERSION = "1.0.0"


class Settings(BaseSettings):
    # App
    app_env: str = "development"  # o "production"
    debug: bool = False
    log_level: str = "INFO"

    # CORS - de dónde pueden venir los requests
    cors_origins: str = "http://localhost:5173"  # URLs separadas por coma
    cors_origin_regex: str | None = None  # p.ej. r"https://.*\.vercel\.app", solo con app_env="production"

    # ==================== Puntuación ====================
    # JSON con la tabla de puntos (mismo formato que ScoringConfig, camelCase)
    # Si no se define, se usa DEFAULT_SCORING_CONFIG
    scoring_config_path: str | None = None

    # Cuántos mejores terceros pasan a eliminatorias
    best_third_slots: int = 8

    # ==================== Modo demo ====================
    # Escenarios demo que fuerzan el cuadro de eliminatorias como activo
    # (ids separados por coma)
    knockout_forced_scenarios: str = "end-group-draw-confirmed,mid-knockout,world-cup-final-pending"

    @property
    def forced_scenarios(self) -> frozenset[str]:
        return frozenset(
            scenario.strip()
            for scenario in self.knockout_forced_scenarios.split(",")
            if scenario.strip()
        )

    class Config:
        env_file = ".env"  # Lee desde el archivo .env
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignora campos extras del .env que no estén en el modelo


@lru_cache()
def get_settings() -> Settings:
    """Retorna la instancia de configuración (cacheada para no releerla)"""
    return Settings()


def load_scoring_config(path: str | None) -> ScoringConfig:
    """
    Tabla de puntos configurada.

    Un fichero que no existe o con forma inválida se propaga como error.
    """
    if not path:
        return DEFAULT_SCORING_CONFIG

    raw = Path(path).read_text(encoding="utf-8")
    return ScoringConfig.model_validate(json.loads(raw))
