"""
Tests para configuración de la aplicación

Valida que la configuración se cargue correctamente desde variables de entorno
y que la tabla de puntos configurable se lea bien.
"""

import json

import pytest
from pydantic import ValidationError
from unittest.mock import patch

from league.core.config import Settings, load_scoring_config
from league.main import build_origin_pattern
from league.models.match import MatchStage
from league.models.scoring import DEFAULT_SCORING_CONFIG
from league.services.knockout_service import DEFAULT_FORCED_SCENARIOS


class TestSettings:
    """Tests para Settings"""

    @patch.dict('os.environ', {
        'LOG_LEVEL': 'DEBUG',
        'CORS_ORIGINS': 'http://localhost:5173,https://league.example.com',
        'BEST_THIRD_SLOTS': '4',
    })
    def test_settings_loads_from_env(self):
        """Validar que Settings carga desde variables de entorno"""
        settings = Settings()

        assert settings.log_level == 'DEBUG'
        assert settings.cors_origins == 'http://localhost:5173,https://league.example.com'
        assert settings.best_third_slots == 4

    def test_settings_default_values(self):
        """Validar valores por defecto de configuración"""
        settings = Settings(_env_file=None)

        assert settings.app_env in ["development", "test"]  # En CI puede ser "test"
        assert isinstance(settings.debug, bool)
        assert settings.best_third_slots == 8
        assert settings.forced_scenarios == DEFAULT_FORCED_SCENARIOS

    @patch.dict('os.environ', {
        'KNOCKOUT_FORCED_SCENARIOS': ' mid-knockout , ,custom-scenario',
    })
    def test_forced_scenarios_are_parsed(self):
        """Validar que los escenarios demo se separen por coma"""
        settings = Settings()

        assert settings.forced_scenarios == frozenset({"mid-knockout", "custom-scenario"})


class TestLoadScoringConfig:
    """Tests para la tabla de puntos configurable"""

    def test_default_when_no_path(self):
        assert load_scoring_config(None) is DEFAULT_SCORING_CONFIG
        assert load_scoring_config("") is DEFAULT_SCORING_CONFIG

    def test_loads_camel_case_json(self, tmp_path):
        path = tmp_path / "scoring.json"
        path.write_text(json.dumps({
            "group": {"exactScoreBoth": 5, "exactScoreOne": 2, "result": 3},
            "knockout": {
                "Final": {"exactScoreBoth": 5, "exactScoreOne": 2, "result": 3, "knockoutWinner": 2},
            },
        }), encoding="utf-8")

        scoring = load_scoring_config(str(path))

        assert scoring.group.exact_score_both == 5
        assert scoring.knockout[MatchStage.FINAL].knockout_winner == 2
        assert scoring.bracket is None

    def test_invalid_config_raises(self, tmp_path):
        path = tmp_path / "scoring.json"
        path.write_text(json.dumps({"group": {"result": 3}}), encoding="utf-8")

        with pytest.raises(ValidationError):
            load_scoring_config(str(path))

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_scoring_config(str(tmp_path / "missing.json"))


class TestOriginPattern:
    """Tests para el patrón de orígenes CORS"""

    def test_pattern_applies_in_production(self):
        config = Settings(_env_file=None, app_env="production", cors_origin_regex=r"https://.*\.vercel\.app")

        pattern = build_origin_pattern(config)

        assert pattern.fullmatch("https://league-git-main.vercel.app")
        assert not pattern.fullmatch("https://evil.example")

    def test_pattern_ignored_outside_production(self):
        config = Settings(_env_file=None, app_env="development", cors_origin_regex=r"https://.*\.vercel\.app")
        assert build_origin_pattern(config) is None

    def test_no_pattern_configured(self):
        assert build_origin_pattern(Settings(_env_file=None, app_env="production")) is None
