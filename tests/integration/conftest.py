"""
Fixtures for integration tests
"""

import pytest
from httpx import ASGITransport, AsyncClient

from league.core.config import Settings, get_settings
from league.main import app


@pytest.fixture
def test_settings():
    """Settings without .env so tests see the defaults."""
    return Settings(_env_file=None, scoring_config_path=None, best_third_slots=8)


@pytest.fixture
async def client(test_settings):
    """
    HTTP client for testing API endpoints.

    Overrides the settings dependency with test settings.
    """
    app.dependency_overrides[get_settings] = lambda: test_settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def api_matches():
    """Matches in wire format (camelCase)."""
    return [
        {
            "id": "m1",
            "stage": "Group",
            "group": "A",
            "kickoffUtc": "2026-06-11T19:00:00Z",
            "status": "FINISHED",
            "homeTeam": {"code": "MEX", "name": "Mexico"},
            "awayTeam": {"code": "RSA", "name": "South Africa"},
            "score": {"home": 2, "away": 1},
        },
        {
            "id": "k1",
            "stage": "R16",
            "kickoffUtc": "2026-07-04T19:00:00Z",
            "status": "SCHEDULED",
            "homeTeam": {"code": "ARG", "name": "Argentina"},
            "awayTeam": {"code": "BRA", "name": "Brazil"},
        },
    ]


@pytest.fixture
def api_scoring():
    return {
        "group": {"exactScoreBoth": 5, "exactScoreOne": 2, "result": 3},
        "knockout": {
            "R16": {"exactScoreBoth": 5, "exactScoreOne": 2, "result": 3, "knockoutWinner": 2},
        },
    }
