"""
Entry point de la API
"""

import logging
import re

from fastapi import FastAPI, Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware

from league.core.config import APP_VERSION, Settings, get_settings

from league.controllers.health_controller import router as health_router
from league.controllers.leaderboard_controller import router as leaderboard_router
from league.controllers.picks_controller import router as picks_router
from league.controllers.knockout_controller import router as knockout_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)

ALLOWED_ORIGINS = frozenset(
    origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()
)


def build_origin_pattern(config: Settings) -> re.Pattern | None:
    """El patrón de orígenes (p.ej. previews de Vercel) solo aplica en producción."""
    if config.app_env != "production" or not config.cors_origin_regex:
        return None
    return re.compile(config.cors_origin_regex)


ALLOWED_ORIGIN_PATTERN = build_origin_pattern(settings)

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Accept, Origin, X-Requested-With",
    "Access-Control-Max-Age": "86400",
}


def origin_allowed(origin: str) -> bool:
    """Explicit origin list first, then the optional origin pattern."""
    if origin in ALLOWED_ORIGINS:
        return True
    return bool(origin and ALLOWED_ORIGIN_PATTERN and ALLOWED_ORIGIN_PATTERN.fullmatch(origin))


class CORSMiddleware(BaseHTTPMiddleware):
    """CORS handling that answers OPTIONS preflight before routing."""

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin", "")
        allowed = origin_allowed(origin)

        if request.method == "OPTIONS":
            if not allowed:
                return Response(status_code=403, content="Origin not allowed")
            return Response(
                status_code=200,
                headers={"Access-Control-Allow-Origin": origin, **PREFLIGHT_HEADERS}
            )

        response = await call_next(request)
        if allowed:
            response.headers["Access-Control-Allow-Origin"] = origin
        return response


# Creo la app
app = FastAPI(
    title="Prediction League API",
    description="Motor de puntuación, tablas y proyecciones de la liga de pronósticos",
    version=APP_VERSION,
    debug=settings.debug
)

app.add_middleware(CORSMiddleware)

# Agrego todos los routers de los controllers al app
app.include_router(health_router)
app.include_router(leaderboard_router)
app.include_router(picks_router)
app.include_router(knockout_router)


@app.get("/")
async def root():
    # Endpoint raíz, sirve para verificar que la API está levantada
    return {
        "name": "Prediction League API",
        "version": APP_VERSION,
        "docs": "/docs"  # Link a la documentación interactiva de Swagger
    }
