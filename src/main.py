"""
SwingTrack API application.

create_app() builds a fully wired FastAPI instance; `app` below is the
one uvicorn serves. Tests import `app` directly and drive it through
TestClient.

Local run:
    uvicorn src.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.routes import goals, health, players, sessions
from .config.settings import get_settings
from .core.analytics.benchmarks import BENCHMARKS

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)

# (router, prefix, tag)
ROUTERS = (
    (health.router, "/health", "Health"),
    (sessions.router, "/api/v1/sessions", "Sessions"),
    (players.router, "/api/v1/players", "Players"),
    (goals.router, "/api/v1", "Goals"),
)

DESCRIPTION = """
Swing-sensor analytics for amateur baseball.

## Features

- Ingest parsed bat-speed and exit-velocity sessions
- Session reports with 20-80 grades and strike-zone hot zones
- Player progression over time
- Coach-set performance goals, achieved automatically on upload

## Authentication

Every `/api/v1` endpoint expects an API key in the `X-API-Key` header.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup/shutdown hook.

    Benchmarks are a module-level table loaded at import, so startup
    only reports what it found and checks configuration.
    """
    settings = get_settings()

    logger.info(
        "SwingTrack API starting",
        extra={
            "version": settings.api_version,
            "benchmark_rows": len(BENCHMARKS),
            "grade_with_session_level": settings.grade_with_session_level,
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("SwingTrack API shutting down")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Log the failure with its traceback; the client gets a generic 500."""
    logger.error(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
        },
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error. Please contact support if this persists."},
    )


def create_app() -> FastAPI:
    """Build the application from current settings."""
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router, prefix, tag in ROUTERS:
        app.include_router(router, prefix=prefix, tags=[tag])

    app.add_exception_handler(Exception, handle_unexpected_error)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": settings.api_title,
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    logger.info(
        "FastAPI application created",
        extra={"title": settings.api_title, "routers": len(ROUTERS)}
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=get_settings().log_level.lower(),
    )
