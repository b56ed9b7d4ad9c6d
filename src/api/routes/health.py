"""
Health check endpoints.

- /health: liveness, answers as long as the process is up
- /health/ready: readiness, checks configuration, benchmarks and stores
"""

import logging
from typing import Any, Callable, Optional

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ...config.settings import Settings
from ...core.analytics.benchmarks import BENCHMARKS
from ...infrastructure.memory import SessionRepository
from ..dependencies import SessionRepositoryDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """One named check; `error` is set only when status is "error"."""
    name: str
    status: str
    error: Optional[str] = None


class ReadinessResponse(BaseModel):
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def _check_configuration(settings: Settings) -> Optional[str]:
    missing_fields = settings.validate_required_fields()
    if missing_fields:
        return f"Missing required fields: {', '.join(missing_fields)}"
    return None


def _check_benchmarks() -> Optional[str]:
    return None if BENCHMARKS else "No benchmark rows loaded"


def _check_storage(repository: SessionRepository) -> Optional[str]:
    repository.count()
    return None


def _run(name: str, check: Callable[[], Optional[str]]) -> ReadinessCheck:
    try:
        error = check()
    except Exception as e:
        logger.error("Readiness check raised", extra={"check": name, "error": str(e)})
        error = str(e)
    return ReadinessCheck(name=name, status="error" if error else "ok", error=error)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        details={"grade_with_session_level": settings.grade_with_session_level},
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="200 when every check passes, 503 otherwise",
    responses={503: {"description": "Service not ready", "model": ReadinessResponse}},
)
async def readiness_check(
    response: Response,
    settings: SettingsDep,
    repository: SessionRepositoryDep,
) -> ReadinessResponse:
    checks = [
        _run("configuration", lambda: _check_configuration(settings)),
        _run("benchmarks", _check_benchmarks),
        _run("storage", lambda: _check_storage(repository)),
    ]

    ready = all(check.status == "ok" for check in checks)
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "Readiness check failed",
            extra={"failed": [c.name for c in checks if c.status != "ok"]}
        )

    return ReadinessResponse(
        status="ready" if ready else "not_ready",
        version=__version__,
        checks=checks,
    )
