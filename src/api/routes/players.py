"""
Player API endpoints.

Player accounts are managed elsewhere. These endpoints cover what the
analytics need from a player: their current level, their progression
across sessions, and the milestone values for their level.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from ...core.analytics.benchmarks import NoBenchmarkForLevel
from ...core.analytics.grading import milestones
from ...core.analytics.models import MetricType, PerformanceMetric, PlayerLevel
from ...core.analytics.report import assemble_progression
from ..dependencies import (
    AuthenticatedUser,
    PlayerRepositoryDep,
    SessionRepositoryDep,
    SettingsDep,
)
from .sessions import build_session_report

logger = logging.getLogger(__name__)

router = APIRouter()


class LevelUpdateRequest(BaseModel):
    """Re-level a player."""
    level: PlayerLevel = Field(description="New current level")


class LevelResponse(BaseModel):
    player_id: str
    level: str


@router.put(
    "/{player_id}/level",
    response_model=LevelResponse,
    status_code=status.HTTP_200_OK,
    summary="Set player level",
    description="Set the level new sessions are recorded at",
)
async def set_player_level(
    player_id: str,
    request: LevelUpdateRequest,
    players: PlayerRepositoryDep,
    api_key: AuthenticatedUser = None,
) -> LevelResponse:
    """
    Existing sessions keep the level they were recorded at unless
    GRADE_WITH_SESSION_LEVEL is turned off.
    """
    players.set_level(player_id, request.level)
    return LevelResponse(player_id=player_id, level=request.level.value)


@router.get(
    "/{player_id}/progression",
    status_code=status.HTTP_200_OK,
    summary="Player progression",
    description="Per-session reports for one device in date order, with trend",
)
async def get_player_progression(
    player_id: str,
    settings: SettingsDep,
    repository: SessionRepositoryDep,
    players: PlayerRepositoryDep,
    metric_type: MetricType = MetricType.EXIT_VELOCITY,
    api_key: AuthenticatedUser = None,
) -> dict[str, Any]:
    reports = [
        build_session_report(session, swings, settings, players)
        for session, swings in repository.history_for_player(player_id, metric_type)
    ]
    progression = assemble_progression(reports)

    logger.info(
        "Built progression",
        extra={
            "player_id": player_id,
            "metric_type": metric_type.value,
            "sessions": len(reports),
            "trend": progression.trend.value,
        }
    )

    result = progression.to_dict()
    result["player_id"] = player_id
    result["metric_type"] = metric_type.value
    return result


@router.get(
    "/{player_id}/milestones",
    status_code=status.HTTP_200_OK,
    summary="Milestone values",
    description="Raw values needed for grades 40-80 at the player's level",
)
async def get_player_milestones(
    player_id: str,
    settings: SettingsDep,
    players: PlayerRepositoryDep,
    metric: PerformanceMetric = PerformanceMetric.AVG_EXIT_VELOCITY,
    level: Optional[PlayerLevel] = None,
    api_key: AuthenticatedUser = None,
) -> dict[str, Any]:
    resolved = level or players.get_level(player_id) or settings.default_player_level
    try:
        rungs = milestones(metric, resolved)
    except NoBenchmarkForLevel as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )

    return {
        "player_id": player_id,
        "metric": metric.value,
        "level": resolved.value,
        "milestones": rungs,
    }
