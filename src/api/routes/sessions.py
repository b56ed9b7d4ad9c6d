"""
Session API endpoints.

Accepts already-parsed device exports, stores them, and returns the
session report. Goal evaluation for the player runs as part of the same
request so a coach sees "goal achieved" right after uploading.
"""

import logging
from dataclasses import asdict
from datetime import date
from typing import Any, Optional
from uuid import uuid4

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from ...config.settings import Settings
from ...core.analytics.aggregator import InvalidMetricType, aggregate
from ...core.analytics.models import (
    BatSpeedSwing,
    ExitVelocitySwing,
    MetricType,
    PlayerLevel,
    Session,
    SwingRecord,
)
from ...core.analytics.report import (
    ReportPayload,
    SessionMeta,
    assemble,
    resolve_grading_level,
)
from ...core.analytics.zones import aggregate_by_zone
from ...core.goals.models import GoalTransition
from ...infrastructure.memory import (
    PlayerRepository,
    SessionNotFoundError,
    SessionRepository,
)
from ..dependencies import (
    AuthenticatedUser,
    GoalRepositoryDep,
    PlayerRepositoryDep,
    SessionRepositoryDep,
    SettingsDep,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_EXIT_VELOCITY_FIELDS = (
    "exit_velocity", "launch_angle", "distance", "strike_zone",
    "pitch_speed", "horiz_angle", "spray_x", "spray_y",
)
_BAT_SPEED_FIELDS = ("bat_speed", "attack_angle", "time_to_contact")


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class SwingIn(BaseModel):
    """One parsed swing. Only the fields for the session's device may be set."""
    bat_speed: Optional[float] = Field(None, gt=0, description="Bat speed (mph)")
    attack_angle: Optional[float] = Field(None, description="Attack angle (degrees)")
    time_to_contact: Optional[float] = Field(None, gt=0, description="Time to contact (s)")
    exit_velocity: Optional[float] = Field(None, ge=0, description="Exit velocity (mph)")
    launch_angle: Optional[float] = Field(None, description="Launch angle (degrees)")
    distance: Optional[float] = Field(None, ge=0, description="Carry distance (ft)")
    strike_zone: Optional[int] = Field(None, ge=1, le=13, description="Zone cell 1-13")
    pitch_speed: Optional[float] = Field(None, ge=0, description="Pitch speed (mph)")
    horiz_angle: Optional[float] = Field(None, description="Horizontal spray angle")
    spray_x: Optional[float] = None
    spray_y: Optional[float] = None
    tags: list[str] = Field(default_factory=list)
    notes: str = ""

    def to_record(self, session_type: MetricType) -> SwingRecord:
        if session_type is MetricType.BAT_SPEED:
            own, other = _BAT_SPEED_FIELDS, _EXIT_VELOCITY_FIELDS
            record_type = BatSpeedSwing
        else:
            own, other = _EXIT_VELOCITY_FIELDS, _BAT_SPEED_FIELDS
            record_type = ExitVelocitySwing

        stray = [name for name in other if getattr(self, name) is not None]
        if stray:
            raise InvalidMetricType(
                f"{session_type.value} session received fields {', '.join(stray)}"
            )

        return record_type(
            tags=frozenset(self.tags),
            notes=self.notes,
            **{name: getattr(self, name) for name in own},
        )


class IngestSessionRequest(BaseModel):
    """A parsed device export for one player."""
    player_id: str = Field(min_length=1, description="Player identifier")
    session_type: MetricType = Field(description="Device the swings came from")
    session_date: date = Field(description="Date the session was recorded")
    session_category: Optional[str] = Field(None, max_length=50, description="Practice, Live ABs, ...")
    player_level: Optional[PlayerLevel] = Field(
        None,
        description="Player's level at recording time. Updates the player's current level when given."
    )
    swings: list[SwingIn] = Field(default_factory=list)


class GoalTransitionItem(BaseModel):
    """A goal state change caused by a request."""
    goal_id: str
    goal_type: str
    from_status: str
    to_status: str
    achieved_session_id: Optional[str] = None
    milestone_awarded: bool = False

    @classmethod
    def from_transition(cls, transition: GoalTransition) -> "GoalTransitionItem":
        return cls(
            goal_id=transition.goal_id,
            goal_type=transition.goal.goal_type.value,
            from_status=transition.from_status.value,
            to_status=transition.to_status.value,
            achieved_session_id=transition.achieved_session_id,
            milestone_awarded=transition.milestone_awarded,
        )


class IngestSessionResponse(BaseModel):
    """Stored session with its report and any goal changes."""
    session_id: str
    swing_count: int
    report: dict[str, Any]
    goal_transitions: list[GoalTransitionItem]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def build_session_report(
    session: Session,
    swings: list[SwingRecord],
    settings: Settings,
    players: PlayerRepository,
) -> ReportPayload:
    """Aggregate, zone and grade one stored session."""
    level = resolve_grading_level(
        session.player_level,
        players.get_level(session.player_id),
        settings.grade_with_session_level,
    )
    summary = aggregate(swings, session.session_type)
    zone_map = None
    if session.session_type is MetricType.EXIT_VELOCITY:
        zone_map = aggregate_by_zone(swings)

    meta = SessionMeta(
        session_id=session.id,
        player_id=session.player_id,
        session_date=session.session_date,
        session_type=session.session_type,
        session_category=session.session_category,
    )
    return assemble(summary, zone_map, level, meta)


def _load(repository: SessionRepository, session_id: str) -> tuple[Session, list[SwingRecord]]:
    try:
        return repository.get_session(session_id), repository.get_swings(session_id)
    except SessionNotFoundError:
        logger.warning("Session not found", extra={"session_id": session_id})
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )


def _swing_to_dict(swing: SwingRecord) -> dict[str, Any]:
    data = asdict(swing)
    data["tags"] = sorted(swing.tags)
    data["metric_type"] = swing.metric_type.value
    return data


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=IngestSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ingest a session",
    description="Store parsed swings for a player and return the session report",
)
async def ingest_session(
    request: IngestSessionRequest,
    settings: SettingsDep,
    repository: SessionRepositoryDep,
    goals: GoalRepositoryDep,
    players: PlayerRepositoryDep,
    api_key: AuthenticatedUser = None,
) -> IngestSessionResponse:
    """
    Ingest one device export.

    1. Snapshot the player's level onto the session
    2. Store the session and its swings together
    3. Record the new level, only once the upload is accepted
    4. Build the report
    5. Evaluate the player's active goals against the new session
    """
    if len(request.swings) > settings.max_swings_per_session:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Too many swings: limit is {settings.max_swings_per_session}",
        )

    level = (
        request.player_level
        or players.get_level(request.player_id)
        or settings.default_player_level
    )

    session = Session(
        id=str(uuid4()),
        player_id=request.player_id,
        session_type=request.session_type,
        session_date=request.session_date,
        player_level=level,
        session_category=request.session_category,
    )

    try:
        records = [swing.to_record(session.session_type) for swing in request.swings]
        stored = repository.save_session(session, records)
    except ValueError as e:
        # InvalidMetricType and record validation both land here
        logger.warning(
            "Rejected session upload",
            extra={"player_id": request.player_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    if request.player_level is not None:
        players.set_level(request.player_id, request.player_level)

    report = build_session_report(session, stored, settings, players)
    transitions = goals.apply_session(
        session.player_id,
        report.summary,
        session.id,
        session.session_date,
    )

    logger.info(
        "Session ingested",
        extra={
            "session_id": session.id,
            "player_id": session.player_id,
            "swing_count": len(stored),
            "graded": report.graded,
            "goals_achieved": len(transitions),
        }
    )

    return IngestSessionResponse(
        session_id=session.id,
        swing_count=len(stored),
        report=report.to_dict(),
        goal_transitions=[GoalTransitionItem.from_transition(t) for t in transitions],
    )


@router.get(
    "/{session_id}/report",
    status_code=status.HTTP_200_OK,
    summary="Get session report",
    description="Aggregate statistics, grades and hot zones for a stored session",
)
async def get_session_report(
    session_id: str,
    settings: SettingsDep,
    repository: SessionRepositoryDep,
    players: PlayerRepositoryDep,
    api_key: AuthenticatedUser = None,
) -> dict[str, Any]:
    """Recompute the report from stored swings."""
    session, swings = _load(repository, session_id)
    return build_session_report(session, swings, settings, players).to_dict()


@router.get(
    "/{session_id}/swings",
    status_code=status.HTTP_200_OK,
    summary="List session swings",
    description="Raw swing records in swing order",
)
async def get_session_swings(
    session_id: str,
    repository: SessionRepositoryDep,
    api_key: AuthenticatedUser = None,
) -> dict[str, Any]:
    _, swings = _load(repository, session_id)
    return {
        "session_id": session_id,
        "swings": [_swing_to_dict(swing) for swing in swings],
    }


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete session",
    description="Delete a session and its swings. Achieved goals are not reverted.",
)
async def delete_session(
    session_id: str,
    repository: SessionRepositoryDep,
    api_key: AuthenticatedUser = None,
) -> None:
    try:
        repository.delete_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )
