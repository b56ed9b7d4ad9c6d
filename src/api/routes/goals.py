"""
Goal API endpoints.

Coaches set targets for a player; sessions achieve them; a periodic
sweep marks the ones that ran out of time. Achievement happens during
session ingestion, not here.
"""

import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field, model_validator

from ...core.goals.evaluator import GoalStateError
from ...core.goals.models import Goal, GoalStatus, GoalType
from ...infrastructure.memory import GoalNotFoundError
from ..dependencies import AuthenticatedUser, GoalRepositoryDep
from .sessions import GoalTransitionItem

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class CreateGoalRequest(BaseModel):
    """A coach's target for one statistic."""
    coach_id: str = Field(min_length=1)
    goal_type: GoalType
    target_value: float = Field(gt=0, description="Value to reach, e.g. 85.5 mph")
    start_date: date
    end_date: date
    notes: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def check_window(self) -> "CreateGoalRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class UpdateGoalRequest(BaseModel):
    """Fields a coach may change on an active goal. Omitted fields are kept."""
    target_value: Optional[float] = Field(None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=1000)


class GoalItem(BaseModel):
    id: str
    player_id: str
    coach_id: str
    goal_type: str
    target_value: float
    start_date: date
    end_date: date
    status: str
    achieved_date: Optional[date] = None
    achieved_session_id: Optional[str] = None
    milestone_awarded: bool = False
    notes: Optional[str] = None

    @classmethod
    def from_goal(cls, goal: Goal) -> "GoalItem":
        return cls(
            id=goal.id,
            player_id=goal.player_id,
            coach_id=goal.coach_id,
            goal_type=goal.goal_type.value,
            target_value=goal.target_value,
            start_date=goal.start_date,
            end_date=goal.end_date,
            status=goal.status.value,
            achieved_date=goal.achieved_date,
            achieved_session_id=goal.achieved_session_id,
            milestone_awarded=goal.milestone_awarded,
            notes=goal.notes,
        )


class SweepRequest(BaseModel):
    """Run the expiry sweep as of a date (defaults to today)."""
    as_of: Optional[date] = None


class SweepResponse(BaseModel):
    as_of: date
    transitions: list[GoalTransitionItem]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/players/{player_id}/goals",
    response_model=GoalItem,
    status_code=status.HTTP_201_CREATED,
    summary="Create goal",
)
async def create_goal(
    player_id: str,
    request: CreateGoalRequest,
    goals: GoalRepositoryDep,
    api_key: AuthenticatedUser = None,
) -> GoalItem:
    goal = goals.add(Goal(
        player_id=player_id,
        coach_id=request.coach_id,
        goal_type=request.goal_type,
        target_value=request.target_value,
        start_date=request.start_date,
        end_date=request.end_date,
        notes=request.notes,
    ))
    return GoalItem.from_goal(goal)


@router.get(
    "/players/{player_id}/goals",
    response_model=list[GoalItem],
    status_code=status.HTTP_200_OK,
    summary="List goals",
)
async def list_goals(
    player_id: str,
    goals: GoalRepositoryDep,
    status_filter: Annotated[Optional[GoalStatus], Query(alias="status")] = None,
    api_key: AuthenticatedUser = None,
) -> list[GoalItem]:
    return [GoalItem.from_goal(g) for g in goals.list_for_player(player_id, status_filter)]


@router.post(
    "/goals/{goal_id}/cancel",
    response_model=GoalItem,
    status_code=status.HTTP_200_OK,
    summary="Cancel goal",
    description="Cancel an active goal. Terminal goals cannot be cancelled.",
)
async def cancel_goal(
    goal_id: str,
    goals: GoalRepositoryDep,
    api_key: AuthenticatedUser = None,
) -> GoalItem:
    try:
        transition = goals.cancel(goal_id)
    except GoalNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Goal not found"
        )
    except GoalStateError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    return GoalItem.from_goal(transition.goal)


@router.patch(
    "/goals/{goal_id}",
    response_model=GoalItem,
    status_code=status.HTTP_200_OK,
    summary="Edit goal",
    description="Change the target, window or notes of an active goal",
)
async def update_goal(
    goal_id: str,
    request: UpdateGoalRequest,
    goals: GoalRepositoryDep,
    api_key: AuthenticatedUser = None,
) -> GoalItem:
    try:
        transition = goals.revise(goal_id, **request.model_dump(exclude_none=True))
    except GoalNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Goal not found"
        )
    except GoalStateError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    return GoalItem.from_goal(transition.goal)


@router.delete(
    "/goals/{goal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete goal",
)
async def delete_goal(
    goal_id: str,
    goals: GoalRepositoryDep,
    api_key: AuthenticatedUser = None,
) -> None:
    try:
        goals.delete(goal_id)
    except GoalNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Goal not found"
        )


@router.post(
    "/goals/sweep",
    response_model=SweepResponse,
    status_code=status.HTTP_200_OK,
    summary="Expire overdue goals",
    description="Mark active goals past their end date as missed. Meant for a scheduler.",
)
async def sweep_goals(
    request: SweepRequest,
    goals: GoalRepositoryDep,
    api_key: AuthenticatedUser = None,
) -> SweepResponse:
    as_of = request.as_of or date.today()
    transitions = goals.sweep_expired(as_of)

    logger.info(
        "Goal sweep finished",
        extra={"as_of": as_of.isoformat(), "missed": len(transitions)}
    )
    return SweepResponse(
        as_of=as_of,
        transitions=[GoalTransitionItem.from_transition(t) for t in transitions],
    )
