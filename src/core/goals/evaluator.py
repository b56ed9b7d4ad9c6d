"""
Goal evaluation.

Pure state-transition functions over Goal values. Storage is somebody
else's problem: callers hand in goals and a session summary and get back
transitions to apply. The storage side must run one player's evaluation
as a single unit of work so two sessions can't both achieve one goal.
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ..analytics.models import SessionSummary
from .models import Goal, GoalStatus, GoalTransition

logger = logging.getLogger(__name__)


class GoalStateError(ValueError):
    """Raised when an explicit action targets a goal in a terminal state."""
    pass


def evaluate(
    goal: Goal,
    summary: SessionSummary,
    session_date: date,
    session_id: str,
) -> Optional[GoalTransition]:
    """
    Check one goal against a newly ingested session.

    Returns None (unchanged) unless the goal is active, the session falls
    inside the goal window, and the session's statistic for goal_type
    reaches the target. A session from the other device never satisfies
    the goal; that is a no-op, not an error.
    """
    if goal.status is not GoalStatus.ACTIVE:
        return None
    if not goal.covers(session_date):
        return None

    value = summary.value_for(goal.goal_type)
    if value is None:
        return None
    if Decimal(str(value)) < Decimal(str(goal.target_value)):
        return None

    achieved = replace(
        goal,
        status=GoalStatus.ACHIEVED,
        achieved_date=session_date,
        achieved_session_id=session_id,
        milestone_awarded=True,
    )

    logger.info(
        "Goal achieved",
        extra={
            "goal_id": goal.id,
            "player_id": goal.player_id,
            "goal_type": goal.goal_type.value,
            "target_value": goal.target_value,
            "actual_value": value,
            "session_id": session_id,
        }
    )
    return GoalTransition(goal=achieved, from_status=goal.status, to_status=GoalStatus.ACHIEVED)


def evaluate_session(
    goals: Iterable[Goal],
    summary: SessionSummary,
    session_date: date,
    session_id: str,
) -> list[GoalTransition]:
    """Evaluate every goal of a player against one session."""
    transitions = []
    for goal in goals:
        transition = evaluate(goal, summary, session_date, session_id)
        if transition is not None:
            transitions.append(transition)
    return transitions


def expire_goals(goals: Iterable[Goal], current_date: date) -> list[GoalTransition]:
    """
    Periodic sweep: active goals whose window has closed become missed.

    A goal ending today is still live. Terminal goals are untouched.
    """
    transitions = []
    for goal in goals:
        if goal.status is not GoalStatus.ACTIVE or goal.end_date >= current_date:
            continue
        transitions.append(
            GoalTransition(
                goal=replace(goal, status=GoalStatus.MISSED),
                from_status=goal.status,
                to_status=GoalStatus.MISSED,
            )
        )

    if transitions:
        logger.info(
            "Expired goals",
            extra={"count": len(transitions), "current_date": current_date.isoformat()}
        )
    return transitions


def cancel_goal(goal: Goal) -> GoalTransition:
    """Coach-initiated cancellation. Only active goals can be cancelled."""
    if goal.status.is_terminal:
        raise GoalStateError(
            f"Goal {goal.id} is already {goal.status.value} and cannot be cancelled"
        )
    return GoalTransition(
        goal=replace(goal, status=GoalStatus.CANCELLED),
        from_status=goal.status,
        to_status=GoalStatus.CANCELLED,
    )


def revise_goal(
    goal: Goal,
    target_value: Optional[float] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    notes: Optional[str] = None,
) -> GoalTransition:
    """
    Coach edit of an active goal's target, window or notes.

    Status never changes here. Raises GoalStateError for terminal goals and
    ValueError if the edited goal is invalid (non-positive target, window
    ending before it starts).
    """
    if goal.status.is_terminal:
        raise GoalStateError(
            f"Goal {goal.id} is already {goal.status.value} and cannot be edited"
        )

    changes = {
        name: value
        for name, value in (
            ("target_value", target_value),
            ("start_date", start_date),
            ("end_date", end_date),
            ("notes", notes),
        )
        if value is not None
    }
    return GoalTransition(
        goal=replace(goal, **changes),
        from_status=goal.status,
        to_status=goal.status,
    )
