"""
Goal tracking.

Goals are evaluated against each new session and swept for expiry on a
schedule. Transitions are returned, not applied.
"""

from .models import Goal, GoalStatus, GoalTransition, GoalType
from .evaluator import (
    GoalStateError,
    cancel_goal,
    evaluate,
    evaluate_session,
    expire_goals,
    revise_goal,
)

__all__ = [
    "Goal",
    "GoalStatus",
    "GoalTransition",
    "GoalType",
    "GoalStateError",
    "cancel_goal",
    "evaluate",
    "evaluate_session",
    "expire_goals",
    "revise_goal",
]
