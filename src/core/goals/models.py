"""
Goal domain models.

A Goal is a coach-set target for one statistic over a date window.
Goals are values: a transition produces a new Goal rather than editing
the old one, which keeps "achieved at most once" easy to reason about.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional
from uuid import uuid4

from ..analytics.models import PerformanceMetric


class GoalStatus(Enum):
    """Lifecycle: ACTIVE is the only non-terminal state."""
    ACTIVE = "active"
    ACHIEVED = "achieved"
    MISSED = "missed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not GoalStatus.ACTIVE


# Goal types are the gradable session statistics.
GoalType = PerformanceMetric


@dataclass(frozen=True)
class Goal:
    """A player's target for one statistic within [start_date, end_date]."""
    player_id: str
    coach_id: str
    goal_type: GoalType
    target_value: float
    start_date: date
    end_date: date
    id: str = field(default_factory=lambda: str(uuid4()))
    status: GoalStatus = GoalStatus.ACTIVE
    achieved_date: Optional[date] = None
    achieved_session_id: Optional[str] = None
    milestone_awarded: bool = False
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if self.target_value <= 0:
            raise ValueError("Target value must be positive")
        if self.end_date < self.start_date:
            raise ValueError("End date must not be before start date")

    def covers(self, on: date) -> bool:
        """True if `on` is inside the goal window, ends included."""
        return self.start_date <= on <= self.end_date


@dataclass(frozen=True)
class GoalTransition:
    """
    Instruction to move a goal between states.

    `goal` is the goal as it should be stored after the transition.
    Storage applies it only if the stored status still equals
    `from_status`.
    """
    goal: Goal
    from_status: GoalStatus
    to_status: GoalStatus

    @property
    def goal_id(self) -> str:
        return self.goal.id

    @property
    def achieved_session_id(self) -> Optional[str]:
        return self.goal.achieved_session_id

    @property
    def milestone_awarded(self) -> bool:
        return self.goal.milestone_awarded
