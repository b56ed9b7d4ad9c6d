"""
In-memory repository for player goals.

Goals are kept arena-style, keyed by goal ID. Every state change goes
through the pure functions in src.core.goals and is committed here with
a compare-and-set on the previous status.

Evaluation for one player runs under that player's lock. Two sessions
uploaded at the same moment are therefore evaluated one after the other,
and the second sees the goal already achieved.
"""

import logging
import threading
from collections import defaultdict
from datetime import date
from typing import Optional

from src.core.analytics.models import SessionSummary
from src.core.goals.evaluator import (
    cancel_goal,
    evaluate_session,
    expire_goals,
    revise_goal,
)
from src.core.goals.models import Goal, GoalStatus, GoalTransition


logger = logging.getLogger(__name__)


class GoalNotFoundError(Exception):
    """Raised when a requested goal doesn't exist."""
    pass


class GoalRepository:
    """Repository for goals with per-player serialized evaluation."""

    def __init__(self) -> None:
        self._goals: dict[str, Goal] = {}
        self._store_lock = threading.Lock()
        self._player_locks: defaultdict[str, threading.Lock] = defaultdict(threading.Lock)
        self._player_locks_guard = threading.Lock()

    def _lock_for(self, player_id: str) -> threading.Lock:
        with self._player_locks_guard:
            return self._player_locks[player_id]

    def add(self, goal: Goal) -> Goal:
        with self._store_lock:
            self._goals[goal.id] = goal

        logger.info(
            "Created goal",
            extra={
                "goal_id": goal.id,
                "player_id": goal.player_id,
                "goal_type": goal.goal_type.value,
                "target_value": goal.target_value,
            }
        )
        return goal

    def get(self, goal_id: str) -> Goal:
        with self._store_lock:
            goal = self._goals.get(goal_id)
        if goal is None:
            raise GoalNotFoundError(f"Goal {goal_id} not found")
        return goal

    def list_for_player(
        self,
        player_id: str,
        status: Optional[GoalStatus] = None,
    ) -> list[Goal]:
        with self._store_lock:
            goals = [
                g for g in self._goals.values()
                if g.player_id == player_id and (status is None or g.status is status)
            ]
        return sorted(goals, key=lambda g: (g.start_date, g.id))

    def _commit(self, transition: GoalTransition) -> bool:
        """Apply a transition if the stored goal is still in from_status."""
        with self._store_lock:
            current = self._goals.get(transition.goal_id)
            if current is None or current.status is not transition.from_status:
                logger.warning(
                    "Discarded stale goal transition",
                    extra={
                        "goal_id": transition.goal_id,
                        "expected_status": transition.from_status.value,
                        "to_status": transition.to_status.value,
                    }
                )
                return False
            self._goals[transition.goal_id] = transition.goal
            return True

    def apply_session(
        self,
        player_id: str,
        summary: SessionSummary,
        session_id: str,
        session_date: date,
    ) -> list[GoalTransition]:
        """
        Evaluate a player's active goals against a new session and store
        the results, as one unit of work per player.
        """
        with self._lock_for(player_id):
            active = self.list_for_player(player_id, GoalStatus.ACTIVE)
            transitions = evaluate_session(active, summary, session_date, session_id)
            return [t for t in transitions if self._commit(t)]

    def sweep_expired(self, current_date: date) -> list[GoalTransition]:
        """Mark overdue active goals as missed, player by player."""
        with self._store_lock:
            player_ids = sorted({g.player_id for g in self._goals.values()})

        applied = []
        for player_id in player_ids:
            with self._lock_for(player_id):
                goals = self.list_for_player(player_id, GoalStatus.ACTIVE)
                applied.extend(t for t in expire_goals(goals, current_date) if self._commit(t))
        return applied

    def cancel(self, goal_id: str) -> GoalTransition:
        """Cancel an active goal. Raises GoalStateError if it is terminal."""
        goal = self.get(goal_id)
        with self._lock_for(goal.player_id):
            transition = cancel_goal(self.get(goal_id))
            self._commit(transition)

        logger.info("Cancelled goal", extra={"goal_id": goal_id})
        return transition

    def revise(self, goal_id: str, **changes) -> GoalTransition:
        """
        Edit an active goal's target, window or notes.

        Raises GoalStateError if it is terminal, ValueError if the edit
        leaves the goal invalid.
        """
        goal = self.get(goal_id)
        with self._lock_for(goal.player_id):
            transition = revise_goal(self.get(goal_id), **changes)
            self._commit(transition)

        logger.info(
            "Revised goal",
            extra={"goal_id": goal_id, "fields": sorted(k for k, v in changes.items() if v is not None)}
        )
        return transition

    def delete(self, goal_id: str) -> None:
        goal = self.get(goal_id)
        with self._lock_for(goal.player_id):
            with self._store_lock:
                if self._goals.pop(goal_id, None) is None:
                    raise GoalNotFoundError(f"Goal {goal_id} not found")

        logger.info("Deleted goal", extra={"goal_id": goal_id})
