"""In-memory repository implementations."""

from .goals import GoalNotFoundError, GoalRepository
from .players import PlayerRepository
from .sessions import SessionNotFoundError, SessionRepository

__all__ = [
    "GoalNotFoundError",
    "GoalRepository",
    "PlayerRepository",
    "SessionNotFoundError",
    "SessionRepository",
]
