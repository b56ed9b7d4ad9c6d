"""
In-memory storage for local development and tests.

Holds sessions, swings, goals and player levels in process memory.
Enables running the full API without a database.
"""

from .repositories import (
    GoalNotFoundError,
    GoalRepository,
    PlayerRepository,
    SessionNotFoundError,
    SessionRepository,
)

__all__ = [
    "GoalNotFoundError",
    "GoalRepository",
    "PlayerRepository",
    "SessionNotFoundError",
    "SessionRepository",
]
