"""
FastAPI dependency injection.

Dependencies provide repositories and configuration to route handlers.
Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests
- Configuration is centralized

Each dependency is a function that FastAPI calls when needed.
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..infrastructure.memory import GoalRepository, PlayerRepository, SessionRepository

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Process-wide stores, shared across requests so data persists
_session_repository: SessionRepository | None = None
_goal_repository: GoalRepository | None = None
_player_repository: PlayerRepository | None = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8]}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Repository Dependencies
# ---------------------------------------------------------------------------

def get_session_repository() -> SessionRepository:
    """Provide the shared session/swing store."""
    global _session_repository

    if _session_repository is None:
        _session_repository = SessionRepository()
        logger.info("Created in-memory session repository")
    return _session_repository


def get_goal_repository() -> GoalRepository:
    """Provide the shared goal store."""
    global _goal_repository

    if _goal_repository is None:
        _goal_repository = GoalRepository()
        logger.info("Created in-memory goal repository")
    return _goal_repository


def get_player_repository() -> PlayerRepository:
    """Provide the shared player-level store."""
    global _player_repository

    if _player_repository is None:
        _player_repository = PlayerRepository()
        logger.info("Created in-memory player repository")
    return _player_repository


def reset_repositories() -> None:
    """Drop all stored data. Used by tests between cases."""
    global _session_repository, _goal_repository, _player_repository

    _session_repository = None
    _goal_repository = None
    _player_repository = None


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
SessionRepositoryDep = Annotated[SessionRepository, Depends(get_session_repository)]
GoalRepositoryDep = Annotated[GoalRepository, Depends(get_goal_repository)]
PlayerRepositoryDep = Annotated[PlayerRepository, Depends(get_player_repository)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
