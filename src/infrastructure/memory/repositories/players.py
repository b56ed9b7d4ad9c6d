"""
In-memory record of each player's current level.

Player accounts live elsewhere; this only tracks the level a player is
graded at today, which is snapshotted onto each new session.
"""

import logging
import threading
from typing import Optional

from src.core.analytics.models import PlayerLevel


logger = logging.getLogger(__name__)


class PlayerRepository:
    """Current level per player ID."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._levels: dict[str, PlayerLevel] = {}

    def get_level(self, player_id: str) -> Optional[PlayerLevel]:
        with self._lock:
            return self._levels.get(player_id)

    def set_level(self, player_id: str, level: PlayerLevel) -> None:
        with self._lock:
            previous = self._levels.get(player_id)
            self._levels[player_id] = level

        if previous is not level:
            logger.info(
                "Player level set",
                extra={
                    "player_id": player_id,
                    "previous_level": previous.value if previous else None,
                    "level": level.value,
                }
            )
