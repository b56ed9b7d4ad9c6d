"""
In-memory repository for sessions and their swings.

This module implements the repository pattern for session data access.
The application asks for sessions and swings in domain terms and never
knows how they are kept. A session and its swings are written together
under one lock, so readers never see a session without its swings.
"""

import logging
import threading
from dataclasses import replace
from typing import Optional, Sequence

from src.core.analytics.aggregator import resolve_metric_type
from src.core.analytics.models import MetricType, Session, SwingRecord


logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """Raised when a requested session doesn't exist."""
    pass


class SessionRepository:
    """
    Repository for sessions and swing records.

    - save_session: Persist a session with all of its swings, atomically
    - get_session / get_swings: Load by session ID
    - list_for_player: A player's sessions in date order
    - delete_session: Remove a session and cascade to its swings
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = {}
        self._swings: dict[str, list[SwingRecord]] = {}

    def save_session(self, session: Session, swings: Sequence[SwingRecord]) -> list[SwingRecord]:
        """
        Store a session and its swings in one step.

        Swings are renumbered in insertion order and stamped with the
        session ID. Raises InvalidMetricType if any swing does not match
        the session's device, in which case nothing is written.
        """
        resolve_metric_type(swings, session.session_type)

        stored = [
            replace(swing, session_id=session.id, swing_number=number)
            for number, swing in enumerate(swings, start=1)
        ]

        with self._lock:
            self._sessions[session.id] = session
            self._swings[session.id] = stored

        logger.info(
            "Saved session",
            extra={
                "session_id": session.id,
                "player_id": session.player_id,
                "session_type": session.session_type.value,
                "swing_count": len(stored),
            }
        )
        return list(stored)

    def get_session(self, session_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def get_swings(self, session_id: str) -> list[SwingRecord]:
        with self._lock:
            if session_id not in self._sessions:
                raise SessionNotFoundError(f"Session {session_id} not found")
            return list(self._swings.get(session_id, []))

    def list_for_player(
        self,
        player_id: str,
        session_type: Optional[MetricType] = None,
    ) -> list[Session]:
        """A player's sessions, oldest first."""
        with self._lock:
            sessions = [
                s for s in self._sessions.values()
                if s.player_id == player_id
                and (session_type is None or s.session_type is session_type)
            ]
        return sorted(sessions, key=lambda s: (s.session_date, s.id))

    def history_for_player(
        self,
        player_id: str,
        session_type: Optional[MetricType] = None,
    ) -> list[tuple[Session, list[SwingRecord]]]:
        """
        A player's sessions with their swings, oldest first.

        Read under one lock so a concurrent delete can't leave a listed
        session without its swings.
        """
        with self._lock:
            history = [
                (s, list(self._swings.get(s.id, [])))
                for s in self._sessions.values()
                if s.player_id == player_id
                and (session_type is None or s.session_type is session_type)
            ]
        return sorted(history, key=lambda pair: (pair[0].session_date, pair[0].id))

    def delete_session(self, session_id: str) -> None:
        """
        Delete a session and its swings.

        Goals achieved by this session keep their back-reference; there is
        no automatic reversal.
        """
        with self._lock:
            if session_id not in self._sessions:
                raise SessionNotFoundError(f"Session {session_id} not found")
            del self._sessions[session_id]
            self._swings.pop(session_id, None)

        logger.info("Deleted session", extra={"session_id": session_id})

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)
