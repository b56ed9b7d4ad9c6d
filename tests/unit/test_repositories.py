"""
Unit tests for the in-memory repositories.

Includes a concurrency test: two sessions for the same player are
evaluated at once and exactly one of them may achieve a goal.
"""

import threading
from datetime import date

import pytest

from src.core.analytics.aggregator import InvalidMetricType
from src.core.analytics.models import (
    BatSpeedSwing,
    ExitVelocitySwing,
    MetricType,
    PerformanceMetric,
    PlayerLevel,
    Session,
    SessionSummary,
)
from src.core.goals import Goal, GoalStateError, GoalStatus
from src.infrastructure.memory import (
    GoalNotFoundError,
    GoalRepository,
    PlayerRepository,
    SessionNotFoundError,
    SessionRepository,
)


def make_session(session_id="s1", player_id="p1", on=date(2026, 10, 10),
                 session_type=MetricType.EXIT_VELOCITY) -> Session:
    return Session(
        id=session_id,
        player_id=player_id,
        session_type=session_type,
        session_date=on,
    )


def make_goal(player_id="p1", target=85.0) -> Goal:
    return Goal(
        player_id=player_id,
        coach_id="c1",
        goal_type=PerformanceMetric.AVG_EXIT_VELOCITY,
        target_value=target,
        start_date=date(2026, 10, 1),
        end_date=date(2026, 10, 31),
    )


def ev_summary(avg: float) -> SessionSummary:
    return SessionSummary(metric_type=MetricType.EXIT_VELOCITY, count=3, swing_count=3, avg=avg, max=avg)


# ---------------------------------------------------------------------------
# Session Repository Tests
# ---------------------------------------------------------------------------

class TestSessionRepository:
    """Tests for session and swing storage."""

    def test_save_renumbers_and_stamps_swings(self):
        repo = SessionRepository()
        swings = [
            ExitVelocitySwing(exit_velocity=80.0, swing_number=7),
            ExitVelocitySwing(exit_velocity=82.0, swing_number=3),
        ]

        stored = repo.save_session(make_session(), swings)

        assert [s.swing_number for s in stored] == [1, 2]
        assert all(s.session_id == "s1" for s in stored)
        assert repo.get_swings("s1") == stored

    def test_mismatched_swings_write_nothing(self):
        repo = SessionRepository()

        with pytest.raises(InvalidMetricType):
            repo.save_session(make_session(), [BatSpeedSwing(bat_speed=60.0)])

        assert repo.count() == 0
        with pytest.raises(SessionNotFoundError):
            repo.get_session("s1")

    def test_list_for_player_is_date_ordered(self):
        repo = SessionRepository()
        repo.save_session(make_session("late", on=date(2026, 10, 12)), [])
        repo.save_session(make_session("early", on=date(2026, 10, 1)), [])
        repo.save_session(make_session("other", player_id="p2"), [])
        repo.save_session(
            make_session("bat", on=date(2026, 10, 5), session_type=MetricType.BAT_SPEED), []
        )

        assert [s.id for s in repo.list_for_player("p1")] == ["early", "bat", "late"]
        assert [s.id for s in repo.list_for_player("p1", MetricType.EXIT_VELOCITY)] == ["early", "late"]

    def test_delete_cascades_to_swings(self):
        repo = SessionRepository()
        repo.save_session(make_session(), [ExitVelocitySwing(exit_velocity=80.0)])

        repo.delete_session("s1")

        with pytest.raises(SessionNotFoundError):
            repo.get_swings("s1")
        with pytest.raises(SessionNotFoundError):
            repo.delete_session("s1")


class TestPlayerRepository:
    def test_unknown_player_has_no_level(self):
        assert PlayerRepository().get_level("nobody") is None

    def test_set_level(self):
        repo = PlayerRepository()
        repo.set_level("p1", PlayerLevel.COLLEGE)

        assert repo.get_level("p1") is PlayerLevel.COLLEGE


# ---------------------------------------------------------------------------
# Goal Repository Tests
# ---------------------------------------------------------------------------

class TestGoalRepository:
    """Tests for goal storage and transitions."""

    def test_get_unknown_goal_raises(self):
        with pytest.raises(GoalNotFoundError):
            GoalRepository().get("missing")

    def test_apply_session_achieves_once(self):
        repo = GoalRepository()
        goal = repo.add(make_goal())

        first = repo.apply_session("p1", ev_summary(86.0), "s1", date(2026, 10, 15))
        second = repo.apply_session("p1", ev_summary(90.0), "s2", date(2026, 10, 16))

        assert len(first) == 1
        assert second == []
        stored = repo.get(goal.id)
        assert stored.status is GoalStatus.ACHIEVED
        assert stored.achieved_session_id == "s1"

    def test_apply_session_only_touches_that_player(self):
        repo = GoalRepository()
        other = repo.add(make_goal(player_id="p2"))

        repo.apply_session("p1", ev_summary(99.0), "s1", date(2026, 10, 15))

        assert repo.get(other.id).status is GoalStatus.ACTIVE

    def test_concurrent_sessions_achieve_goal_exactly_once(self):
        repo = GoalRepository()
        goal = repo.add(make_goal())
        barrier = threading.Barrier(8)
        results: list[list] = []
        results_lock = threading.Lock()

        def upload(session_id: str) -> None:
            barrier.wait()
            applied = repo.apply_session("p1", ev_summary(90.0), session_id, date(2026, 10, 15))
            with results_lock:
                results.append(applied)

        threads = [threading.Thread(target=upload, args=(f"s{i}",)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        winners = [t for applied in results for t in applied]
        assert len(winners) == 1
        assert repo.get(goal.id).achieved_session_id == winners[0].achieved_session_id

    def test_sweep_marks_overdue_goals_missed(self):
        repo = GoalRepository()
        overdue = repo.add(make_goal())
        achieved = repo.add(make_goal(target=80.0))
        repo.apply_session("p1", ev_summary(82.0), "s1", date(2026, 10, 15))

        transitions = repo.sweep_expired(date(2026, 11, 1))

        assert [t.goal_id for t in transitions] == [overdue.id]
        assert repo.get(overdue.id).status is GoalStatus.MISSED
        assert repo.get(achieved.id).status is GoalStatus.ACHIEVED

    def test_sweep_is_idempotent(self):
        repo = GoalRepository()
        repo.add(make_goal())

        repo.sweep_expired(date(2026, 11, 1))

        assert repo.sweep_expired(date(2026, 11, 2)) == []

    def test_cancel(self):
        repo = GoalRepository()
        goal = repo.add(make_goal())

        repo.cancel(goal.id)

        assert repo.get(goal.id).status is GoalStatus.CANCELLED
        with pytest.raises(GoalStateError):
            repo.cancel(goal.id)

    def test_cancelled_goal_is_not_achieved(self):
        repo = GoalRepository()
        goal = repo.add(make_goal())
        repo.cancel(goal.id)

        assert repo.apply_session("p1", ev_summary(99.0), "s1", date(2026, 10, 15)) == []

    def test_list_filters_by_status(self):
        repo = GoalRepository()
        kept = repo.add(make_goal())
        cancelled = repo.add(make_goal(target=90.0))
        repo.cancel(cancelled.id)

        assert [g.id for g in repo.list_for_player("p1", GoalStatus.ACTIVE)] == [kept.id]
        assert len(repo.list_for_player("p1")) == 2

    def test_revise_keeps_goal_active(self):
        repo = GoalRepository()
        goal = repo.add(make_goal())

        repo.revise(goal.id, target_value=80.0, start_date=None)

        stored = repo.get(goal.id)
        assert stored.target_value == 80.0
        assert stored.status is GoalStatus.ACTIVE
        assert len(repo.apply_session("p1", ev_summary(81.0), "s1", date(2026, 10, 15))) == 1

    def test_revise_invalid_edit_leaves_goal_untouched(self):
        repo = GoalRepository()
        goal = repo.add(make_goal())

        with pytest.raises(ValueError):
            repo.revise(goal.id, target_value=-1.0)

        assert repo.get(goal.id).target_value == 85.0

    def test_delete(self):
        repo = GoalRepository()
        goal = repo.add(make_goal())

        repo.delete(goal.id)

        assert repo.list_for_player("p1") == []
        with pytest.raises(GoalNotFoundError):
            repo.delete(goal.id)


class TestSessionHistory:
    """Sessions paired with their swings for progression reports."""

    def test_history_pairs_sessions_with_swings_in_date_order(self):
        repo = SessionRepository()
        repo.save_session(make_session("late", on=date(2026, 10, 12)), [ExitVelocitySwing(exit_velocity=85.0)])
        repo.save_session(make_session("early", on=date(2026, 10, 1)), [ExitVelocitySwing(exit_velocity=80.0)])

        history = repo.history_for_player("p1")

        assert [session.id for session, _ in history] == ["early", "late"]
        assert history[0][1][0].exit_velocity == 80.0

    def test_history_never_lists_a_session_without_its_swings(self):
        """A delete racing with the read either removes the pair or leaves it whole."""
        repo = SessionRepository()
        for i in range(200):
            repo.save_session(make_session(f"s{i:03d}"), [ExitVelocitySwing(exit_velocity=80.0)])
        done = threading.Event()

        def delete_all() -> None:
            for i in range(200):
                repo.delete_session(f"s{i:03d}")
            done.set()

        deleter = threading.Thread(target=delete_all)
        deleter.start()
        while not done.is_set():
            for _, swings in repo.history_for_player("p1"):
                assert len(swings) == 1
        deleter.join()

        assert repo.history_for_player("p1") == []
