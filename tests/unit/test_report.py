"""
Unit tests for report assembly and progression.
"""

from datetime import date

import pytest

from src.core.analytics.aggregator import aggregate
from src.core.analytics.benchmarks import NoBenchmarkForLevel
from src.core.analytics.grading import grade, label_for
from src.core.analytics.models import (
    BatSpeedSwing,
    ExitVelocitySwing,
    Grade,
    MetricType,
    PerformanceMetric,
    PlayerLevel,
    SessionSummary,
)
from src.core.analytics.report import (
    ReportPayload,
    SessionMeta,
    TrendDirection,
    assemble,
    assemble_progression,
    resolve_grading_level,
    summarize_session,
    trend_direction,
)
from src.core.analytics.zones import aggregate_by_zone


def meta(session_id="s1", on=date(2026, 10, 10), session_type=MetricType.EXIT_VELOCITY):
    return SessionMeta(
        session_id=session_id,
        player_id="p1",
        session_date=on,
        session_type=session_type,
        session_category="Practice",
    )


def payload(session_id, on, grade_value=None, avg=None, max_=None):
    graded = None
    if grade_value is not None:
        graded = Grade(value=grade_value, label=label_for(grade_value))
    return ReportPayload(
        session=meta(session_id, on),
        player_level=PlayerLevel.HIGH_SCHOOL,
        summary=SessionSummary(metric_type=MetricType.EXIT_VELOCITY, count=1, avg=avg, max=max_),
        zone_averages=None,
        grade=graded,
        graded=graded is not None,
    )


@pytest.fixture
def ev_swings() -> list[ExitVelocitySwing]:
    return [
        ExitVelocitySwing(exit_velocity=75.5, strike_zone=5, launch_angle=12.0),
        ExitVelocitySwing(exit_velocity=78.3, strike_zone=5, launch_angle=18.0),
        ExitVelocitySwing(exit_velocity=82.1, strike_zone=1, launch_angle=22.0),
        ExitVelocitySwing(exit_velocity=76.8, strike_zone=None, launch_angle=5.0),
        ExitVelocitySwing(exit_velocity=79.2, strike_zone=12, launch_angle=30.0),
    ]


# ---------------------------------------------------------------------------
# Assemble Tests
# ---------------------------------------------------------------------------

class TestAssemble:
    """Tests for single-session reports."""

    def test_report_carries_summary_grades_and_zones(self, ev_swings):
        summary = aggregate(ev_swings)
        zones = aggregate_by_zone(ev_swings)

        report = assemble(summary, zones, PlayerLevel.HIGH_SCHOOL, meta())

        expected = grade(78.4, PerformanceMetric.AVG_EXIT_VELOCITY, PlayerLevel.HIGH_SCHOOL)
        assert report.graded
        assert report.grade == expected
        assert report.summary.grade == expected.value
        assert report.summary.grade_label is expected.label
        assert report.max_grade == grade(
            82.1, PerformanceMetric.MAX_EXIT_VELOCITY, PlayerLevel.HIGH_SCHOOL
        )
        assert report.zone_averages[5] == 76.9
        assert report.summary.zone_averages is zones

    def test_missing_benchmark_gives_partial_report(self):
        summary = aggregate([BatSpeedSwing(bat_speed=55.0), BatSpeedSwing(bat_speed=57.0)])

        report = assemble(summary, None, PlayerLevel.YOUTH, meta(session_type=MetricType.BAT_SPEED))

        assert not report.graded
        assert report.grade is None
        assert report.max_grade is None
        assert report.summary.avg == 56.0
        assert report.to_dict()["grade_label"] is None

    def test_empty_session_reports_no_data(self):
        summary = aggregate([], MetricType.EXIT_VELOCITY)

        report = assemble(summary, aggregate_by_zone([]), PlayerLevel.HIGH_SCHOOL, meta())

        assert not report.graded
        assert report.to_dict()["avg"] is None
        assert report.to_dict()["count"] == 0

    def test_to_dict_field_names_are_stable(self, ev_swings):
        full = assemble(
            aggregate(ev_swings), aggregate_by_zone(ev_swings), PlayerLevel.HIGH_SCHOOL, meta()
        ).to_dict()
        empty = assemble(
            aggregate([], MetricType.EXIT_VELOCITY), aggregate_by_zone([]),
            PlayerLevel.HIGH_SCHOOL, meta(),
        ).to_dict()

        assert full.keys() == empty.keys()
        assert full["zone_averages"].keys() == empty["zone_averages"].keys()
        assert full["session"] == {
            "id": "s1",
            "player_id": "p1",
            "player_name": None,
            "date": "2026-10-10",
            "type": "exit_velocity",
            "category": "Practice",
        }

    def test_assemble_is_reproducible(self, ev_swings):
        first = assemble(aggregate(ev_swings), aggregate_by_zone(ev_swings), PlayerLevel.COLLEGE, meta())
        second = assemble(aggregate(ev_swings), aggregate_by_zone(ev_swings), PlayerLevel.COLLEGE, meta())

        assert first.to_dict() == second.to_dict()


class TestSummarizeSession:
    def test_fills_zone_and_grade(self, ev_swings):
        summary = summarize_session(ev_swings, PlayerLevel.HIGH_SCHOOL)

        assert summary.avg == 78.4
        assert sorted(summary.zone_averages) == list(range(1, 14))
        assert summary.grade is not None

    def test_propagates_missing_benchmark(self):
        with pytest.raises(NoBenchmarkForLevel):
            summarize_session([BatSpeedSwing(bat_speed=55.0)], PlayerLevel.YOUTH)


class TestResolveGradingLevel:
    """Session snapshot vs the player's current level."""

    def test_session_level_wins_by_default(self):
        assert resolve_grading_level(
            PlayerLevel.HIGH_SCHOOL, PlayerLevel.COLLEGE
        ) is PlayerLevel.HIGH_SCHOOL

    def test_current_level_when_snapshot_disabled(self):
        assert resolve_grading_level(
            PlayerLevel.HIGH_SCHOOL, PlayerLevel.COLLEGE, use_session_level=False
        ) is PlayerLevel.COLLEGE

    def test_falls_back_to_snapshot_without_current_level(self):
        assert resolve_grading_level(
            PlayerLevel.HIGH_SCHOOL, None, use_session_level=False
        ) is PlayerLevel.HIGH_SCHOOL


# ---------------------------------------------------------------------------
# Progression Tests
# ---------------------------------------------------------------------------

class TestTrend:
    """Direction from the two most recent graded sessions."""

    def test_improving(self):
        reports = [payload("a", date(2026, 9, 1), 50), payload("b", date(2026, 9, 8), 55)]
        assert trend_direction(reports) is TrendDirection.UP

    def test_declining(self):
        reports = [payload("a", date(2026, 9, 1), 60), payload("b", date(2026, 9, 8), 55)]
        assert trend_direction(reports) is TrendDirection.DOWN

    def test_equal_grades_are_stable(self):
        reports = [payload("a", date(2026, 9, 1), 55), payload("b", date(2026, 9, 8), 55)]
        assert trend_direction(reports) is TrendDirection.STABLE

    def test_fewer_than_two_grades_is_stable(self):
        assert trend_direction([]) is TrendDirection.STABLE
        assert trend_direction([payload("a", date(2026, 9, 1), 70)]) is TrendDirection.STABLE

    def test_ungraded_sessions_are_skipped(self):
        reports = [
            payload("a", date(2026, 9, 1), 50),
            payload("b", date(2026, 9, 8), 45),
            payload("c", date(2026, 9, 15), None),
        ]
        assert trend_direction(reports) is TrendDirection.DOWN


class TestAssembleProgression:
    def test_orders_sessions_by_date(self):
        progression = assemble_progression([
            payload("late", date(2026, 10, 1), 60, avg=82.5, max_=90.0),
            payload("early", date(2026, 9, 1), 50, avg=80.0, max_=91.2),
        ])

        assert [r.session.session_id for r in progression.reports] == ["early", "late"]
        assert progression.trend is TrendDirection.UP

    def test_deltas_between_consecutive_sessions(self):
        progression = assemble_progression([
            payload("a", date(2026, 9, 1), 50, avg=80.0, max_=91.2),
            payload("b", date(2026, 10, 1), 60, avg=82.5, max_=90.0),
            payload("c", date(2026, 10, 8), None, avg=None, max_=None),
        ])

        assert progression.deltas[0]["avg_change"] == 2.5
        assert progression.deltas[0]["max_change"] == -1.2
        assert progression.deltas[1]["avg_change"] is None

    def test_to_dict(self):
        result = assemble_progression([payload("a", date(2026, 9, 1), 50)]).to_dict()

        assert result["trend"] == "stable"
        assert len(result["sessions"]) == 1
        assert result["deltas"] == []
