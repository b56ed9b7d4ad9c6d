"""
Unit tests for the 20-80 grading engine and benchmark tables.

High school average exit velocity is used throughout; its anchors are
62.33 (20), 74.54 (50) and 86.75 (80).
"""

from decimal import Decimal

import pytest

from src.core.analytics.benchmarks import (
    BENCHMARKS,
    BenchmarkAnchors,
    NoBenchmarkForLevel,
    get_benchmark,
    levels_with_benchmarks,
)
from src.core.analytics.grading import grade, label_for, milestones, value_for_grade
from src.core.analytics.models import GradeLabel, PerformanceMetric, PlayerLevel

AVG_EV = PerformanceMetric.AVG_EXIT_VELOCITY
HS = PlayerLevel.HIGH_SCHOOL


# ---------------------------------------------------------------------------
# Benchmark Table Tests
# ---------------------------------------------------------------------------

class TestBenchmarks:
    """Tests for the static benchmark table."""

    def test_every_row_is_strictly_increasing(self):
        for anchors in BENCHMARKS.values():
            assert anchors.grade_20 < anchors.grade_50 < anchors.grade_80

    def test_anchors_reject_bad_ordering(self):
        with pytest.raises(ValueError, match="strictly increasing"):
            BenchmarkAnchors(Decimal("70"), Decimal("60"), Decimal("80"))

    def test_youth_has_no_bat_speed_benchmarks(self):
        with pytest.raises(NoBenchmarkForLevel) as exc_info:
            get_benchmark(PerformanceMetric.AVG_BAT_SPEED, PlayerLevel.YOUTH)

        assert exc_info.value.level is PlayerLevel.YOUTH

    def test_levels_with_benchmarks(self):
        assert PlayerLevel.YOUTH not in levels_with_benchmarks(PerformanceMetric.MAX_BAT_SPEED)
        assert levels_with_benchmarks(AVG_EV) == list(PlayerLevel)


# ---------------------------------------------------------------------------
# Grade Tests
# ---------------------------------------------------------------------------

class TestGrade:
    """Tests for mapping raw values onto the scale."""

    def test_anchors_map_exactly(self):
        assert grade(62.33, AVG_EV, HS).value == 20
        assert grade(74.54, AVG_EV, HS).value == 50
        assert grade(86.75, AVG_EV, HS).value == 80

    def test_values_beyond_anchors_saturate(self):
        assert grade(120.0, AVG_EV, HS).value == 80
        assert grade(0, AVG_EV, HS).value == 20
        assert grade(-10, AVG_EV, HS).value == 20

    def test_interpolates_between_anchors(self):
        """Halfway from the 50 anchor to the 80 anchor is a 65."""
        assert grade(80.645, AVG_EV, HS).value == 65
        assert grade(68.435, AVG_EV, HS).value == 35

    def test_half_grades_round_up(self):
        """74.7435 interpolates to exactly 50.5."""
        result = grade(74.7435, AVG_EV, HS)

        assert result.value == 51
        assert result.label is GradeLabel.ABOVE_AVERAGE

    def test_grade_depends_on_level(self):
        """The same swing grades lower against older competition."""
        high_school = grade(80.0, AVG_EV, PlayerLevel.HIGH_SCHOOL).value
        college = grade(80.0, AVG_EV, PlayerLevel.COLLEGE).value

        assert college < high_school

    def test_is_monotonic_and_bounded(self):
        previous = 20
        for tenths in range(500, 1100, 3):
            current = grade(tenths / 10, AVG_EV, HS).value
            assert 20 <= current <= 80
            assert current >= previous
            previous = current

    def test_same_input_same_grade(self):
        assert grade(77.7, AVG_EV, HS) == grade(77.7, AVG_EV, HS)

    def test_missing_benchmark_raises(self):
        with pytest.raises(NoBenchmarkForLevel):
            grade(60.0, PerformanceMetric.AVG_BAT_SPEED, PlayerLevel.YOUTH)

    def test_non_finite_values_are_rejected(self):
        with pytest.raises(ValueError, match="non-finite"):
            grade(float("inf"), AVG_EV, HS)


class TestLabels:
    """Exactly 50 is Average."""

    @pytest.mark.parametrize("value,label", [
        (20, GradeLabel.BELOW_AVERAGE),
        (49, GradeLabel.BELOW_AVERAGE),
        (50, GradeLabel.AVERAGE),
        (51, GradeLabel.ABOVE_AVERAGE),
        (80, GradeLabel.ABOVE_AVERAGE),
    ])
    def test_label_thresholds(self, value, label):
        assert label_for(value) is label

    def test_average_anchor_is_labelled_average(self):
        assert grade(74.54, AVG_EV, HS).label is GradeLabel.AVERAGE


# ---------------------------------------------------------------------------
# Milestone Tests
# ---------------------------------------------------------------------------

class TestMilestones:
    """Tests for the inverse mapping used when setting goals."""

    def test_value_for_grade_inverts_interpolation(self):
        assert value_for_grade(20, AVG_EV, HS) == 62.3
        assert value_for_grade(50, AVG_EV, HS) == 74.5
        assert value_for_grade(65, AVG_EV, HS) == 80.6
        assert value_for_grade(80, AVG_EV, HS) == 86.8

    def test_value_for_grade_rejects_off_scale(self):
        with pytest.raises(ValueError):
            value_for_grade(85, AVG_EV, HS)

    def test_milestones_cover_40_to_80(self):
        rungs = milestones(AVG_EV, HS)

        assert [r["grade"] for r in rungs] == [40, 50, 60, 70, 80]
        assert rungs[0] == {"grade": 40, "label": "Below Average", "value": 70.5}
        assert rungs[-1]["label"] == "Elite"
        values = [r["value"] for r in rungs]
        assert values == sorted(values)
