"""
20-80 scouting grades.

A raw statistic is placed on the scale by linear interpolation between
the benchmark anchors for its level: the 20 anchor maps to 20, the 50
anchor to 50, the 80 anchor to 80. Anything past an end anchor saturates.
The interpolated grade is rounded half-up to a whole number.
"""

from decimal import Decimal
from typing import Union

from .aggregator import round_half_away
from .benchmarks import BenchmarkAnchors, get_benchmark
from .models import Grade, GradeLabel, PerformanceMetric, PlayerLevel


MIN_GRADE = 20
AVERAGE_GRADE = 50
MAX_GRADE = 80

# Scouting names for the milestone rungs coaches set goals against.
MILESTONE_NAMES = {
    40: "Below Average",
    50: "Average",
    60: "Above Average",
    70: "Well Above Average",
    80: "Elite",
}

_SEGMENT = Decimal(AVERAGE_GRADE - MIN_GRADE)


def label_for(grade_value: int) -> GradeLabel:
    if grade_value < AVERAGE_GRADE:
        return GradeLabel.BELOW_AVERAGE
    if grade_value == AVERAGE_GRADE:
        return GradeLabel.AVERAGE
    return GradeLabel.ABOVE_AVERAGE


def _interpolate(value: Decimal, anchors: BenchmarkAnchors) -> Decimal:
    if value <= anchors.grade_20:
        return Decimal(MIN_GRADE)
    if value >= anchors.grade_80:
        return Decimal(MAX_GRADE)
    if value <= anchors.grade_50:
        low, high, base = anchors.grade_20, anchors.grade_50, MIN_GRADE
    else:
        low, high, base = anchors.grade_50, anchors.grade_80, AVERAGE_GRADE
    return base + _SEGMENT * (value - low) / (high - low)


def grade(
    value: Union[float, int, Decimal],
    metric: PerformanceMetric,
    level: PlayerLevel,
) -> Grade:
    """
    Grade a raw value (a session statistic or a single swing).

    Raises NoBenchmarkForLevel when the level has no row for the metric;
    callers decide whether to fall back or show the value ungraded.
    """
    anchors = get_benchmark(metric, level)
    raw = value if isinstance(value, Decimal) else Decimal(str(value))
    if not raw.is_finite():
        raise ValueError("Cannot grade a non-finite value")

    grade_value = int(round_half_away(_interpolate(raw, anchors), places=0))
    return Grade(value=grade_value, label=label_for(grade_value))


def value_for_grade(
    grade_value: int,
    metric: PerformanceMetric,
    level: PlayerLevel,
) -> float:
    """Raw value that interpolates exactly to `grade_value`, to 1 decimal."""
    if not MIN_GRADE <= grade_value <= MAX_GRADE:
        raise ValueError("Grade must be between 20 and 80")

    anchors = get_benchmark(metric, level)
    if grade_value <= AVERAGE_GRADE:
        low, high, base = anchors.grade_20, anchors.grade_50, MIN_GRADE
    else:
        low, high, base = anchors.grade_50, anchors.grade_80, AVERAGE_GRADE
    raw = low + (high - low) * (grade_value - base) / _SEGMENT
    return round_half_away(raw)


def milestones(metric: PerformanceMetric, level: PlayerLevel) -> list[dict]:
    """
    Target values for each milestone grade, lowest first.

    Used when a coach is picking a goal: "what avg EV makes this
    kid Above Average for high school?"
    """
    return [
        {
            "grade": grade_value,
            "label": name,
            "value": value_for_grade(grade_value, metric, level),
        }
        for grade_value, name in sorted(MILESTONE_NAMES.items())
    ]
