"""
Swing analytics.

Contains the domain models, benchmark tables, and the aggregation,
grading, zone and report functions built on them.
"""

from .models import (
    BatSpeedSwing,
    ExitVelocitySwing,
    Grade,
    GradeLabel,
    MetricType,
    PerformanceMetric,
    PlayerLevel,
    Session,
    SessionSummary,
    SwingRecord,
)
from .aggregator import InvalidMetricType, aggregate
from .benchmarks import BENCHMARKS, NoBenchmarkForLevel, get_benchmark
from .grading import grade, milestones, value_for_grade
from .zones import STRIKE_ZONE, aggregate_by_zone, zone_band, zone_counts
from .report import (
    ProgressionReport,
    ReportPayload,
    SessionMeta,
    TrendDirection,
    assemble,
    assemble_progression,
    resolve_grading_level,
    summarize_session,
)

__all__ = [
    "BatSpeedSwing",
    "ExitVelocitySwing",
    "Grade",
    "GradeLabel",
    "MetricType",
    "PerformanceMetric",
    "PlayerLevel",
    "Session",
    "SessionSummary",
    "SwingRecord",
    "InvalidMetricType",
    "aggregate",
    "BENCHMARKS",
    "NoBenchmarkForLevel",
    "get_benchmark",
    "grade",
    "milestones",
    "value_for_grade",
    "STRIKE_ZONE",
    "aggregate_by_zone",
    "zone_band",
    "zone_counts",
    "ProgressionReport",
    "ReportPayload",
    "SessionMeta",
    "TrendDirection",
    "assemble",
    "assemble_progression",
    "resolve_grading_level",
    "summarize_session",
]
