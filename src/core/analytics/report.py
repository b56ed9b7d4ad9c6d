"""
Report assembly.

Composes aggregator, grading and zone output into the payload the
rendering layer consumes. No storage access happens here: the caller
passes in everything, including session metadata.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from .aggregator import aggregate, round_half_away
from .benchmarks import NoBenchmarkForLevel, get_benchmark
from .grading import grade
from .models import (
    Grade,
    MetricType,
    PerformanceMetric,
    PlayerLevel,
    SessionSummary,
    SwingRecord,
)
from .zones import aggregate_by_zone

logger = logging.getLogger(__name__)


class TrendDirection(Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class SessionMeta:
    """Identifying details supplied by whoever owns the session."""
    session_id: str
    player_id: str
    session_date: date
    session_type: MetricType
    session_category: Optional[str] = None
    player_name: Optional[str] = None


@dataclass(frozen=True)
class ReportPayload:
    """
    Structured numeric report for one session.

    `grade`/`grade_label` grade the session average; the max statistic is
    graded separately. When the level has no benchmark, `graded` is False
    and the grade fields are None; the numbers are still reported.
    """
    session: SessionMeta
    player_level: PlayerLevel
    summary: SessionSummary
    zone_averages: Optional[dict[int, Optional[float]]]
    grade: Optional[Grade] = None
    max_grade: Optional[Grade] = None
    graded: bool = False

    def to_dict(self) -> dict:
        summary = self.summary
        return {
            "session": {
                "id": self.session.session_id,
                "player_id": self.session.player_id,
                "player_name": self.session.player_name,
                "date": self.session.session_date.isoformat(),
                "type": self.session.session_type.value,
                "category": self.session.session_category,
            },
            "player_level": self.player_level.value,
            "metric_type": summary.metric_type.value if summary.metric_type else None,
            "count": summary.count,
            "swing_count": summary.swing_count,
            "avg": summary.avg,
            "max": summary.max,
            "min": summary.min,
            "secondary": dict(summary.secondary),
            "barrel_count": summary.barrel_count,
            "graded": self.graded,
            "grade": self.grade.value if self.grade else None,
            "grade_label": self.grade.label.value if self.grade else None,
            "max_grade": self.max_grade.value if self.max_grade else None,
            "max_grade_label": self.max_grade.label.value if self.max_grade else None,
            "zone_averages": (
                {str(zone): avg for zone, avg in self.zone_averages.items()}
                if self.zone_averages is not None else None
            ),
        }


@dataclass(frozen=True)
class ProgressionReport:
    """A player's sessions over time plus the direction they're heading."""
    reports: list[ReportPayload] = field(default_factory=list)
    trend: TrendDirection = TrendDirection.STABLE
    deltas: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "sessions": [report.to_dict() for report in self.reports],
            "trend": self.trend.value,
            "deltas": list(self.deltas),
        }


def resolve_grading_level(
    session_level: PlayerLevel,
    current_level: Optional[PlayerLevel],
    use_session_level: bool = True,
) -> PlayerLevel:
    """
    Pick the level a session is graded at.

    By default the level snapshotted on the session wins. Turning
    `use_session_level` off grades every session at the player's current
    level, which re-grades history whenever a player is re-leveled.
    """
    if use_session_level or current_level is None:
        return session_level
    return current_level


def _try_grade(
    value: Optional[float],
    metric: PerformanceMetric,
    level: PlayerLevel,
) -> tuple[Optional[Grade], bool]:
    """Returns (grade, benchmark_found)."""
    try:
        if value is None:
            # Still surface a missing benchmark, even with nothing to grade.
            get_benchmark(metric, level)
            return None, True
        return grade(value, metric, level), True
    except NoBenchmarkForLevel:
        return None, False


def assemble(
    summary: SessionSummary,
    zone_map: Optional[dict[int, Optional[float]]],
    player_level: PlayerLevel,
    session_meta: SessionMeta,
) -> ReportPayload:
    """Build one session's report. Grading failures degrade to ungraded."""
    avg_grade = max_grade = None
    graded = False

    if summary.metric_type is not None:
        avg_metric = PerformanceMetric.for_summary(summary.metric_type, "avg")
        max_metric = PerformanceMetric.for_summary(summary.metric_type, "max")
        avg_grade, has_avg = _try_grade(summary.avg, avg_metric, player_level)
        max_grade, has_max = _try_grade(summary.max, max_metric, player_level)
        graded = has_avg and has_max and summary.has_data

        if not (has_avg and has_max):
            logger.warning(
                "No benchmark for level, reporting ungraded",
                extra={
                    "session_id": session_meta.session_id,
                    "metric_type": summary.metric_type.value,
                    "player_level": player_level.value,
                }
            )

    filled = replace(
        summary,
        zone_averages=zone_map,
        grade=avg_grade.value if avg_grade else None,
        grade_label=avg_grade.label if avg_grade else None,
    )

    return ReportPayload(
        session=session_meta,
        player_level=player_level,
        summary=filled,
        zone_averages=zone_map,
        grade=avg_grade,
        max_grade=max_grade,
        graded=graded,
    )


def summarize_session(
    records: Sequence[SwingRecord],
    player_level: PlayerLevel,
    metric_type: Optional[MetricType] = None,
) -> SessionSummary:
    """
    Aggregate, zone and grade in one go, returning a filled summary.

    Raises NoBenchmarkForLevel, unlike assemble(), for callers that want
    to choose their own fallback.
    """
    summary = aggregate(records, metric_type)
    zone_map = None
    if summary.metric_type is MetricType.EXIT_VELOCITY:
        zone_map = aggregate_by_zone(records)

    session_grade = None
    if summary.metric_type is not None and summary.avg is not None:
        metric = PerformanceMetric.for_summary(summary.metric_type, "avg")
        session_grade = grade(summary.avg, metric, player_level)

    return replace(
        summary,
        zone_averages=zone_map,
        grade=session_grade.value if session_grade else None,
        grade_label=session_grade.label if session_grade else None,
    )


def trend_direction(reports: Sequence[ReportPayload]) -> TrendDirection:
    """
    Compare the two most recent non-null grades.

    Fewer than two graded sessions is "stable".
    """
    grades = [report.grade.value for report in reports if report.grade is not None]
    if len(grades) < 2:
        return TrendDirection.STABLE

    previous, latest = grades[-2], grades[-1]
    if latest > previous:
        return TrendDirection.UP
    if latest < previous:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def _delta(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    if current is None or previous is None:
        return None
    return round_half_away(Decimal(str(current)) - Decimal(str(previous)), places=2)


def assemble_progression(reports: Sequence[ReportPayload]) -> ProgressionReport:
    """
    Order per-session reports by date and describe the progression.

    Deltas compare each session with the one before it.
    """
    ordered = sorted(
        reports,
        key=lambda r: (r.session.session_date, r.session.session_id),
    )

    deltas = []
    for previous, current in zip(ordered, ordered[1:]):
        deltas.append({
            "session_id": current.session.session_id,
            "session_date": current.session.session_date.isoformat(),
            "avg_change": _delta(current.summary.avg, previous.summary.avg),
            "max_change": _delta(current.summary.max, previous.summary.max),
        })

    return ProgressionReport(
        reports=ordered,
        trend=trend_direction(ordered),
        deltas=deltas,
    )
