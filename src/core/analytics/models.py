"""
Domain models for swing analytics.

These models represent what a coach actually looks at: swings, sessions,
the summary numbers a session boils down to, and the grades we put on them.
Nothing here knows about HTTP or storage.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Union


class MetricType(Enum):
    """
    Which device produced a session.

    A session is monomorphic: every swing in it comes from one device,
    so it carries exactly one of these.
    """
    BAT_SPEED = "bat_speed"          # bat-speed sensor on the knob
    EXIT_VELOCITY = "exit_velocity"  # ball-flight / launch monitor


class PlayerLevel(Enum):
    """Competition level a player is graded against."""
    YOUTH = "youth"
    HIGH_SCHOOL = "high_school"
    COLLEGE = "college"
    PROFESSIONAL = "professional"  # indy and affiliate ball


class PerformanceMetric(Enum):
    """
    A session-level statistic that can be graded or targeted by a goal.

    The value doubles as the goal_type stored on a Goal.
    """
    AVG_EXIT_VELOCITY = "avg_exit_velocity"
    MAX_EXIT_VELOCITY = "max_exit_velocity"
    AVG_BAT_SPEED = "avg_bat_speed"
    MAX_BAT_SPEED = "max_bat_speed"

    @property
    def metric_type(self) -> MetricType:
        if self in (PerformanceMetric.AVG_BAT_SPEED, PerformanceMetric.MAX_BAT_SPEED):
            return MetricType.BAT_SPEED
        return MetricType.EXIT_VELOCITY

    @property
    def statistic(self) -> str:
        """Either "avg" or "max"."""
        return self.value.split("_", 1)[0]

    @classmethod
    def for_summary(cls, metric_type: MetricType, statistic: str) -> "PerformanceMetric":
        return cls(f"{statistic}_{metric_type.value}")


class GradeLabel(Enum):
    """Coarse reading of a 20-80 grade. Exactly 50 is Average."""
    BELOW_AVERAGE = "BelowAverage"
    AVERAGE = "Average"
    ABOVE_AVERAGE = "AboveAverage"


# ---------------------------------------------------------------------------
# Swing records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BatSpeedSwing:
    """
    One swing from the bat-speed sensor.

    Numeric fields are Optional because legacy rows were imported with
    gaps. Missing values are skipped during aggregation, never zeroed.
    """
    session_id: str = ""
    swing_number: int = 0
    bat_speed: Optional[float] = None       # mph
    attack_angle: Optional[float] = None    # degrees
    time_to_contact: Optional[float] = None  # seconds
    tags: frozenset[str] = field(default_factory=frozenset)
    notes: str = ""

    metric_type = MetricType.BAT_SPEED

    def __post_init__(self) -> None:
        if self.bat_speed is not None and self.bat_speed <= 0:
            raise ValueError("Bat speed must be positive")
        if self.time_to_contact is not None and self.time_to_contact <= 0:
            raise ValueError("Time to contact must be positive")

    @property
    def primary_value(self) -> Optional[float]:
        return self.bat_speed


@dataclass(frozen=True)
class ExitVelocitySwing:
    """One batted ball from the exit-velocity device."""
    session_id: str = ""
    swing_number: int = 0
    exit_velocity: Optional[float] = None  # mph
    launch_angle: Optional[float] = None   # degrees
    distance: Optional[float] = None       # feet
    strike_zone: Optional[int] = None      # 1-13, None when unknown
    pitch_speed: Optional[float] = None
    horiz_angle: Optional[float] = None
    spray_x: Optional[float] = None
    spray_y: Optional[float] = None
    tags: frozenset[str] = field(default_factory=frozenset)
    notes: str = ""

    metric_type = MetricType.EXIT_VELOCITY

    def __post_init__(self) -> None:
        if self.exit_velocity is not None and self.exit_velocity < 0:
            raise ValueError("Exit velocity cannot be negative")
        if self.distance is not None and self.distance < 0:
            raise ValueError("Distance cannot be negative")

    @property
    def primary_value(self) -> Optional[float]:
        return self.exit_velocity


SwingRecord = Union[BatSpeedSwing, ExitVelocitySwing]


# ---------------------------------------------------------------------------
# Sessions and derived values
# ---------------------------------------------------------------------------

@dataclass
class Session:
    """
    A single upload of one device export for one player.

    player_level is the level in effect when the session was recorded.
    Grading uses it so that re-leveling a player does not rewrite history.
    """
    id: str
    player_id: str
    session_type: MetricType
    session_date: date
    player_level: PlayerLevel = PlayerLevel.HIGH_SCHOOL
    session_category: Optional[str] = None  # Practice, Live ABs, ...


@dataclass(frozen=True)
class Grade:
    """A point on the 20-80 scouting scale."""
    value: int
    label: GradeLabel

    def __post_init__(self) -> None:
        if not 20 <= self.value <= 80:
            raise ValueError("Grade must be between 20 and 80")


@dataclass(frozen=True)
class SessionSummary:
    """
    Everything a session reduces to.

    Recomputed on demand from swings. The zone/grade fields are empty
    straight out of the aggregator and filled in when a report is built.
    """
    metric_type: Optional[MetricType] = None
    count: int = 0        # swings that contributed a primary value
    swing_count: int = 0  # swings received, including ones with gaps
    avg: Optional[float] = None
    max: Optional[float] = None
    min: Optional[float] = None
    secondary: dict[str, Optional[float]] = field(default_factory=dict)
    barrel_count: Optional[int] = None
    zone_averages: Optional[dict[int, Optional[float]]] = None
    grade: Optional[int] = None
    grade_label: Optional[GradeLabel] = None

    @property
    def has_data(self) -> bool:
        return self.count > 0

    def value_for(self, metric: PerformanceMetric) -> Optional[float]:
        """
        The statistic a goal or grade refers to, or None when this
        summary is for the other device.
        """
        if self.metric_type is not metric.metric_type:
            return None
        return self.avg if metric.statistic == "avg" else self.max
