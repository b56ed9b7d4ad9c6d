"""
Metric aggregation for a session's swings.

Turns a list of swing records into a SessionSummary. All arithmetic runs
in Decimal on the string form of each value, so the same swings always
produce the same summary regardless of list order or platform float quirks.
"""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from .models import (
    BatSpeedSwing,
    ExitVelocitySwing,
    MetricType,
    SessionSummary,
    SwingRecord,
)

logger = logging.getLogger(__name__)


# Barrel definition used by the swing log: near the session's best contact
# and inside the productive launch window.
BARREL_EV_FRACTION = Decimal("0.90")
BARREL_LAUNCH_ANGLE_RANGE = (Decimal(8), Decimal(25))
TOP_CONTACT_FRACTION = 0.05


class InvalidMetricType(ValueError):
    """Raised when a batch mixes devices or holds an unknown record type."""
    pass


def round_half_away(value: Decimal, places: int = 1) -> float:
    """
    Round to `places` decimals, halves away from zero.

    Decimal's ROUND_HALF_UP is away-from-zero for negatives too,
    which is what we want for attack and launch angles.
    """
    exponent = Decimal(1).scaleb(-places)
    return float(value.quantize(exponent, rounding=ROUND_HALF_UP))


def to_decimal(value: Optional[float]) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        if not math.isfinite(value):
            return None
    except TypeError:
        return None
    return Decimal(str(value))


def _present(values: Iterable[Optional[float]]) -> list[Decimal]:
    """Drop missing and malformed values."""
    result = []
    for value in values:
        converted = to_decimal(value)
        if converted is not None:
            result.append(converted)
    return result


def mean_of(values: Sequence[Decimal]) -> Optional[Decimal]:
    if not values:
        return None
    return sum(values, Decimal(0)) / len(values)


def _rounded(value: Optional[Decimal], places: int = 1) -> Optional[float]:
    return None if value is None else round_half_away(value, places)


def resolve_metric_type(
    records: Sequence[SwingRecord],
    expected: Optional[MetricType] = None,
) -> Optional[MetricType]:
    """
    Work out which device a batch came from.

    Raises InvalidMetricType if the batch is mixed, contains something
    that is not a swing record, or disagrees with `expected`.
    """
    seen = set()
    for record in records:
        if not isinstance(record, (BatSpeedSwing, ExitVelocitySwing)):
            raise InvalidMetricType(
                f"Unrecognized swing record type: {type(record).__name__}"
            )
        seen.add(record.metric_type)

    if len(seen) > 1:
        raise InvalidMetricType("Cannot aggregate bat speed and exit velocity swings together")

    found = seen.pop() if seen else None
    if expected is not None and found is not None and found is not expected:
        raise InvalidMetricType(
            f"Expected {expected.value} swings but received {found.value}"
        )
    return found or expected


def aggregate(
    records: Sequence[SwingRecord],
    metric_type: Optional[MetricType] = None,
) -> SessionSummary:
    """
    Reduce swings to avg/max/min plus device-specific secondary metrics.

    An empty batch is a valid "no data" session: count is 0 and every
    statistic is None.
    """
    resolved = resolve_metric_type(records, metric_type)
    primary = _present(record.primary_value for record in records)

    if resolved is MetricType.BAT_SPEED:
        secondary = _bat_speed_secondary(records)
        barrels = None
    elif resolved is MetricType.EXIT_VELOCITY:
        secondary = _exit_velocity_secondary(records)
        barrels = count_barrels(records) if primary else None
    else:
        secondary = {}
        barrels = None

    summary = SessionSummary(
        metric_type=resolved,
        count=len(primary),
        swing_count=len(records),
        avg=_rounded(mean_of(primary)),
        max=_rounded(max(primary)) if primary else None,
        min=_rounded(min(primary)) if primary else None,
        secondary=secondary,
        barrel_count=barrels,
    )

    logger.debug(
        "Aggregated session swings",
        extra={
            "metric_type": resolved.value if resolved else None,
            "swing_count": summary.swing_count,
            "count": summary.count,
        }
    )
    return summary


def _bat_speed_secondary(records: Sequence[BatSpeedSwing]) -> dict[str, Optional[float]]:
    return {
        "avg_attack_angle": _rounded(mean_of(_present(r.attack_angle for r in records))),
        "avg_time_to_contact": _rounded(
            mean_of(_present(r.time_to_contact for r in records)), places=3
        ),
    }


def _exit_velocity_secondary(records: Sequence[ExitVelocitySwing]) -> dict[str, Optional[float]]:
    return {
        "avg_launch_angle": _rounded(mean_of(_present(r.launch_angle for r in records))),
        "avg_distance": _rounded(mean_of(_present(r.distance for r in records))),
        "launch_angle_top5": _rounded(launch_angle_of_top_contact(records)),
    }


def launch_angle_of_top_contact(records: Sequence[ExitVelocitySwing]) -> Optional[Decimal]:
    """
    Mean launch angle of the hardest-hit 5% of balls (at least one).

    Ties on exit velocity are broken by the higher launch angle, so the
    slice depends only on which balls were hit, not their order.
    """
    paired = [
        (ev, la)
        for ev, la in (
            (to_decimal(r.exit_velocity), to_decimal(r.launch_angle)) for r in records
        )
        if ev is not None and la is not None
    ]
    if not paired:
        return None

    top_count = math.ceil(len(paired) * TOP_CONTACT_FRACTION)
    hardest = sorted(paired, reverse=True)[:top_count]
    return mean_of([la for _, la in hardest])


def count_barrels(records: Sequence[ExitVelocitySwing]) -> int:
    """Balls at >= 90% of the session max EV with launch angle in 8-25 degrees."""
    velocities = _present(r.exit_velocity for r in records)
    if not velocities:
        return 0

    threshold = max(velocities) * BARREL_EV_FRACTION
    low, high = BARREL_LAUNCH_ANGLE_RANGE
    barrels = 0
    for record in records:
        ev = to_decimal(record.exit_velocity)
        la = to_decimal(record.launch_angle)
        if ev is None or la is None:
            continue
        if ev >= threshold and low <= la <= high:
            barrels += 1
    return barrels
