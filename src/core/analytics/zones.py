"""
Strike-zone aggregation ("hot zones").

The zone grid is fixed, viewed from behind the catcher:

    10 |         | 11
       | 1  2  3 |
       | 4  5  6 |
       | 7  8  9 |
    12 |         | 13

Cells 1-9 are in the zone. 10-13 are the off-plate corners. This module
owns that layout so renderers never hard-code zone numbers.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from .aggregator import (
    InvalidMetricType,
    mean_of,
    resolve_metric_type,
    round_half_away,
    to_decimal,
)
from .models import ExitVelocitySwing, MetricType


@dataclass(frozen=True)
class ZoneCell:
    """A cell of the strike-zone grid."""
    number: int
    name: str
    in_zone: bool
    row: int  # 0 = top
    col: int  # 0 = left (catcher's view)


STRIKE_ZONE: tuple[ZoneCell, ...] = (
    ZoneCell(1, "up-left", True, 1, 1),
    ZoneCell(2, "up-middle", True, 1, 2),
    ZoneCell(3, "up-right", True, 1, 3),
    ZoneCell(4, "middle-left", True, 2, 1),
    ZoneCell(5, "middle", True, 2, 2),
    ZoneCell(6, "middle-right", True, 2, 3),
    ZoneCell(7, "down-left", True, 3, 1),
    ZoneCell(8, "down-middle", True, 3, 2),
    ZoneCell(9, "down-right", True, 3, 3),
    ZoneCell(10, "chase up-left", False, 0, 0),
    ZoneCell(11, "chase up-right", False, 0, 4),
    ZoneCell(12, "chase down-left", False, 4, 0),
    ZoneCell(13, "chase down-right", False, 4, 4),
)

ZONE_NUMBERS: tuple[int, ...] = tuple(cell.number for cell in STRIKE_ZONE)

# Heat bands for display: (lower bound mph, band). First match wins.
ZONE_BANDS: tuple[tuple[Decimal, str], ...] = (
    (Decimal(90), "hot"),
    (Decimal(85), "warm"),
    (Decimal(80), "mild"),
)


def _check_exit_velocity(records: Sequence[ExitVelocitySwing]) -> None:
    metric_type = resolve_metric_type(records)
    if metric_type not in (None, MetricType.EXIT_VELOCITY):
        raise InvalidMetricType("Zone aggregation needs exit velocity swings")


def _zone_of(record: ExitVelocitySwing) -> Optional[int]:
    zone = record.strike_zone
    return zone if zone in ZONE_NUMBERS else None


def aggregate_by_zone(records: Sequence[ExitVelocitySwing]) -> dict[int, Optional[float]]:
    """
    Average exit velocity per zone cell.

    Always returns all 13 cells. A cell with no qualifying swings is None.
    Swings with no zone are left out here but still count toward the
    session's overall average.
    """
    _check_exit_velocity(records)

    buckets: dict[int, list[Decimal]] = {number: [] for number in ZONE_NUMBERS}
    for record in records:
        zone = _zone_of(record)
        ev = to_decimal(record.exit_velocity)
        if zone is None or ev is None:
            continue
        buckets[zone].append(ev)

    averages: dict[int, Optional[float]] = {}
    for number, values in buckets.items():
        mean = mean_of(values)
        averages[number] = None if mean is None else round_half_away(mean)
    return averages


def zone_counts(records: Sequence[ExitVelocitySwing]) -> dict[int, int]:
    """How many swings landed in each cell (zone known, EV or not)."""
    _check_exit_velocity(records)

    counts = {number: 0 for number in ZONE_NUMBERS}
    for record in records:
        zone = _zone_of(record)
        if zone is not None:
            counts[zone] += 1
    return counts


def zone_band(average: Optional[float]) -> str:
    """Display band for a zone average; "empty" when there is no data."""
    if average is None:
        return "empty"
    value = Decimal(str(average))
    for lower_bound, band in ZONE_BANDS:
        if value >= lower_bound:
            return band
    return "cold"
