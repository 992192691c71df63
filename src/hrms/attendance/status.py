"""Pure attendance derivations shared by the attendance, correction and payroll services."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from ..common.datetime_utils import hours_between
from ..core.enums import AttendanceStatus
from .config import WorkConfig
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, StatusCounts
from .strategies.base import StatusDecision

_default_factory = AttendanceStrategyFactory()


def decide_status(
    punch_in: Optional[datetime],
    punch_out: Optional[datetime],
    config: WorkConfig,
    *,
    factory: Optional[AttendanceStrategyFactory] = None,
) -> StatusDecision:
    factory = factory or _default_factory
    strategy = factory.for_punches(punch_in=punch_in, punch_out=punch_out, config=config)
    return strategy.decide(punch_in=punch_in, punch_out=punch_out, config=config)


def derive_status(
    punch_in: Optional[datetime],
    punch_out: Optional[datetime],
    config: WorkConfig,
) -> AttendanceStatus:
    """Classify a day from its punches. Total and deterministic."""
    return decide_status(punch_in, punch_out, config).status


def working_hours(punch_in: Optional[datetime], punch_out: Optional[datetime]) -> float:
    """Decimal hours between the punches, 0 when either is missing."""
    if punch_in is None or punch_out is None:
        return 0.0
    return round(hours_between(punch_in, punch_out), 2)


def count_statuses(records: Iterable[AttendanceRecord]) -> StatusCounts:
    counts = {s: 0 for s in AttendanceStatus}
    for r in records:
        counts[r.status] += 1
    return StatusCounts(
        total_present=counts[AttendanceStatus.PRESENT],
        total_absent=counts[AttendanceStatus.ABSENT],
        total_late=counts[AttendanceStatus.LATE],
        total_early=counts[AttendanceStatus.EARLY],
        total_half_day=counts[AttendanceStatus.HALF_DAY],
    )


def effective_present_days(*, present_days: float, half_days: float, paid_leave_days: float) -> float:
    """present + 0.5 x half-days + paid leave; the payroll multiplier base."""
    return present_days + 0.5 * half_days + paid_leave_days
