from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import hours_between
from ...core.enums import AttendanceStatus
from ..config import WorkConfig
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Worked less than the half-day threshold; wins over late and early."""

    def decide(self, *, punch_in: Optional[datetime], punch_out: Optional[datetime], config: WorkConfig) -> StatusDecision:
        note = None
        if punch_in is not None and punch_out is not None:
            note = f"Worked {hours_between(punch_in, punch_out):.2f} hours"
        return StatusDecision(status=AttendanceStatus.HALF_DAY, note=note)
