from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import minute_of_day
from ...core.enums import AttendanceStatus
from ..config import WorkConfig
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Punch-in after the grace period."""

    def decide(self, *, punch_in: Optional[datetime], punch_out: Optional[datetime], config: WorkConfig) -> StatusDecision:
        note = None
        if punch_in is not None:
            late_by = minute_of_day(punch_in) - minute_of_day(config.start_time)
            note = f"Late by {late_by} minutes"
        return StatusDecision(status=AttendanceStatus.LATE, note=note)
