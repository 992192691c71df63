from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import minute_of_day
from ...core.enums import AttendanceStatus
from ..config import WorkConfig
from .base import AttendanceStrategy, StatusDecision


class EarlyLeaveStrategy(AttendanceStrategy):
    """Punch-out before the early-leave cutoff (a late arrival is not reported on top)."""

    def decide(self, *, punch_in: Optional[datetime], punch_out: Optional[datetime], config: WorkConfig) -> StatusDecision:
        note = None
        if punch_out is not None:
            early_by = minute_of_day(config.end_time) - minute_of_day(punch_out)
            note = f"Left {early_by} minutes early"
        return StatusDecision(status=AttendanceStatus.EARLY, note=note)
