from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..config import WorkConfig
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """No punch-in for the day."""

    def decide(self, *, punch_in: Optional[datetime], punch_out: Optional[datetime], config: WorkConfig) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT)
