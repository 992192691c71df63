from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..config import WorkConfig
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time punch-in, normal punch-out (or still at work)."""

    def decide(self, *, punch_in: Optional[datetime], punch_out: Optional[datetime], config: WorkConfig) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
