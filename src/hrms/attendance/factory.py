from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import hours_between, minute_of_day
from .config import WorkConfig
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the strategy whose rule matches first.

    Order: absent, half-day, early leave, late, present.
    """

    def for_punch_in(self, *, punch_in: datetime, config: WorkConfig) -> AttendanceStrategy:
        if minute_of_day(punch_in) > config.late_after_minute:
            return LateStrategy()
        return NormalStrategy()

    def for_punch_out(self, *, punch_in: datetime, punch_out: datetime, config: WorkConfig) -> AttendanceStrategy:
        if hours_between(punch_in, punch_out) < config.half_day_threshold_hours:
            return HalfDayStrategy()
        if minute_of_day(punch_out) < config.early_before_minute:
            return EarlyLeaveStrategy()
        return self.for_punch_in(punch_in=punch_in, config=config)

    def for_punches(
        self,
        *,
        punch_in: Optional[datetime],
        punch_out: Optional[datetime],
        config: WorkConfig,
    ) -> AttendanceStrategy:
        if punch_in is None:
            return AbsentStrategy()
        if punch_out is None:
            return self.for_punch_in(punch_in=punch_in, config=config)
        return self.for_punch_out(punch_in=punch_in, punch_out=punch_out, config=config)
