from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Any, Mapping

from ..common.datetime_utils import minute_of_day, parse_hhmm
from ..core.constants import (
    DEFAULT_EARLY_LEAVE_THRESHOLD_MINUTES,
    DEFAULT_END_TIME,
    DEFAULT_FULL_DAY_HOURS,
    DEFAULT_HALF_DAY_THRESHOLD_HOURS,
    DEFAULT_LATE_THRESHOLD_MINUTES,
    DEFAULT_START_TIME,
)
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class WorkConfig:
    """Working-hours rules used to classify a day's punches.

    Times are local wall-clock; comparisons are done at minute resolution.
    """

    start_time: time = parse_hhmm(DEFAULT_START_TIME)
    end_time: time = parse_hhmm(DEFAULT_END_TIME)
    late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES
    early_leave_threshold_minutes: int = DEFAULT_EARLY_LEAVE_THRESHOLD_MINUTES
    half_day_threshold_hours: float = DEFAULT_HALF_DAY_THRESHOLD_HOURS
    full_day_hours: float = DEFAULT_FULL_DAY_HOURS

    def __post_init__(self) -> None:
        if self.late_threshold_minutes < 0 or self.early_leave_threshold_minutes < 0:
            raise ValidationError("Thresholds cannot be negative")
        if self.half_day_threshold_hours < 0:
            raise ValidationError("half_day_threshold_hours cannot be negative")
        if self.end_time <= self.start_time:
            raise ValidationError("end_time must be after start_time")

    @property
    def late_after_minute(self) -> int:
        """Last minute of the day that still counts as on time."""
        return minute_of_day(self.start_time) + self.late_threshold_minutes

    @property
    def early_before_minute(self) -> int:
        """Punch-outs strictly before this minute are early."""
        return minute_of_day(self.end_time) - self.early_leave_threshold_minutes

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "WorkConfig":
        data = dict(data or {})
        try:
            return cls(
                start_time=parse_hhmm(str(data.get("start_time", DEFAULT_START_TIME))),
                end_time=parse_hhmm(str(data.get("end_time", DEFAULT_END_TIME))),
                late_threshold_minutes=int(data.get("late_threshold_minutes", DEFAULT_LATE_THRESHOLD_MINUTES)),
                early_leave_threshold_minutes=int(
                    data.get("early_leave_threshold_minutes", DEFAULT_EARLY_LEAVE_THRESHOLD_MINUTES)
                ),
                half_day_threshold_hours=float(data.get("half_day_threshold_hours", DEFAULT_HALF_DAY_THRESHOLD_HOURS)),
                full_day_hours=float(data.get("full_day_hours", DEFAULT_FULL_DAY_HOURS)),
            )
        except ValueError as e:
            raise ValidationError(f"Invalid work configuration: {e}")

    def to_dict(self) -> dict:
        return {
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "late_threshold_minutes": self.late_threshold_minutes,
            "early_leave_threshold_minutes": self.early_leave_threshold_minutes,
            "half_day_threshold_hours": self.half_day_threshold_hours,
            "full_day_hours": self.full_day_hours,
        }
