from __future__ import annotations

import os

from ..core.constants import (
    DEFAULT_EARLY_LEAVE_THRESHOLD_MINUTES,
    DEFAULT_END_TIME,
    DEFAULT_FULL_DAY_HOURS,
    DEFAULT_HALF_DAY_THRESHOLD_HOURS,
    DEFAULT_LATE_THRESHOLD_MINUTES,
    DEFAULT_START_TIME,
)


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "hrms.settings.production"

    if env in {"test", "testing"}:
        return "hrms.settings.testing"

    return "hrms.settings.development"


def work_config_from_env() -> dict:
    """Office hours and thresholds; the keys match ``WorkConfig.from_dict``."""
    return {
        "start_time": os.getenv("WORK_START_TIME", DEFAULT_START_TIME),
        "end_time": os.getenv("WORK_END_TIME", DEFAULT_END_TIME),
        "late_threshold_minutes": int(os.getenv("LATE_THRESHOLD_MINUTES", str(DEFAULT_LATE_THRESHOLD_MINUTES))),
        "early_leave_threshold_minutes": int(
            os.getenv("EARLY_LEAVE_THRESHOLD_MINUTES", str(DEFAULT_EARLY_LEAVE_THRESHOLD_MINUTES))
        ),
        "half_day_threshold_hours": float(
            os.getenv("HALF_DAY_THRESHOLD_HOURS", str(DEFAULT_HALF_DAY_THRESHOLD_HOURS))
        ),
        "full_day_hours": float(os.getenv("FULL_DAY_HOURS", str(DEFAULT_FULL_DAY_HOURS))),
    }
