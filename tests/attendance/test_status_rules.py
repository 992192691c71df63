from __future__ import annotations

from datetime import datetime, time

import pytest

from hrms.attendance.config import WorkConfig
from hrms.attendance.status import derive_status, effective_present_days, working_hours
from hrms.core.enums import AttendanceStatus
from hrms.core.exceptions import ValidationError


def _at(hh: int, mm: int) -> datetime:
    return datetime(2026, 4, 15, hh, mm)


def test_no_punch_in_is_absent(work_config):
    assert derive_status(None, None, work_config) == AttendanceStatus.ABSENT
    assert derive_status(None, _at(18, 0), work_config) == AttendanceStatus.ABSENT


def test_punch_in_only_within_grace_is_present(work_config):
    assert derive_status(_at(9, 15), None, work_config) == AttendanceStatus.PRESENT


def test_punch_in_only_after_grace_is_late(work_config):
    assert derive_status(_at(9, 16), None, work_config) == AttendanceStatus.LATE


def test_late_arrival_full_day_stays_late(work_config):
    assert derive_status(_at(9, 20), _at(18, 0), work_config) == AttendanceStatus.LATE


def test_short_day_is_half_day_even_when_on_time(work_config):
    assert derive_status(_at(9, 0), _at(12, 30), work_config) == AttendanceStatus.HALF_DAY


def test_half_day_wins_over_late_and_early(work_config):
    assert derive_status(_at(11, 0), _at(14, 0), work_config) == AttendanceStatus.HALF_DAY


def test_leaving_before_early_cutoff_is_early(work_config):
    assert derive_status(_at(9, 0), _at(17, 29), work_config) == AttendanceStatus.EARLY
    assert derive_status(_at(9, 0), _at(17, 30), work_config) == AttendanceStatus.PRESENT


def test_early_wins_over_late(work_config):
    assert derive_status(_at(9, 40), _at(17, 0), work_config) == AttendanceStatus.EARLY


def test_seconds_are_ignored_for_lateness(work_config):
    assert derive_status(datetime(2026, 4, 15, 9, 15, 59), None, work_config) == AttendanceStatus.PRESENT


def test_alternate_thresholds_are_honoured():
    config = WorkConfig(start_time=time(8, 0), end_time=time(16, 0), late_threshold_minutes=0)
    assert derive_status(_at(8, 1), _at(16, 0), config) == AttendanceStatus.LATE
    assert derive_status(_at(8, 0), _at(16, 0), config) == AttendanceStatus.PRESENT


@pytest.mark.parametrize("hh_in, hh_out", [(6, 7), (8, 12), (9, 18), (10, 15), (13, 23)])
def test_every_pair_gets_exactly_one_known_status(work_config, hh_in, hh_out):
    status = derive_status(_at(hh_in, 0), _at(hh_out, 0), work_config)
    assert status in set(AttendanceStatus)
    assert derive_status(_at(hh_in, 0), _at(hh_out, 0), work_config) == status


def test_working_hours_is_zero_when_a_punch_is_missing():
    assert working_hours(None, _at(18, 0)) == 0.0
    assert working_hours(_at(9, 0), None) == 0.0
    assert working_hours(_at(9, 20), _at(18, 0)) == 8.67


def test_effective_present_days_folds_half_days_and_paid_leave():
    assert effective_present_days(present_days=20, half_days=2, paid_leave_days=1) == 22


def test_work_config_rejects_inverted_hours():
    with pytest.raises(ValidationError):
        WorkConfig(start_time=time(18, 0), end_time=time(9, 0))


def test_work_config_from_dict_round_trips_defaults():
    config = WorkConfig.from_dict({"start_time": "08:30", "late_threshold_minutes": "10"})
    assert config.start_time == time(8, 30)
    assert config.late_threshold_minutes == 10
    assert WorkConfig.from_dict(config.to_dict()) == config


def test_work_config_from_dict_rejects_bad_time():
    with pytest.raises(ValidationError):
        WorkConfig.from_dict({"start_time": "9am"})
