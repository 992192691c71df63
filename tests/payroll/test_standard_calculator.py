from __future__ import annotations

from datetime import date, timedelta

import pytest

from hrms.attendance.model import AttendanceRecord
from hrms.core.enums import AttendanceStatus, BonusStatus, BonusType, LeaveStatus, LeaveType
from hrms.core.exceptions import ValidationError
from hrms.leave.model import Holiday, LeaveRequest
from hrms.payroll.calculator.standard_calculator import StandardPayrollCalculator
from hrms.payroll.derivations import with_salary_totals
from hrms.payroll.model import Bonus, SalaryStructure


def _structure() -> SalaryStructure:
    return with_salary_totals(
        SalaryStructure(
            structure_id=1,
            employee_id="EMP001",
            basic=30000,
            hra=12000,
            allowances={"conveyance": 1600, "medical": 1250, "special": 5150},
            deductions={"pf": 1800, "professional_tax": 200},
        )
    )


def _day(d: date, status: AttendanceStatus) -> AttendanceRecord:
    return AttendanceRecord(attendance_id=d.day, employee_id="EMP001", work_date=d, status=status)


def test_records_outside_month_and_early_days_are_not_present():
    records = [
        _day(date(2026, 4, 1), AttendanceStatus.PRESENT),
        _day(date(2026, 4, 2), AttendanceStatus.LATE),
        _day(date(2026, 4, 3), AttendanceStatus.EARLY),
        _day(date(2026, 4, 4), AttendanceStatus.ABSENT),
        _day(date(2026, 3, 31), AttendanceStatus.PRESENT),
    ]
    result = StandardPayrollCalculator().compute(
        month=4, year=2026, structure=_structure(), attendance=records, leaves=[], holidays=[], bonuses=[]
    )
    assert result.attendance.present_days == 2
    assert result.attendance.absent_days == 1
    assert result.attendance.working_days == 26


def test_only_approved_uncounted_bonuses_of_the_period():
    bonuses = [
        Bonus(1, "EMP001", BonusType.FESTIVAL, 5000, 4, 2026, status=BonusStatus.APPROVED),
        Bonus(2, "EMP001", BonusType.FESTIVAL, 700, 4, 2026, status=BonusStatus.PENDING),
        Bonus(3, "EMP001", BonusType.FESTIVAL, 900, 4, 2026, status=BonusStatus.APPROVED, included_in_payroll=True),
        Bonus(4, "EMP001", BonusType.FESTIVAL, 300, 5, 2026, status=BonusStatus.APPROVED),
    ]
    result = StandardPayrollCalculator().compute(
        month=4, year=2026, structure=_structure(), attendance=[], leaves=[], holidays=[], bonuses=bonuses
    )
    assert result.earnings["bonus"] == 5000
    assert result.bonus_ids == [1]


def test_only_approved_leave_counts():
    leaves = [
        LeaveRequest(1, "EMP001", LeaveType.SICK, date(2026, 4, 6), date(2026, 4, 7), 2, "flu", LeaveStatus.APPROVED),
        LeaveRequest(2, "EMP001", LeaveType.LOP, date(2026, 4, 8), date(2026, 4, 8), 1, "x", LeaveStatus.PENDING),
    ]
    result = StandardPayrollCalculator().compute(
        month=4, year=2026, structure=_structure(), attendance=[], leaves=leaves, holidays=[], bonuses=[]
    )
    assert result.attendance.paid_leave_days == 2
    assert result.attendance.lop_days == 0
    assert result.deductions["lop_deduction"] == 0


def test_lop_deduction_rounds_half_up():
    # gross 50000 over 26 working days: 1923.0769... per day
    leaves = [
        LeaveRequest(1, "EMP001", LeaveType.LOP, date(2026, 4, 6), date(2026, 4, 6), 0.5, "x", LeaveStatus.APPROVED),
    ]
    result = StandardPayrollCalculator().compute(
        month=4, year=2026, structure=_structure(), attendance=[], leaves=leaves, holidays=[], bonuses=[]
    )
    assert result.deductions["lop_deduction"] == 962


def test_zero_working_days_is_an_error():
    first = date(2026, 2, 1)
    holidays = [
        Holiday(i, f"Closed {i}", first + timedelta(days=i), 2026)
        for i in range(28)
        if (first + timedelta(days=i)).weekday() != 6
    ]
    with pytest.raises(ValidationError, match="No working days"):
        StandardPayrollCalculator().compute(
            month=2, year=2026, structure=_structure(), attendance=[], leaves=[], holidays=holidays, bonuses=[]
        )


def test_inactive_holidays_are_ignored():
    holidays = [Holiday(1, "Founders Day", date(2026, 4, 14), 2026, is_active=False)]
    result = StandardPayrollCalculator().compute(
        month=4, year=2026, structure=_structure(), attendance=[], leaves=[], holidays=holidays, bonuses=[]
    )
    assert result.attendance.holidays == 0
