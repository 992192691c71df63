from __future__ import annotations

from typing import Sequence

from ...attendance.model import AttendanceRecord
from ...attendance.status import effective_present_days
from ...common.datetime_utils import count_weekday, month_bounds
from ...core.constants import UNPAID_LEAVE_TYPES, WEEKOFF_WEEKDAY
from ...core.enums import AttendanceStatus, BonusStatus, LeaveStatus
from ...core.exceptions import ValidationError
from ...leave.model import Holiday, LeaveRequest
from ..derivations import round_half_up
from ..model import Bonus, PayrollAttendance, PayrollComputation, SalaryStructure
from .base import PayrollCalculator

PRESENT_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE})


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: pay the structure in full, minus LOP days at gross / working days.

    working days = days in month - Sundays - holidays
    present days = Present/Late + 0.5 x Half-Day + paid leave days
    Approved leave counts with its full number of days when it overlaps the month.
    """

    def compute(
        self,
        *,
        month: int,
        year: int,
        structure: SalaryStructure,
        attendance: Sequence[AttendanceRecord],
        leaves: Sequence[LeaveRequest],
        holidays: Sequence[Holiday],
        bonuses: Sequence[Bonus],
    ) -> PayrollComputation:
        first, last = month_bounds(year, month)
        total_days = last.day

        in_month = [r for r in attendance if first <= r.work_date <= last]
        present = sum(1 for r in in_month if r.status in PRESENT_STATUSES)
        half_days = sum(1 for r in in_month if r.status == AttendanceStatus.HALF_DAY)
        absent = sum(1 for r in in_month if r.status == AttendanceStatus.ABSENT)

        paid_leave_days = 0.0
        lop_days = 0.0
        for leave in leaves:
            if leave.status != LeaveStatus.APPROVED or not leave.overlaps(first, last):
                continue
            if leave.leave_type in UNPAID_LEAVE_TYPES:
                lop_days += leave.number_of_days
            else:
                paid_leave_days += leave.number_of_days

        holiday_count = sum(1 for h in holidays if h.is_active and first <= h.holiday_date <= last)
        weekoffs = count_weekday(first, last, WEEKOFF_WEEKDAY)
        working_days = total_days - weekoffs - holiday_count
        if working_days <= 0:
            raise ValidationError(f"No working days in {month:02d}/{year}")

        per_day_salary = structure.gross_salary / working_days
        lop_deduction = round_half_up(lop_days * per_day_salary)

        included = [
            b
            for b in bonuses
            if b.status == BonusStatus.APPROVED
            and not b.included_in_payroll
            and (b.month, b.year) == (month, year)
        ]
        bonus_amount = sum(b.amount for b in included)

        allowances = structure.allowances
        deductions = structure.deductions
        earnings = {
            "basic": structure.basic,
            "hra": structure.hra,
            "conveyance": allowances.get("conveyance", 0.0),
            "medical": allowances.get("medical", 0.0),
            "special": allowances.get("special", 0.0),
            "lta": allowances.get("lta", 0.0),
            "food": allowances.get("food", 0.0),
            "other_allowances": allowances.get("other", 0.0),
            "bonus": bonus_amount,
            "incentive": 0.0,
            "overtime": 0.0,
            "arrears": 0.0,
        }
        payroll_deductions = {
            "pf": deductions.get("pf", 0.0),
            "esi": deductions.get("esi", 0.0),
            "professional_tax": deductions.get("professional_tax", 0.0),
            "tds": deductions.get("tds", 0.0),
            "loan_recovery": deductions.get("loan_recovery", 0.0),
            "lop_deduction": lop_deduction,
            "other_deductions": deductions.get("other", 0.0),
        }

        return PayrollComputation(
            earnings=earnings,
            deductions=payroll_deductions,
            attendance=PayrollAttendance(
                working_days=working_days,
                present_days=effective_present_days(
                    present_days=present,
                    half_days=half_days,
                    paid_leave_days=paid_leave_days,
                ),
                absent_days=absent,
                lop_days=lop_days,
                paid_leave_days=paid_leave_days,
                holidays=holiday_count,
                weekoffs=weekoffs,
            ),
            bonus_ids=[b.bonus_id for b in included],
        )
