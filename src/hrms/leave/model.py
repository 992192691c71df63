from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import HalfDayType, HolidayType, LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveTypePolicy:
    """A configurable leave type; active paid types get a yearly balance of default_days."""

    type_id: int
    name: LeaveType
    code: str
    default_days: float = 0.0
    is_paid: bool = True
    carry_forward: bool = False
    max_carry_forward: float = 0.0
    description: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class LeaveBalanceEntry:
    """Counters for one (employee, year, leave type).

    available == allocated + carry_forward - used - pending
    """

    employee_id: str
    year: int
    leave_type: LeaveType
    allocated: float = 0.0
    used: float = 0.0
    pending: float = 0.0
    carry_forward: float = 0.0
    available: float = 0.0

    @property
    def is_consistent(self) -> bool:
        return abs(self.available - (self.allocated + self.carry_forward - self.used - self.pending)) < 1e-9


@dataclass(frozen=True)
class EmployeeLeaveBalance:
    employee_id: str
    employee_name: str
    year: int
    balances: list[LeaveBalanceEntry]


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    number_of_days: float
    reason: str
    status: LeaveStatus = LeaveStatus.PENDING
    is_half_day: bool = False
    half_day_type: Optional[HalfDayType] = None
    applied_on: Optional[datetime] = None
    approved_by: str = ""
    approved_on: Optional[datetime] = None
    rejection_reason: str = ""

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and self.end_date >= start


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    name: str
    holiday_date: date
    year: int
    holiday_type: HolidayType = HolidayType.COMPANY
    description: str = ""
    is_optional: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class LeaveDashboardStats:
    pending_requests: int
    approved_this_month: int
    upcoming_holidays: list[Holiday]
