from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ApprovalStatus, AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day."""

    attendance_id: int
    employee_id: str
    work_date: date
    status: AttendanceStatus
    punch_in: Optional[datetime] = None
    punch_out: Optional[datetime] = None
    working_hours: float = 0.0
    approval_status: ApprovalStatus = ApprovalStatus.NONE
    is_manual_correction: bool = False
    correction_reason: str = ""
    correction_requested_by: str = ""
    original_status: Optional[AttendanceStatus] = None
    original_punch_in: Optional[datetime] = None
    original_punch_out: Optional[datetime] = None
    approved_by: str = ""
    approval_date: Optional[datetime] = None
    approval_remarks: str = ""
    remarks: str = ""

    @property
    def has_punched_in(self) -> bool:
        return self.punch_in is not None

    @property
    def has_punched_out(self) -> bool:
        return self.punch_out is not None


@dataclass(frozen=True)
class PunchStatus:
    """Today's punch state for one employee (read model for the punch widget)."""

    employee_id: str
    has_punched_in: bool
    has_punched_out: bool
    punch_in: Optional[datetime]
    punch_out: Optional[datetime]
    status: Optional[AttendanceStatus]
    working_hours: float
    attendance: Optional[AttendanceRecord]


@dataclass(frozen=True)
class StatusCounts:
    """Literal per-status counts; half-days and leave are not folded in."""

    total_present: int = 0
    total_absent: int = 0
    total_late: int = 0
    total_early: int = 0
    total_half_day: int = 0


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read model for reports/CSV export (joined with the employee)."""

    attendance_id: int
    employee_id: str
    full_name: str
    department: str
    work_date: date
    status: AttendanceStatus
    punch_in: Optional[datetime]
    punch_out: Optional[datetime]
    working_hours: float
    approval_status: ApprovalStatus
    remarks: str = ""
