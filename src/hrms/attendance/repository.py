from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus, AttendanceStatus
from .model import AttendanceRecord, AttendanceReportRow


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_records(
        self,
        *,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        approval_status: Optional[ApprovalStatus] = None,
        newest_first: bool = True,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_punch_in(
        self,
        *,
        employee_id: str,
        work_date: date,
        punch_in: datetime,
        status: AttendanceStatus,
    ) -> Optional[int]:
        """Insert the day's record; None when (employee, date) already exists."""

        raise NotImplementedError

    def set_punch_in(self, *, attendance_id: int, punch_in: datetime, status: AttendanceStatus) -> bool:
        """Fill punch-in on a record that has none yet; False when it already had one."""

        raise NotImplementedError

    def set_punch_out(
        self,
        *,
        attendance_id: int,
        punch_out: datetime,
        status: AttendanceStatus,
        working_hours: float,
    ) -> bool:
        """Fill punch-out on a punched-in record that has none yet."""

        raise NotImplementedError

    def create_record(self, record: AttendanceRecord) -> Optional[int]:
        """Insert a full record, workflow fields included; None when (employee, date) already exists."""

        raise NotImplementedError

    def update_record(self, record: AttendanceRecord) -> bool:
        """Admin overwrite of the editable fields (no workflow guard)."""

        raise NotImplementedError

    def apply_correction(self, record: AttendanceRecord) -> bool:
        """Store a correction request unless one is already Pending for the record."""

        raise NotImplementedError

    def decide_correction(self, record: AttendanceRecord) -> bool:
        """Store an approve/reject outcome only while the record is still Pending."""

        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def count_by_approval_status(self, approval_status: ApprovalStatus) -> int:
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
