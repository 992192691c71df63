from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import month_bounds, now_local, to_date, to_datetime
from ..common.validators import optional_enum, require_enum, require_month, require_non_empty, require_year
from ..core.enums import ApprovalStatus, AttendanceStatus
from ..core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .config import WorkConfig
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, PunchStatus, StatusCounts
from .repository import AttendanceRepository
from .status import count_statuses, decide_status, working_hours

logger = logging.getLogger(__name__)

# Marks an optional update argument as "not supplied" (None means "clear").
KEEP: Any = object()


@dataclass(frozen=True)
class EmployeeAttendance:
    employee: Employee
    records: Sequence[AttendanceRecord]
    stats: StatusCounts
    total_working_hours: float


@dataclass(frozen=True)
class CalendarSummary:
    total_present: int
    total_absent: int
    total_late: int
    total_early: int
    total_half_day: int
    pending_approvals: int


@dataclass(frozen=True)
class CalendarView:
    calendar: dict[str, list[AttendanceRecord]]
    summary: CalendarSummary
    attendance: Sequence[AttendanceRecord]


@dataclass(frozen=True)
class DailyStats:
    total_employees: int
    present_today: int
    absent_today: int
    late_today: int
    early_today: int
    half_day_today: int
    pending_approvals: int
    not_marked: int


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        work_config: WorkConfig | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._config = work_config or WorkConfig()
        self._factory = strategy_factory or AttendanceStrategyFactory()

    @property
    def work_config(self) -> WorkConfig:
        return self._config

    def _require_employee(self, employee_id: str) -> Employee:
        employee_id = require_non_empty(employee_id, "employeeId")
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _require_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def punch_in(self, employee_id: str, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        employee = self._require_employee(employee_id)

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        if existing and existing.punch_in is not None:
            raise BusinessRuleError("Already punched in today")

        decision = decide_status(now, None, self._config, factory=self._factory)

        if existing:
            # Day created earlier by a manual mark or a correction request.
            ok = self._attendance.set_punch_in(
                attendance_id=existing.attendance_id,
                punch_in=now,
                status=decision.status,
            )
            if not ok:
                raise BusinessRuleError("Already punched in today")
            attendance_id = existing.attendance_id
        else:
            new_id = self._attendance.create_punch_in(
                employee_id=employee.employee_id,
                work_date=today,
                punch_in=now,
                status=decision.status,
            )
            if new_id is None:
                raise BusinessRuleError("Already punched in today")
            attendance_id = new_id

        logger.info(
            "Punch-in employee=%s at %s status=%s%s",
            employee.employee_id,
            now.strftime("%H:%M:%S"),
            decision.status.value,
            f" ({decision.note})" if decision.note else "",
        )
        return self._require_record(attendance_id)

    def punch_out(self, employee_id: str, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        employee = self._require_employee(employee_id)

        record = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        if not record or record.punch_in is None:
            raise BusinessRuleError("No punch in record found for today. Please punch in first.")
        if record.punch_out is not None:
            raise BusinessRuleError("Already punched out today")
        if now < record.punch_in:
            raise ValidationError("Punch out time cannot be before punch in time")

        decision = decide_status(record.punch_in, now, self._config, factory=self._factory)
        hours = working_hours(record.punch_in, now)

        ok = self._attendance.set_punch_out(
            attendance_id=record.attendance_id,
            punch_out=now,
            status=decision.status,
            working_hours=hours,
        )
        if not ok:
            raise BusinessRuleError("Already punched out today")

        logger.info(
            "Punch-out employee=%s at %s status=%s hours=%.2f",
            employee.employee_id,
            now.strftime("%H:%M:%S"),
            decision.status.value,
            hours,
        )
        return self._require_record(record.attendance_id)

    def get_punch_status(self, employee_id: str, *, today: date | None = None) -> PunchStatus:
        today = today or now_local().date()
        employee = self._require_employee(employee_id)
        record = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        return PunchStatus(
            employee_id=employee.employee_id,
            has_punched_in=bool(record and record.punch_in),
            has_punched_out=bool(record and record.punch_out),
            punch_in=record.punch_in if record else None,
            punch_out=record.punch_out if record else None,
            status=record.status if record else None,
            working_hours=record.working_hours if record else 0.0,
            attendance=record,
        )

    def mark_attendance(
        self,
        *,
        employee_id: str,
        work_date,
        status,
        punch_in=None,
        punch_out=None,
        remarks: Optional[str] = None,
    ) -> tuple[AttendanceRecord, bool]:
        """Create or overwrite the day's record. Returns (record, created)."""
        employee = self._require_employee(employee_id)
        day = to_date(work_date)
        status = require_enum(status, AttendanceStatus, "status")
        new_in = to_datetime(punch_in, on_date=day, field_name="punchIn")
        new_out = to_datetime(punch_out, on_date=day, field_name="punchOut")

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, day)
        if existing:
            merged_in = new_in or existing.punch_in
            merged_out = new_out or existing.punch_out
            self._check_punch_order(merged_in, merged_out)
            updated = replace(
                existing,
                status=status,
                punch_in=merged_in,
                punch_out=merged_out,
                working_hours=working_hours(merged_in, merged_out),
                remarks=existing.remarks if remarks is None else remarks,
            )
            self._attendance.update_record(updated)
            logger.info("Attendance updated employee=%s date=%s status=%s", employee.employee_id, day, status.value)
            return self._require_record(existing.attendance_id), False

        self._check_punch_order(new_in, new_out)
        draft = AttendanceRecord(
            attendance_id=0,
            employee_id=employee.employee_id,
            work_date=day,
            status=status,
            punch_in=new_in,
            punch_out=new_out,
            working_hours=working_hours(new_in, new_out),
            remarks=remarks or "",
        )
        new_id = self._attendance.create_record(draft)
        if new_id is None:
            raise BusinessRuleError("Attendance already marked for this employee on this date")
        logger.info("Attendance marked employee=%s date=%s status=%s", employee.employee_id, day, status.value)
        return self._require_record(new_id), True

    def update_attendance(
        self,
        attendance_id: int,
        *,
        employee_id: Optional[str] = None,
        work_date=None,
        status=None,
        punch_in=KEEP,
        punch_out=KEEP,
        remarks: Optional[str] = None,
    ) -> AttendanceRecord:
        """Admin edit. Punch arguments left at KEEP are untouched; blank values clear them."""
        record = self._require_record(attendance_id)

        target_employee = record.employee_id
        if employee_id and employee_id != record.employee_id:
            target_employee = self._require_employee(employee_id).employee_id
        day = to_date(work_date) if work_date else record.work_date

        if target_employee != record.employee_id or day != record.work_date:
            clash = self._attendance.get_for_employee_and_date(target_employee, day)
            if clash and clash.attendance_id != record.attendance_id:
                raise BusinessRuleError("Attendance already marked for this employee on this date")

        new_in = record.punch_in if punch_in is KEEP else to_datetime(punch_in, on_date=day, field_name="punchIn")
        new_out = record.punch_out if punch_out is KEEP else to_datetime(punch_out, on_date=day, field_name="punchOut")
        self._check_punch_order(new_in, new_out)

        updated = replace(
            record,
            employee_id=target_employee,
            work_date=day,
            status=require_enum(status, AttendanceStatus, "status") if status else record.status,
            punch_in=new_in,
            punch_out=new_out,
            working_hours=working_hours(new_in, new_out),
            remarks=record.remarks if remarks is None else remarks,
        )
        if not self._attendance.update_record(updated):
            raise NotFoundError("Attendance record not found")
        logger.info("Attendance %s edited", record.attendance_id)
        return self._require_record(record.attendance_id)

    def delete_attendance(self, attendance_id: int) -> None:
        if not self._attendance.delete(int(attendance_id)):
            raise NotFoundError("Attendance record not found")
        logger.info("Attendance %s deleted", attendance_id)

    def list_attendance(
        self,
        *,
        employee_id: Optional[str] = None,
        on_date=None,
        start_date=None,
        end_date=None,
        approval_status=None,
    ) -> Sequence[AttendanceRecord]:
        if on_date:
            start = end = to_date(on_date, "date")
        else:
            start = to_date(start_date, "startDate") if start_date else None
            end = to_date(end_date, "endDate") if end_date else None
        return self._attendance.list_records(
            employee_id=employee_id or None,
            start_date=start,
            end_date=end,
            approval_status=optional_enum(approval_status, ApprovalStatus, "approvalStatus"),
        )

    def get_employee_attendance(self, employee_id: str) -> EmployeeAttendance:
        employee = self._require_employee(employee_id)
        records = self._attendance.list_records(employee_id=employee.employee_id)
        return EmployeeAttendance(
            employee=employee,
            records=records,
            stats=count_statuses(records),
            total_working_hours=round(sum(r.working_hours for r in records), 2),
        )

    def get_calendar(self, *, year, month, employee_id: Optional[str] = None) -> CalendarView:
        if not year or not month:
            raise ValidationError("Year and month are required")
        first, last = month_bounds(require_year(year), require_month(month))
        records = self._attendance.list_records(
            employee_id=employee_id or None,
            start_date=first,
            end_date=last,
            newest_first=False,
        )

        calendar: dict[str, list[AttendanceRecord]] = {}
        for r in records:
            calendar.setdefault(r.work_date.isoformat(), []).append(r)

        counts = count_statuses(records)
        summary = CalendarSummary(
            total_present=counts.total_present,
            total_absent=counts.total_absent,
            total_late=counts.total_late,
            total_early=counts.total_early,
            total_half_day=counts.total_half_day,
            pending_approvals=sum(1 for r in records if r.approval_status == ApprovalStatus.PENDING),
        )
        return CalendarView(calendar=calendar, summary=summary, attendance=records)

    def get_daily_stats(self, *, today: date | None = None) -> DailyStats:
        today = today or now_local().date()
        records = self._attendance.list_records(start_date=today, end_date=today)
        counts = count_statuses(records)
        total = self._employees.count_active()
        return DailyStats(
            total_employees=total,
            present_today=counts.total_present,
            absent_today=counts.total_absent,
            late_today=counts.total_late,
            early_today=counts.total_early,
            half_day_today=counts.total_half_day,
            pending_approvals=self._attendance.count_by_approval_status(ApprovalStatus.PENDING),
            not_marked=max(total - len(records), 0),
        )

    @staticmethod
    def _check_punch_order(punch_in: Optional[datetime], punch_out: Optional[datetime]) -> None:
        if punch_in is not None and punch_out is not None and punch_out < punch_in:
            raise ValidationError("Punch out time cannot be before punch in time")

