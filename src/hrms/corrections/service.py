from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..attendance.config import WorkConfig
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..attendance.status import derive_status, working_hours
from ..common.datetime_utils import now_local, to_date, to_datetime
from ..common.validators import optional_enum, require_non_empty
from ..core.constants import DEFAULT_APPROVER
from ..core.enums import ApprovalStatus, AttendanceStatus, ReviewAction
from ..core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import PendingCorrection

logger = logging.getLogger(__name__)


class CorrectionService:
    """Manual attendance corrections: None -> Pending -> Approved | Rejected.

    A request snapshots the current punches/status so a rejection can restore them.
    Approved and Rejected are terminal until the next request on the same record.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        work_config: WorkConfig | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._config = work_config or WorkConfig()

    def request_correction(
        self,
        *,
        employee_id: str,
        work_date,
        reason: Optional[str],
        corrected_punch_in=None,
        corrected_punch_out=None,
        corrected_status=None,
        requested_by: Optional[str] = None,
    ) -> AttendanceRecord:
        if not reason or not str(reason).strip():
            raise ValidationError("Correction reason is required")
        employee_id = require_non_empty(employee_id, "employeeId")
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")

        day = to_date(work_date)
        status_override = optional_enum(corrected_status, AttendanceStatus, "correctedStatus")
        new_in = to_datetime(corrected_punch_in, on_date=day, field_name="correctedPunchIn")
        new_out = to_datetime(corrected_punch_out, on_date=day, field_name="correctedPunchOut")
        reason = str(reason).strip()
        requested_by = (requested_by or "").strip() or employee_id

        existing = self._attendance.get_for_employee_and_date(employee_id, day)
        blank = AttendanceRecord(attendance_id=0, employee_id=employee_id, work_date=day, status=AttendanceStatus.ABSENT)
        requested = self._build_request(
            existing or blank,
            new_in=new_in,
            new_out=new_out,
            status_override=status_override,
            reason=reason,
            requested_by=requested_by,
        )

        if existing is None:
            # No row yet: the request is the day's first write.
            new_id = self._attendance.create_record(requested)
            if new_id is None:
                raise BusinessRuleError("Attendance for this date was recorded meanwhile, please retry")
            attendance_id = new_id
        else:
            if not self._attendance.apply_correction(requested):
                raise BusinessRuleError("A correction request is already pending for this date")
            attendance_id = existing.attendance_id

        logger.info(
            "Correction requested employee=%s date=%s status %s -> %s",
            employee_id,
            day,
            requested.original_status.value,
            requested.status.value,
        )
        return self._require_record(attendance_id)

    def _build_request(
        self,
        record: AttendanceRecord,
        *,
        new_in: Optional[datetime],
        new_out: Optional[datetime],
        status_override: Optional[AttendanceStatus],
        reason: str,
        requested_by: str,
    ) -> AttendanceRecord:
        if record.approval_status == ApprovalStatus.PENDING:
            raise BusinessRuleError("A correction request is already pending for this date")

        punch_in = new_in or record.punch_in
        punch_out = new_out or record.punch_out
        if punch_in is not None and punch_out is not None and punch_out < punch_in:
            raise ValidationError("Punch out time cannot be before punch in time")

        if status_override is not None:
            status = status_override
        elif new_in is not None or new_out is not None:
            status = derive_status(punch_in, punch_out, self._config)
        else:
            status = record.status

        return replace(
            record,
            original_status=record.status,
            original_punch_in=record.punch_in,
            original_punch_out=record.punch_out,
            status=status,
            punch_in=punch_in,
            punch_out=punch_out,
            working_hours=working_hours(punch_in, punch_out),
            is_manual_correction=True,
            correction_reason=reason,
            correction_requested_by=requested_by,
            approval_status=ApprovalStatus.PENDING,
            approved_by="",
            approval_date=None,
            approval_remarks="",
        )

    def list_pending(self) -> Sequence[PendingCorrection]:
        records = self._attendance.list_records(approval_status=ApprovalStatus.PENDING)
        names: dict[str, tuple[str, str]] = {}
        out: list[PendingCorrection] = []
        for r in records:
            if not r.is_manual_correction:
                continue
            if r.employee_id not in names:
                e = self._employees.get_by_id(r.employee_id)
                names[r.employee_id] = (e.full_name, e.email) if e else (r.employee_id, "")
            name, email = names[r.employee_id]
            out.append(PendingCorrection(record=r, employee_name=name, employee_email=email))
        return out

    def process(
        self,
        attendance_id: int,
        *,
        action,
        remarks: Optional[str] = None,
        approved_by: Optional[str] = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        try:
            action = ReviewAction(action)
        except ValueError:
            raise ValidationError('Action must be either "approve" or "reject"')
        now = now or now_local()

        record = self._require_record(attendance_id)
        if record.approval_status != ApprovalStatus.PENDING:
            raise BusinessRuleError("This correction request has already been processed")

        decided = replace(
            record,
            approved_by=(approved_by or "").strip() or DEFAULT_APPROVER,
            approval_date=now,
            approval_remarks=remarks or "",
        )
        if action == ReviewAction.APPROVE:
            decided = replace(decided, approval_status=ApprovalStatus.APPROVED)
        else:
            decided = replace(
                decided,
                approval_status=ApprovalStatus.REJECTED,
                status=record.original_status or record.status,
                punch_in=record.original_punch_in,
                punch_out=record.original_punch_out,
                working_hours=working_hours(record.original_punch_in, record.original_punch_out),
            )

        if not self._attendance.decide_correction(decided):
            raise BusinessRuleError("This correction request has already been processed")

        logger.info(
            "Correction %s for attendance=%s employee=%s by %s",
            "approved" if action == ReviewAction.APPROVE else "rejected",
            record.attendance_id,
            record.employee_id,
            decided.approved_by,
        )
        return self._require_record(record.attendance_id)

    def _require_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        return record
