from __future__ import annotations

from datetime import datetime

import pytest

from hrms.attendance.service import AttendanceService
from hrms.core.enums import ApprovalStatus, AttendanceStatus
from hrms.core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from hrms.corrections.service import CorrectionService


@pytest.fixture
def attendance(attendance_repo, employees, work_config):
    return AttendanceService(attendance_repo, employees, work_config=work_config)


@pytest.fixture
def corrections(attendance_repo, employees, work_config):
    return CorrectionService(attendance_repo, employees, work_config=work_config)


def _late_day(attendance):
    rec, _ = attendance.mark_attendance(
        employee_id="EMP001",
        work_date="2026-04-10",
        status="Late",
        punch_in="09:40",
        punch_out="18:00",
    )
    return rec


def test_reason_is_required(corrections):
    with pytest.raises(ValidationError, match="Correction reason is required"):
        corrections.request_correction(employee_id="EMP001", work_date="2026-04-10", reason="  ")


def test_unknown_employee(corrections):
    with pytest.raises(NotFoundError):
        corrections.request_correction(employee_id="NOPE", work_date="2026-04-10", reason="forgot")


def test_request_recomputes_status_from_corrected_time(attendance, corrections):
    original = _late_day(attendance)
    rec = corrections.request_correction(
        employee_id="EMP001",
        work_date="2026-04-10",
        corrected_punch_in="09:00",
        reason="Badge reader was down",
    )
    assert rec.attendance_id == original.attendance_id
    assert rec.status == AttendanceStatus.PRESENT
    assert rec.approval_status == ApprovalStatus.PENDING
    assert rec.original_status == AttendanceStatus.LATE
    assert rec.original_punch_in == datetime(2026, 4, 10, 9, 40)
    assert rec.working_hours == 9.0


def test_explicit_status_wins(attendance, corrections):
    _late_day(attendance)
    rec = corrections.request_correction(
        employee_id="EMP001",
        work_date="2026-04-10",
        corrected_punch_in="09:00",
        corrected_status="Half-Day",
        reason="Left at noon",
    )
    assert rec.status == AttendanceStatus.HALF_DAY


def test_request_creates_absent_day_when_missing(corrections):
    rec = corrections.request_correction(
        employee_id="EMP001",
        work_date="2026-04-10",
        corrected_punch_in="2026-04-10T09:05:00",
        corrected_punch_out="2026-04-10T18:00:00",
        reason="Worked from client site",
    )
    assert rec.original_status == AttendanceStatus.ABSENT
    assert rec.original_punch_in is None
    assert rec.status == AttendanceStatus.PRESENT


def test_second_request_while_pending_is_rejected(attendance, corrections):
    _late_day(attendance)
    corrections.request_correction(employee_id="EMP001", work_date="2026-04-10", corrected_punch_in="09:00", reason="x")
    with pytest.raises(BusinessRuleError, match="already pending"):
        corrections.request_correction(employee_id="EMP001", work_date="2026-04-10", reason="again")


def test_corrected_punch_out_before_punch_in_is_rejected(attendance, corrections):
    _late_day(attendance)
    with pytest.raises(ValidationError):
        corrections.request_correction(
            employee_id="EMP001",
            work_date="2026-04-10",
            corrected_punch_out="08:00",
            reason="typo",
        )


def test_list_pending_includes_employee(attendance, corrections):
    _late_day(attendance)
    corrections.request_correction(employee_id="EMP001", work_date="2026-04-10", corrected_punch_in="09:00", reason="x")
    pending = corrections.list_pending()
    assert len(pending) == 1
    assert pending[0].employee_name == "Aarav Sharma"


def test_approve_keeps_corrected_values(attendance, corrections):
    rec = _late_day(attendance)
    corrections.request_correction(employee_id="EMP001", work_date="2026-04-10", corrected_punch_in="09:00", reason="x")

    done = corrections.process(rec.attendance_id, action="approve", remarks="ok")
    assert done.approval_status == ApprovalStatus.APPROVED
    assert done.status == AttendanceStatus.PRESENT
    assert done.approved_by == "HR Admin"


def test_reject_restores_snapshot(attendance, corrections):
    rec = _late_day(attendance)
    corrections.request_correction(employee_id="EMP001", work_date="2026-04-10", corrected_punch_in="09:00", reason="x")

    done = corrections.process(rec.attendance_id, action="reject", approved_by="Manager")
    assert done.approval_status == ApprovalStatus.REJECTED
    assert done.status == AttendanceStatus.LATE
    assert done.punch_in == datetime(2026, 4, 10, 9, 40)
    assert done.working_hours == rec.working_hours


def test_processed_request_cannot_be_processed_again(attendance, corrections):
    rec = _late_day(attendance)
    corrections.request_correction(employee_id="EMP001", work_date="2026-04-10", corrected_punch_in="09:00", reason="x")
    corrections.process(rec.attendance_id, action="approve")

    with pytest.raises(BusinessRuleError, match="already been processed"):
        corrections.process(rec.attendance_id, action="reject")


def test_unknown_action(attendance, corrections):
    rec = _late_day(attendance)
    with pytest.raises(ValidationError):
        corrections.process(rec.attendance_id, action="maybe")


def test_new_request_allowed_after_decision(attendance, corrections):
    rec = _late_day(attendance)
    corrections.request_correction(employee_id="EMP001", work_date="2026-04-10", corrected_punch_in="09:00", reason="x")
    corrections.process(rec.attendance_id, action="reject")

    again = corrections.request_correction(
        employee_id="EMP001", work_date="2026-04-10", corrected_punch_in="09:10", reason="second try"
    )
    assert again.approval_status == ApprovalStatus.PENDING


def test_invalid_correction_on_empty_day_writes_nothing(corrections, attendance_repo):
    with pytest.raises(ValidationError, match="Punch out time cannot be before punch in time"):
        corrections.request_correction(
            employee_id="EMP001",
            work_date="2026-04-10",
            corrected_punch_in="10:00",
            corrected_punch_out="09:00",
            reason="typo",
        )
    assert list(attendance_repo.list_records(employee_id="EMP001")) == []


def test_invalid_status_on_empty_day_writes_nothing(corrections, attendance_repo):
    with pytest.raises(ValidationError):
        corrections.request_correction(
            employee_id="EMP001", work_date="2026-04-10", corrected_status="Sleeping", reason="x"
        )
    assert list(attendance_repo.list_records(employee_id="EMP001")) == []


def test_request_on_empty_day_is_stored_pending_in_one_record(corrections, attendance_repo):
    corrections.request_correction(
        employee_id="EMP001", work_date="2026-04-10", corrected_punch_in="09:00", reason="Worked offsite"
    )
    records = list(attendance_repo.list_records(employee_id="EMP001"))
    assert len(records) == 1
    assert records[0].approval_status == ApprovalStatus.PENDING
    assert records[0].is_manual_correction is True
