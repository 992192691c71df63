from __future__ import annotations

from datetime import date

import pytest

from hrms.attendance.report_service import AttendanceReportService
from hrms.attendance.service import AttendanceService
from hrms.core.exceptions import ValidationError


def test_report_rows_and_summary(attendance_repo, employees, work_config):
    svc = AttendanceService(attendance_repo, employees, work_config=work_config)
    svc.mark_attendance(
        employee_id="EMP001", work_date="2026-04-01", status="Present", punch_in="09:00", punch_out="18:00"
    )
    svc.mark_attendance(
        employee_id="EMP001", work_date="2026-04-02", status="Late", punch_in="09:30", punch_out="18:00"
    )
    svc.mark_attendance(
        employee_id="EMP002", work_date="2026-04-01", status="Half-Day", punch_in="09:00", punch_out="12:00"
    )

    report = AttendanceReportService(attendance_repo).build_attendance_report(
        start=date(2026, 4, 1),
        end=date(2026, 4, 30),
    )

    assert len(report.rows) == 3
    assert report.rows[0]["punch_in"] == "09:00"
    top = report.summary[0]
    assert top["employee_id"] == "EMP001"
    assert top["days"] == 2
    assert top["total_hours"] == "17:30"


def test_report_rejects_inverted_window(attendance_repo):
    with pytest.raises(ValidationError):
        AttendanceReportService(attendance_repo).build_attendance_report(
            start=date(2026, 4, 30),
            end=date(2026, 4, 1),
        )
