from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError
from .repository import AttendanceRepository

REPORT_CSV_FIELDS = [
    "work_date",
    "employee_id",
    "full_name",
    "department",
    "punch_in",
    "punch_out",
    "status",
    "worked_hours",
    "approval_status",
    "remarks",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


def _hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class AttendanceReportService:
    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def build_attendance_report(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[str] = None,
    ) -> ReportData:
        if end < start:
            raise ValidationError("end must not be before start")

        query_rows = self._attendance.get_report_rows(start_date=start, end_date=end, employee_id=employee_id)

        summary_map: dict[str, dict] = {}
        out_rows: list[dict] = []

        for r in query_rows:
            minutes = int(round(r.working_hours * 60))

            out_rows.append(
                {
                    "work_date": r.work_date.strftime("%Y-%m-%d"),
                    "employee_id": r.employee_id,
                    "full_name": r.full_name,
                    "department": r.department or "-",
                    "punch_in": r.punch_in.strftime("%H:%M") if r.punch_in else "-",
                    "punch_out": r.punch_out.strftime("%H:%M") if r.punch_out else "-",
                    "status": r.status.value,
                    "worked_hours": _hhmm(minutes),
                    "approval_status": r.approval_status.value,
                    "remarks": r.remarks or "",
                }
            )

            s = summary_map.get(r.employee_id)
            if not s:
                s = {
                    "employee_id": r.employee_id,
                    "full_name": r.full_name,
                    "days": 0,
                    "total_minutes": 0,
                }
                summary_map[r.employee_id] = s
            s["days"] += 1
            s["total_minutes"] += minutes

        summary = [
            {
                "employee_id": s["employee_id"],
                "full_name": s["full_name"],
                "days": s["days"],
                "total_hours": _hhmm(s["total_minutes"]),
                "total_minutes": s["total_minutes"],
            }
            for s in summary_map.values()
        ]
        summary.sort(key=lambda x: x["total_minutes"], reverse=True)
        return ReportData(rows=out_rows, summary=summary)
