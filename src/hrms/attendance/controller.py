from __future__ import annotations

import csv
import io
from dataclasses import asdict
from datetime import timedelta

from flask import Flask, request

from ..common.datetime_utils import now_local, to_date
from ..common.http import api_response, json_body
from ..container import Container
from .report_service import REPORT_CSV_FIELDS, ReportData
from .service import KEEP


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _report_window():
        today = now_local().date()
        start_s = request.args.get("start") or (today - timedelta(days=7)).isoformat()
        end_s = request.args.get("end") or today.isoformat()
        return to_date(start_s, "start"), to_date(end_s, "end")

    def _write_report_csv(*, data: ReportData, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_CSV_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/attendance/punch-in", methods=["POST"], endpoint="attendance_punch_in")
    def punch_in():
        body = json_body()
        record = service.punch_in(body.get("employeeId"))
        return api_response(
            record,
            message=f"Punched in successfully at {record.punch_in.strftime('%H:%M:%S')}",
            status=201,
        )

    @app.route("/api/attendance/punch-out", methods=["POST"], endpoint="attendance_punch_out")
    def punch_out():
        body = json_body()
        record = service.punch_out(body.get("employeeId"))
        return api_response(
            record,
            message=(
                f"Punched out successfully at {record.punch_out.strftime('%H:%M:%S')}. "
                f"Worked {record.working_hours:.2f} hours."
            ),
        )

    @app.route("/api/attendance/punch-status/<employee_id>", methods=["GET"], endpoint="attendance_punch_status")
    def punch_status(employee_id: str):
        return api_response(service.get_punch_status(employee_id))

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    def list_attendance():
        records = service.list_attendance(
            employee_id=request.args.get("employeeId"),
            on_date=request.args.get("date"),
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
            approval_status=request.args.get("approvalStatus"),
        )
        return api_response(records, count=len(records))

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_mark")
    def mark_attendance():
        body = json_body()
        record, created = service.mark_attendance(
            employee_id=body.get("employeeId"),
            work_date=body.get("date"),
            status=body.get("status"),
            punch_in=body.get("punchIn"),
            punch_out=body.get("punchOut"),
            remarks=body.get("remarks"),
        )
        if created:
            return api_response(record, message="Attendance marked successfully", status=201)
        return api_response(record, message="Attendance updated successfully")

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    def update_attendance(attendance_id: int):
        body = json_body()
        record = service.update_attendance(
            attendance_id,
            employee_id=body.get("employeeId"),
            work_date=body.get("date"),
            status=body.get("status"),
            punch_in=body["punchIn"] if "punchIn" in body else KEEP,
            punch_out=body["punchOut"] if "punchOut" in body else KEEP,
            remarks=body.get("remarks"),
        )
        return api_response(record, message="Attendance record updated successfully")

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    def delete_attendance(attendance_id: int):
        service.delete_attendance(attendance_id)
        return api_response(message="Attendance record deleted successfully")

    @app.route("/api/attendance/employee/<employee_id>", methods=["GET"], endpoint="attendance_employee")
    def employee_attendance(employee_id: str):
        result = service.get_employee_attendance(employee_id)
        stats = {**asdict(result.stats), "total_working_hours": result.total_working_hours}
        return api_response(result.records, count=len(result.records), stats=stats)

    @app.route("/api/attendance/calendar", methods=["GET"], endpoint="attendance_calendar")
    def calendar():
        view = service.get_calendar(
            year=request.args.get("year"),
            month=request.args.get("month"),
            employee_id=request.args.get("employeeId"),
        )
        return api_response(
            {
                "calendar": view.calendar,
                "summary": view.summary,
                "attendance": view.attendance,
            }
        )

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    def daily_stats():
        return api_response(service.get_daily_stats())

    @app.route("/api/attendance/report", methods=["GET"], endpoint="attendance_report")
    def report():
        start, end = _report_window()
        data = container.attendance_report_service.build_attendance_report(
            start=start,
            end=end,
            employee_id=request.args.get("employeeId"),
        )
        return api_response({"rows": data.rows, "summary": data.summary}, count=len(data.rows))

    @app.route("/api/attendance/report.csv", methods=["GET"], endpoint="attendance_report_csv")
    def report_csv():
        start, end = _report_window()
        data = container.attendance_report_service.build_attendance_report(
            start=start,
            end=end,
            employee_id=request.args.get("employeeId"),
        )
        filename = f"attendance_report_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return _write_report_csv(data=data, filename=filename)
