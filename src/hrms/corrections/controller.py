from __future__ import annotations

from flask import Flask

from ..common.http import api_response, json_body, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.correction_service

    @app.route("/api/attendance/correction", methods=["POST"], endpoint="correction_request")
    def request_correction():
        body = json_body()
        record = service.request_correction(
            employee_id=body.get("employeeId"),
            work_date=body.get("date"),
            reason=body.get("reason"),
            corrected_punch_in=body.get("correctedPunchIn"),
            corrected_punch_out=body.get("correctedPunchOut"),
            corrected_status=body.get("correctedStatus"),
            requested_by=body.get("requestedBy"),
        )
        return api_response(record, message="Correction request submitted successfully. Awaiting HR approval.")

    @app.route("/api/attendance/corrections/pending", methods=["GET"], endpoint="correction_pending")
    def pending_corrections():
        items = service.list_pending()
        data = [
            {**to_json(p.record), "employeeName": p.employee_name, "employeeEmail": p.employee_email}
            for p in items
        ]
        return api_response(data, count=len(data))

    @app.route("/api/attendance/corrections/<int:attendance_id>/process", methods=["PUT"], endpoint="correction_process")
    def process_correction(attendance_id: int):
        body = json_body()
        action = body.get("action")
        record = service.process(
            attendance_id,
            action=action,
            remarks=body.get("remarks"),
            approved_by=body.get("approvedBy"),
        )
        verb = "approved" if action == "approve" else "rejected"
        return api_response(record, message=f"Correction request {verb} successfully")
