from __future__ import annotations

from flask import Flask, request

from ..common.http import api_response, json_body, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    leave = container.leave_service
    holidays = container.holiday_service
    types = container.leave_type_service

    @app.route("/api/leave/types", methods=["GET"], endpoint="leave_types")
    def leave_types():
        data = types.list_leave_types()
        return api_response(data, count=len(data))

    @app.route("/api/leave/types", methods=["POST"], endpoint="leave_type_create")
    def create_leave_type():
        body = json_body()
        created = types.create_leave_type(
            name=body.get("name"),
            code=body.get("code"),
            default_days=body.get("defaultDays", 0),
            is_paid=body.get("isPaid", True),
            carry_forward=body.get("carryForward", False),
            max_carry_forward=body.get("maxCarryForward", 0),
            description=body.get("description"),
            is_active=body.get("isActive", True),
        )
        return api_response(created, message="Leave type created successfully", status=201)

    @app.route("/api/leave/types/<int:type_id>", methods=["PUT"], endpoint="leave_type_update")
    def update_leave_type(type_id: int):
        body = json_body()
        updated = types.update_leave_type(
            type_id,
            name=body.get("name"),
            code=body.get("code"),
            default_days=body.get("defaultDays"),
            is_paid=body.get("isPaid"),
            carry_forward=body.get("carryForward"),
            max_carry_forward=body.get("maxCarryForward"),
            description=body.get("description"),
            is_active=body.get("isActive"),
        )
        return api_response(updated, message="Leave type updated")

    @app.route("/api/leave/types/initialize", methods=["POST"], endpoint="leave_types_initialize")
    def initialize_leave_types():
        types.initialize_leave_types()
        return api_response(message="Leave types initialized")

    @app.route("/api/leave/balances", methods=["GET"], endpoint="leave_balances")
    def all_balances():
        data = leave.list_balances(year=request.args.get("year"))
        return api_response(data, count=len(data))

    @app.route("/api/leave/balances/<employee_id>", methods=["GET"], endpoint="leave_balance")
    def employee_balance(employee_id: str):
        return api_response(leave.get_balance(employee_id, year=request.args.get("year")))

    @app.route("/api/leave/balances/initialize", methods=["POST"], endpoint="leave_balances_initialize")
    def initialize_balances():
        n = leave.initialize_all_balances(year=json_body().get("year"))
        return api_response(message=f"Leave balances initialized for {n} employees")

    @app.route("/api/leave/requests", methods=["GET"], endpoint="leave_requests")
    def list_requests():
        rows = leave.list_requests(
            employee_id=request.args.get("employeeId"),
            status=request.args.get("status"),
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
        )
        data = [{**to_json(r), "employeeName": name} for r, name in rows]
        return api_response(data, count=len(data))

    @app.route("/api/leave/requests", methods=["POST"], endpoint="leave_apply")
    def apply_leave():
        body = json_body()
        created = leave.apply_leave(
            employee_id=body.get("employeeId"),
            leave_type=body.get("leaveType"),
            start_date=body.get("startDate"),
            end_date=body.get("endDate"),
            reason=body.get("reason"),
            is_half_day=bool(body.get("isHalfDay", False)),
            half_day_type=body.get("halfDayType"),
        )
        return api_response(created, message="Leave request submitted", status=201)

    @app.route("/api/leave/requests/<int:request_id>/process", methods=["PUT"], endpoint="leave_process")
    def process_request(request_id: int):
        body = json_body()
        action = body.get("action")
        updated = leave.process_leave(
            request_id,
            action=action,
            approved_by=body.get("approvedBy"),
            rejection_reason=body.get("rejectionReason"),
        )
        return api_response(updated, message=f"Leave request {action}d")

    @app.route("/api/leave/requests/<int:request_id>/cancel", methods=["PUT"], endpoint="leave_cancel")
    def cancel_request(request_id: int):
        return api_response(leave.cancel_leave(request_id), message="Leave request cancelled")

    @app.route("/api/leave/stats", methods=["GET"], endpoint="leave_stats")
    def dashboard_stats():
        return api_response(leave.get_dashboard_stats())

    @app.route("/api/leave/holidays", methods=["GET"], endpoint="holidays_list")
    def list_holidays():
        data = holidays.list_holidays(year=request.args.get("year"))
        return api_response(data, count=len(data))

    @app.route("/api/leave/holidays", methods=["POST"], endpoint="holidays_create")
    def create_holiday():
        body = json_body()
        created = holidays.create_holiday(
            name=body.get("name"),
            holiday_date=body.get("date"),
            holiday_type=body.get("type"),
            description=body.get("description"),
            is_optional=bool(body.get("isOptional", False)),
        )
        return api_response(created, message="Holiday created", status=201)

    @app.route("/api/leave/holidays/<int:holiday_id>", methods=["PUT"], endpoint="holidays_update")
    def update_holiday(holiday_id: int):
        body = json_body()
        updated = holidays.update_holiday(
            holiday_id,
            name=body.get("name"),
            holiday_date=body.get("date"),
            holiday_type=body.get("type"),
            description=body.get("description"),
            is_optional=body.get("isOptional"),
            is_active=body.get("isActive"),
        )
        return api_response(updated, message="Holiday updated")

    @app.route("/api/leave/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="holidays_delete")
    def delete_holiday(holiday_id: int):
        holidays.delete_holiday(holiday_id)
        return api_response(message="Holiday deleted")

    @app.route("/api/leave/holidays/initialize", methods=["POST"], endpoint="holidays_initialize")
    def initialize_holidays():
        holidays.initialize_holidays(year=json_body().get("year"))
        return api_response(message="Holidays initialized")
