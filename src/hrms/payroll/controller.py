from __future__ import annotations

from typing import Optional

from flask import Flask, request

from ..common.http import api_response, json_body, to_json
from ..container import Container
from ..employees.model import Employee


def _with_employee(payload: dict, employee: Optional[Employee]) -> dict:
    return {
        **payload,
        "employeeName": employee.full_name if employee else payload.get("employeeId"),
        "department": employee.department if employee else None,
    }


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    @app.route("/api/payroll", methods=["GET"], endpoint="payroll_list")
    def list_payroll():
        rows = service.list_payroll(
            month=request.args.get("month"),
            year=request.args.get("year"),
            employee_id=request.args.get("employeeId"),
            status=request.args.get("status"),
        )
        data = [_with_employee(to_json(p), e) for p, e in rows]
        return api_response(data, count=len(data))

    @app.route("/api/payroll/process", methods=["POST"], endpoint="payroll_process")
    def process_payroll():
        body = json_body()
        result = service.process_month(body.get("month"), body.get("year"), processed_by=body.get("processedBy"))
        return api_response(
            {"processed": result.processed, "errors": result.errors},
            message=f"Payroll processed for {len(result.processed)} employees",
        )

    @app.route("/api/payroll/lock", methods=["POST"], endpoint="payroll_lock")
    def lock_payroll():
        body = json_body()
        n = service.lock_payroll(body.get("month"), body.get("year"))
        return api_response(message="Payroll locked successfully", count=n)

    @app.route("/api/payroll/<int:payroll_id>/approve", methods=["PUT"], endpoint="payroll_approve")
    def approve_payroll(payroll_id: int):
        body = json_body()
        payroll = service.approve_payroll(payroll_id, approved_by=body.get("approvedBy"))
        return api_response(payroll, message="Payroll approved")

    @app.route("/api/payroll/<int:payroll_id>/pay", methods=["PUT"], endpoint="payroll_pay")
    def pay_payroll(payroll_id: int):
        body = json_body()
        payroll = service.mark_paid(
            payroll_id,
            payment_mode=body.get("paymentMode"),
            transaction_id=body.get("transactionId"),
        )
        return api_response(payroll, message="Payroll marked as paid")

    @app.route("/api/payroll/stats", methods=["GET"], endpoint="payroll_stats")
    def payroll_stats():
        return api_response(service.get_stats(month=request.args.get("month"), year=request.args.get("year")))

    @app.route("/api/payroll/config", methods=["GET"], endpoint="payroll_config")
    def payroll_config():
        return api_response(service.get_config())

    @app.route("/api/payroll/config", methods=["PUT"], endpoint="payroll_config_update")
    def update_payroll_config():
        body = json_body()
        config = service.update_config(
            pf_percentage=body.get("pfPercentage"),
            esi_percentage=body.get("esiPercentage"),
            esi_threshold=body.get("esiThreshold"),
            professional_tax_slab=body.get("professionalTaxSlab"),
            payroll_processing_day=body.get("payrollProcessingDay"),
            payment_day=body.get("paymentDay"),
            financial_year_start=body.get("financialYearStart"),
        )
        return api_response(config, message="Config updated")

    @app.route(
        "/api/payroll/payslip/<employee_id>/<int:month>/<int:year>",
        methods=["GET"],
        endpoint="payroll_payslip",
    )
    def payslip(employee_id: str, month: int, year: int):
        slip = service.get_payslip(employee_id, month, year)
        data = {**to_json(slip.payroll), "employee": to_json(slip.employee), "company": slip.company}
        return api_response(data)

    @app.route("/api/payroll/salary-structures", methods=["GET"], endpoint="salary_structures")
    def list_structures():
        data = [_with_employee(to_json(s), e) for s, e in service.list_structures()]
        return api_response(data, count=len(data))

    @app.route("/api/payroll/salary-structures/<employee_id>", methods=["GET"], endpoint="salary_structure")
    def get_structure(employee_id: str):
        return api_response(service.get_structure(employee_id))

    @app.route("/api/payroll/salary-structures", methods=["POST"], endpoint="salary_structure_save")
    def save_structure():
        body = json_body()
        structure = service.upsert_structure(
            employee_id=body.get("employeeId"),
            basic=body.get("basic"),
            hra=body.get("hra", 0),
            allowances=body.get("allowances"),
            deductions=body.get("deductions"),
            effective_from=body.get("effectiveFrom"),
        )
        return api_response(structure, message="Salary structure saved")

    @app.route("/api/payroll/bonuses", methods=["GET"], endpoint="bonus_list")
    def list_bonuses():
        rows = service.list_bonuses(
            employee_id=request.args.get("employeeId"),
            month=request.args.get("month"),
            year=request.args.get("year"),
            status=request.args.get("status"),
        )
        data = [{**to_json(b), "employeeName": name} for b, name in rows]
        return api_response(data, count=len(data))

    @app.route("/api/payroll/bonuses", methods=["POST"], endpoint="bonus_create")
    def create_bonus():
        body = json_body()
        bonus = service.create_bonus(
            employee_id=body.get("employeeId"),
            bonus_type=body.get("bonusType"),
            amount=body.get("amount"),
            month=body.get("month"),
            year=body.get("year"),
            reason=body.get("reason"),
        )
        return api_response(bonus, message="Bonus created", status=201)

    @app.route("/api/payroll/bonuses/<int:bonus_id>/approve", methods=["PUT"], endpoint="bonus_approve")
    def approve_bonus(bonus_id: int):
        bonus = service.approve_bonus(bonus_id, approved_by=json_body().get("approvedBy"))
        return api_response(bonus, message="Bonus approved")
