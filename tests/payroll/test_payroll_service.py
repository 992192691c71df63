from __future__ import annotations

from datetime import date, datetime

import pytest

from hrms.attendance.model import AttendanceRecord
from hrms.common.datetime_utils import iter_days
from hrms.core.enums import AttendanceStatus, BonusStatus, LeaveStatus, LeaveType, PaymentMode, PayrollStatus
from hrms.core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from hrms.leave.model import Holiday, LeaveRequest

RUN_AT = datetime(2026, 5, 1, 10, 0)


@pytest.fixture
def service(container):
    return container.payroll_service


@pytest.fixture
def april(service, attendance_repo, leave_requests, holidays):
    """30-day month, four Sundays and one holiday: 25 working days."""
    service.upsert_structure(
        employee_id="EMP001",
        basic=30000,
        hra=12000,
        allowances={"conveyance": 1600, "medical": 1250, "special": 5150},
        deductions={"pf": 1800, "professionalTax": 200},
        effective_from="2026-01-01",
    )
    holidays.create(Holiday(0, "Founders Day", date(2026, 4, 14), 2026))

    working = [d for d in iter_days(date(2026, 4, 1), date(2026, 4, 30)) if d.weekday() != 6 and d.day != 14]
    assert len(working) == 25

    for i, d in enumerate(working[:20]):
        status = AttendanceStatus.LATE if i % 5 == 0 else AttendanceStatus.PRESENT
        attendance_repo.create_record(AttendanceRecord(attendance_id=0, employee_id="EMP001", work_date=d, status=status))
    for d in working[20:22]:
        attendance_repo.create_record(
            AttendanceRecord(attendance_id=0, employee_id="EMP001", work_date=d, status=AttendanceStatus.HALF_DAY)
        )

    leave_requests.create(
        LeaveRequest(0, "EMP001", LeaveType.CASUAL, working[22], working[22], 1, "errand", LeaveStatus.APPROVED)
    )
    leave_requests.create(
        LeaveRequest(0, "EMP001", LeaveType.LOP, working[23], working[24], 2, "travel", LeaveStatus.APPROVED)
    )
    return working


def test_structure_totals_are_derived(service):
    s = service.upsert_structure(
        employee_id="EMP001",
        basic=30000,
        hra=12000,
        allowances={"conveyance": 1600, "medical": 1250, "special": 5150},
        deductions={"pf": 1800, "professionalTax": 200},
    )
    assert s.gross_salary == 50000
    assert s.net_salary == 48000
    assert s.ctc == 51800
    assert service.get_structure("EMP001").structure_id == s.structure_id


def test_structure_requires_known_employee(service):
    with pytest.raises(NotFoundError, match="Employee not found"):
        service.upsert_structure(employee_id="NOPE", basic=1000)
    with pytest.raises(NotFoundError, match="Salary structure not found"):
        service.get_structure("EMP002")


def test_month_scenario(service, payrolls, april):
    result = service.process_month(4, 2026, now=RUN_AT)

    assert [p.employee_id for p in result.processed] == ["EMP001"]
    assert [(e.employee_id, e.error) for e in result.errors] == [("EMP002", "No salary structure found")]

    p = payrolls.get_for_period("EMP001", 4, 2026)
    a = p.attendance
    assert (a.working_days, a.weekoffs, a.holidays) == (25, 4, 1)
    assert a.present_days == 22
    assert a.paid_leave_days == 1
    assert a.lop_days == 2
    assert p.deductions["lop_deduction"] == 4000
    assert p.gross_earnings == 50000
    assert p.total_deductions == 6000
    assert p.net_payable == 44000
    assert p.status == PayrollStatus.PROCESSED
    assert p.processed_by == "System"
    assert result.processed[0].net_payable == 44000


def test_totals_always_match_breakdown(service, payrolls, april):
    service.process_month(4, 2026, now=RUN_AT)
    for p in payrolls.list_payrolls():
        assert p.gross_earnings == sum(p.earnings.values())
        assert p.total_deductions == sum(p.deductions.values())
        assert p.net_payable == p.gross_earnings - p.total_deductions


def test_reprocessing_overwrites_unlocked_record(service, payrolls, attendance_repo, april):
    service.process_month(4, 2026, now=RUN_AT)
    first = payrolls.get_for_period("EMP001", 4, 2026)

    attendance_repo.create_record(
        AttendanceRecord(attendance_id=0, employee_id="EMP001", work_date=date(2026, 4, 26), status=AttendanceStatus.PRESENT)
    )
    service.process_month(4, 2026, now=RUN_AT)

    assert len(payrolls.list_payrolls(month=4, year=2026)) == 1
    second = payrolls.get_for_period("EMP001", 4, 2026)
    assert second.payroll_id == first.payroll_id
    assert second.attendance.present_days == 23


def test_locked_period_is_skipped_and_untouched(service, payrolls, april):
    service.process_month(4, 2026, now=RUN_AT)
    assert service.lock_payroll(4, 2026) == 1
    locked = payrolls.get_for_period("EMP001", 4, 2026)
    assert locked.is_locked and locked.status == PayrollStatus.LOCKED

    result = service.process_month(4, 2026, now=datetime(2026, 5, 2, 10, 0))
    assert ("EMP001", "Payroll is locked") in [(e.employee_id, e.error) for e in result.errors]
    assert result.processed == []
    assert payrolls.get_for_period("EMP001", 4, 2026) == locked


def test_month_and_year_required(service):
    with pytest.raises(ValidationError, match="Month and year are required"):
        service.process_month(None, 2026)
    with pytest.raises(ValidationError):
        service.process_month(13, 2026)


def test_bonus_is_included_once(service, bonuses, payrolls, april):
    bonus = service.create_bonus(employee_id="EMP001", bonus_type="Festival Bonus", amount=5000, month=4, year=2026)
    service.create_bonus(employee_id="EMP001", bonus_type="Performance Bonus", amount=800, month=4, year=2026)
    service.approve_bonus(bonus.bonus_id)

    service.process_month(4, 2026, now=RUN_AT)

    p = payrolls.get_for_period("EMP001", 4, 2026)
    assert p.earnings["bonus"] == 5000
    assert p.net_payable == 49000
    assert bonuses.get_by_id(bonus.bonus_id).included_in_payroll
    assert [b.amount for b in bonuses.list_for_payroll("EMP001", 4, 2026)] == []


def test_bonus_not_marked_when_payroll_write_fails(service, bonuses, april):
    bonus = service.create_bonus(employee_id="EMP001", bonus_type="Festival Bonus", amount=5000, month=4, year=2026)
    service.approve_bonus(bonus.bonus_id)
    service.process_month(4, 2026, now=RUN_AT)
    service.lock_payroll(4, 2026)

    late = service.create_bonus(employee_id="EMP001", bonus_type="Referral Bonus", amount=100, month=4, year=2026)
    service.approve_bonus(late.bonus_id)
    service.process_month(4, 2026, now=RUN_AT)

    assert not bonuses.get_by_id(late.bonus_id).included_in_payroll


def test_approve_bonus_twice(service):
    bonus = service.create_bonus(employee_id="EMP001", bonus_type="Incentive", amount=10, month=4, year=2026)
    approved = service.approve_bonus(bonus.bonus_id, approved_by="CFO")
    assert approved.status == BonusStatus.APPROVED
    with pytest.raises(BusinessRuleError):
        service.approve_bonus(bonus.bonus_id)


def test_create_bonus_validation(service):
    with pytest.raises(ValidationError):
        service.create_bonus(employee_id="EMP001", bonus_type="Lottery", amount=10, month=4, year=2026)
    with pytest.raises(ValidationError):
        service.create_bonus(employee_id="EMP001", bonus_type="Incentive", amount=0, month=4, year=2026)


def test_approve_then_pay(service, payrolls, april):
    service.process_month(4, 2026, now=RUN_AT)
    p = payrolls.get_for_period("EMP001", 4, 2026)

    with pytest.raises(BusinessRuleError):
        service.mark_paid(p.payroll_id, payment_mode="UPI")

    approved = service.approve_payroll(p.payroll_id, approved_by="Finance")
    assert approved.status == PayrollStatus.APPROVED
    assert approved.approved_by == "Finance"

    with pytest.raises(BusinessRuleError):
        service.approve_payroll(p.payroll_id)

    paid = service.mark_paid(p.payroll_id, payment_mode="UPI", transaction_id="TXN-1")
    assert paid.status == PayrollStatus.PAID
    assert paid.payment_mode == PaymentMode.UPI
    assert paid.transaction_id == "TXN-1"


def test_approve_locked_payroll_is_rejected(service, payrolls, april):
    service.process_month(4, 2026, now=RUN_AT)
    service.lock_payroll(4, 2026)
    p = payrolls.get_for_period("EMP001", 4, 2026)
    with pytest.raises(BusinessRuleError, match="Payroll is locked"):
        service.approve_payroll(p.payroll_id)


def test_approve_unknown_payroll(service):
    with pytest.raises(NotFoundError, match="Payroll not found"):
        service.approve_payroll(404)


def test_lock_includes_approved_but_not_paid(service, payrolls, april, employees):
    service.upsert_structure(employee_id="EMP002", basic=20000)
    service.process_month(4, 2026, now=RUN_AT)
    p1 = payrolls.get_for_period("EMP001", 4, 2026)
    p2 = payrolls.get_for_period("EMP002", 4, 2026)
    service.approve_payroll(p1.payroll_id)
    service.approve_payroll(p2.payroll_id)
    service.mark_paid(p2.payroll_id)

    assert service.lock_payroll(4, 2026) == 1
    assert payrolls.get_by_id(p1.payroll_id).status == PayrollStatus.LOCKED
    assert payrolls.get_by_id(p2.payroll_id).status == PayrollStatus.PAID


def test_payslip_and_stats(service, april):
    service.process_month(4, 2026, now=RUN_AT)

    slip = service.get_payslip("EMP001", 4, 2026)
    assert slip.employee["name"] == "Aarav Sharma"
    assert slip.employee["designation"] == "Software Engineer"
    assert slip.company["name"] == "HRMS Lite Company"
    with pytest.raises(NotFoundError, match="Payslip not found"):
        service.get_payslip("EMP002", 4, 2026)

    stats = service.get_stats(month=4, year=2026)
    assert stats.total_employees == 1
    assert stats.total_net == 44000
    assert stats.pending == 1
    assert stats.locked == 0


def test_list_payroll_enriched(service, april):
    service.process_month(4, 2026, now=RUN_AT)
    rows = service.list_payroll(month=4, year=2026)
    assert [(p.employee_id, e.department) for p, e in rows] == [("EMP001", "Engineering")]
