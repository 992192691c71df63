from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from hrms.attendance.config import WorkConfig
from hrms.attendance.model import AttendanceRecord, AttendanceReportRow
from hrms.container import build_services
from hrms.core.enums import ApprovalStatus, BonusStatus, LeaveStatus, PayrollStatus
from hrms.employees.model import Employee
from hrms.leave.model import Holiday, LeaveBalanceEntry, LeaveRequest, LeaveTypePolicy
from hrms.payroll.model import Bonus, Payroll, PayrollConfig, SalaryStructure


class InMemoryEmployees:
    def __init__(self, employees=()):
        self._by_id = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> None:
        self._by_id[employee.employee_id] = employee

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        return self._by_id.get(employee_id)

    def list_active(self):
        return [e for e in sorted(self._by_id.values(), key=lambda e: e.employee_id) if e.is_active]

    def count_active(self) -> int:
        return len(self.list_active())


class InMemoryAttendance:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self._by_id: dict[int, AttendanceRecord] = {}
        self._id = 0

    def _key_taken(self, employee_id: str, work_date: date, exclude: int = 0) -> bool:
        return any(
            r.employee_id == employee_id and r.work_date == work_date and r.attendance_id != exclude
            for r in self._by_id.values()
        )

    def get_by_id(self, attendance_id: int):
        return self._by_id.get(attendance_id)

    def get_for_employee_and_date(self, employee_id: str, work_date: date):
        for r in self._by_id.values():
            if r.employee_id == employee_id and r.work_date == work_date:
                return r
        return None

    def list_records(self, *, employee_id=None, start_date=None, end_date=None, approval_status=None, newest_first=True):
        items = [
            r
            for r in self._by_id.values()
            if (employee_id is None or r.employee_id == employee_id)
            and (start_date is None or r.work_date >= start_date)
            and (end_date is None or r.work_date <= end_date)
            and (approval_status is None or r.approval_status == approval_status)
        ]
        items.sort(key=lambda r: (r.work_date, r.attendance_id), reverse=newest_first)
        return items

    def create_punch_in(self, *, employee_id, work_date, punch_in, status):
        return self.create_record(
            AttendanceRecord(attendance_id=0, employee_id=employee_id, work_date=work_date, status=status, punch_in=punch_in)
        )

    def set_punch_in(self, *, attendance_id, punch_in, status):
        r = self._by_id.get(attendance_id)
        if not r or r.punch_in is not None:
            return False
        self._by_id[attendance_id] = replace(r, punch_in=punch_in, status=status)
        return True

    def set_punch_out(self, *, attendance_id, punch_out, status, working_hours):
        r = self._by_id.get(attendance_id)
        if not r or r.punch_in is None or r.punch_out is not None:
            return False
        self._by_id[attendance_id] = replace(r, punch_out=punch_out, status=status, working_hours=working_hours)
        return True

    def create_record(self, record: AttendanceRecord):
        if self._key_taken(record.employee_id, record.work_date):
            return None
        self._id += 1
        self._by_id[self._id] = replace(record, attendance_id=self._id)
        return self._id

    def update_record(self, record: AttendanceRecord) -> bool:
        if record.attendance_id not in self._by_id:
            return False
        self._by_id[record.attendance_id] = record
        return True

    def apply_correction(self, record: AttendanceRecord) -> bool:
        current = self._by_id.get(record.attendance_id)
        if not current or current.approval_status == ApprovalStatus.PENDING:
            return False
        self._by_id[record.attendance_id] = record
        return True

    def decide_correction(self, record: AttendanceRecord) -> bool:
        current = self._by_id.get(record.attendance_id)
        if not current or current.approval_status != ApprovalStatus.PENDING:
            return False
        self._by_id[record.attendance_id] = record
        return True

    def delete(self, attendance_id: int) -> bool:
        return self._by_id.pop(attendance_id, None) is not None

    def count_by_approval_status(self, approval_status) -> int:
        return sum(1 for r in self._by_id.values() if r.approval_status == approval_status)

    def get_report_rows(self, *, start_date, end_date, employee_id=None):
        rows = []
        for r in self.list_records(employee_id=employee_id, start_date=start_date, end_date=end_date, newest_first=False):
            e = self._employees.get_by_id(r.employee_id)
            rows.append(
                AttendanceReportRow(
                    attendance_id=r.attendance_id,
                    employee_id=r.employee_id,
                    full_name=e.full_name if e else r.employee_id,
                    department=e.department if e else "",
                    work_date=r.work_date,
                    status=r.status,
                    punch_in=r.punch_in,
                    punch_out=r.punch_out,
                    working_hours=r.working_hours,
                    approval_status=r.approval_status,
                    remarks=r.remarks,
                )
            )
        return rows


class InMemoryLeaveTypes:
    def __init__(self):
        self._by_id: dict[int, LeaveTypePolicy] = {}
        self._id = 0

    def _clash(self, policy: LeaveTypePolicy) -> bool:
        return any(
            (p.name == policy.name or p.code == policy.code) and p.type_id != policy.type_id
            for p in self._by_id.values()
        )

    def get_by_id(self, type_id):
        return self._by_id.get(type_id)

    def get_by_name(self, name):
        return next((p for p in self._by_id.values() if p.name == name), None)

    def list_types(self, *, active_only=True):
        items = [p for p in self._by_id.values() if p.is_active or not active_only]
        return sorted(items, key=lambda p: p.name.value)

    def create(self, policy: LeaveTypePolicy):
        if self._clash(replace(policy, type_id=0)):
            return None
        self._id += 1
        self._by_id[self._id] = replace(policy, type_id=self._id)
        return self._id

    def update(self, policy: LeaveTypePolicy):
        if policy.type_id not in self._by_id:
            return False
        if self._clash(policy):
            return None
        self._by_id[policy.type_id] = policy
        return True

    def upsert_by_name(self, policy: LeaveTypePolicy) -> None:
        current = self.get_by_name(policy.name)
        if current is None:
            self.create(policy)
        else:
            self._by_id[current.type_id] = replace(policy, type_id=current.type_id, description=current.description)


class InMemoryLeaveBalances:
    def __init__(self):
        self.entries: dict[tuple, LeaveBalanceEntry] = {}

    def list_for_employee(self, employee_id, year):
        return [e for (emp, y, _), e in self.entries.items() if emp == employee_id and y == year]

    def list_for_year(self, year):
        return [e for (_, y, _), e in self.entries.items() if y == year]

    def ensure_entries(self, employee_id, year, allocations) -> int:
        created = 0
        for leave_type, days in allocations.items():
            key = (employee_id, year, leave_type)
            if key not in self.entries:
                self.entries[key] = LeaveBalanceEntry(
                    employee_id=employee_id, year=year, leave_type=leave_type, allocated=days, available=days
                )
                created += 1
        return created

    def adjust(self, *, employee_id, year, leave_type, used_delta=0, pending_delta=0, require_available=None) -> bool:
        key = (employee_id, year, leave_type)
        e = self.entries.get(key)
        if e is None:
            return False
        if require_available is not None and e.available < require_available:
            return False
        used = e.used + used_delta
        pending = e.pending + pending_delta
        self.entries[key] = replace(
            e, used=used, pending=pending, available=e.allocated + e.carry_forward - used - pending
        )
        return True


class InMemoryLeaveRequests:
    def __init__(self):
        self._by_id: dict[int, LeaveRequest] = {}
        self._id = 0

    def get_by_id(self, request_id):
        return self._by_id.get(request_id)

    def create(self, request: LeaveRequest) -> int:
        self._id += 1
        self._by_id[self._id] = replace(request, request_id=self._id)
        return self._id

    def list_requests(self, *, employee_id=None, status=None, start_date=None, end_date=None):
        items = [
            r
            for r in self._by_id.values()
            if (employee_id is None or r.employee_id == employee_id)
            and (status is None or r.status == status)
            and (start_date is None or r.start_date >= start_date)
            and (end_date is None or r.end_date <= end_date)
        ]
        return sorted(items, key=lambda r: r.request_id, reverse=True)

    def list_overlapping(self, *, start_date, end_date, statuses, employee_id=None):
        statuses = set(statuses)
        return [
            r
            for r in self._by_id.values()
            if r.status in statuses
            and (employee_id is None or r.employee_id == employee_id)
            and r.overlaps(start_date, end_date)
        ]

    def transition(self, request_id, *, from_status, to_status, approved_by=None, approved_on=None, rejection_reason=None):
        r = self._by_id.get(request_id)
        if not r or r.status != from_status:
            return False
        self._by_id[request_id] = replace(
            r,
            status=to_status,
            approved_by=approved_by if approved_by is not None else r.approved_by,
            approved_on=approved_on if approved_on is not None else r.approved_on,
            rejection_reason=rejection_reason if rejection_reason is not None else r.rejection_reason,
        )
        return True

    def count_by_status(self, status) -> int:
        return sum(1 for r in self._by_id.values() if r.status == status)

    def count_approved_since(self, since) -> int:
        return sum(
            1
            for r in self._by_id.values()
            if r.status == LeaveStatus.APPROVED and r.approved_on is not None and r.approved_on >= since
        )


class InMemoryHolidays:
    def __init__(self):
        self._by_id: dict[int, Holiday] = {}
        self._id = 0

    def get_by_id(self, holiday_id):
        return self._by_id.get(holiday_id)

    def list_for_year(self, year):
        return sorted((h for h in self._by_id.values() if h.year == year), key=lambda h: h.holiday_date)

    def list_between(self, start_date, end_date):
        return sorted(
            (h for h in self._by_id.values() if h.is_active and start_date <= h.holiday_date <= end_date),
            key=lambda h: h.holiday_date,
        )

    def create(self, holiday: Holiday) -> int:
        self._id += 1
        self._by_id[self._id] = replace(holiday, holiday_id=self._id)
        return self._id

    def update(self, holiday: Holiday) -> bool:
        if holiday.holiday_id not in self._by_id:
            return False
        self._by_id[holiday.holiday_id] = holiday
        return True

    def upsert_by_name(self, holiday: Holiday) -> None:
        for h in self._by_id.values():
            if h.name == holiday.name and h.year == holiday.year:
                self._by_id[h.holiday_id] = replace(holiday, holiday_id=h.holiday_id)
                return
        self.create(holiday)

    def delete(self, holiday_id) -> bool:
        return self._by_id.pop(holiday_id, None) is not None


class InMemorySalaryStructures:
    def __init__(self):
        self._by_employee: dict[str, SalaryStructure] = {}
        self._id = 0

    def get_active(self, employee_id):
        s = self._by_employee.get(employee_id)
        return s if s and s.is_active else None

    def list_active(self):
        return [s for _, s in sorted(self._by_employee.items()) if s.is_active]

    def upsert(self, structure: SalaryStructure) -> int:
        current = self._by_employee.get(structure.employee_id)
        if current:
            structure_id = current.structure_id
        else:
            self._id += 1
            structure_id = self._id
        self._by_employee[structure.employee_id] = replace(structure, structure_id=structure_id)
        return structure_id


class InMemoryPayrolls:
    def __init__(self):
        self._by_id: dict[int, Payroll] = {}
        self._id = 0

    def get_by_id(self, payroll_id):
        return self._by_id.get(payroll_id)

    def get_for_period(self, employee_id, month, year):
        for p in self._by_id.values():
            if (p.employee_id, p.month, p.year) == (employee_id, month, year):
                return p
        return None

    def list_payrolls(self, *, month=None, year=None, employee_id=None, status=None):
        return [
            p
            for p in self._by_id.values()
            if (month is None or p.month == month)
            and (year is None or p.year == year)
            and (employee_id is None or p.employee_id == employee_id)
            and (status is None or p.status == status)
        ]

    def create(self, payroll: Payroll):
        if self.get_for_period(payroll.employee_id, payroll.month, payroll.year):
            return None
        self._id += 1
        self._by_id[self._id] = replace(payroll, payroll_id=self._id)
        return self._id

    def overwrite_unlocked(self, payroll: Payroll) -> bool:
        current = self.get_for_period(payroll.employee_id, payroll.month, payroll.year)
        if not current or current.is_locked:
            return False
        self._by_id[current.payroll_id] = replace(
            current,
            earnings=payroll.earnings,
            deductions=payroll.deductions,
            attendance=payroll.attendance,
            gross_earnings=payroll.gross_earnings,
            total_deductions=payroll.total_deductions,
            net_payable=payroll.net_payable,
            status=payroll.status,
            processed_by=payroll.processed_by,
            processed_on=payroll.processed_on,
            approved_by="",
            approved_on=None,
        )
        return True

    def lock_period(self, month, year, *, statuses) -> int:
        statuses = set(statuses)
        n = 0
        for pid, p in list(self._by_id.items()):
            if (p.month, p.year) == (month, year) and not p.is_locked and p.status in statuses:
                self._by_id[pid] = replace(p, is_locked=True, status=PayrollStatus.LOCKED)
                n += 1
        return n

    def approve(self, payroll_id, *, approved_by, approved_on) -> bool:
        p = self._by_id.get(payroll_id)
        if not p or p.is_locked or p.status != PayrollStatus.PROCESSED:
            return False
        self._by_id[payroll_id] = replace(p, status=PayrollStatus.APPROVED, approved_by=approved_by, approved_on=approved_on)
        return True

    def mark_paid(self, payroll_id, *, payment_mode, transaction_id, paid_on) -> bool:
        p = self._by_id.get(payroll_id)
        if not p or p.is_locked or p.status != PayrollStatus.APPROVED:
            return False
        self._by_id[payroll_id] = replace(
            p, status=PayrollStatus.PAID, payment_mode=payment_mode, transaction_id=transaction_id, paid_on=paid_on
        )
        return True


class InMemoryBonuses:
    def __init__(self):
        self._by_id: dict[int, Bonus] = {}
        self._id = 0

    def get_by_id(self, bonus_id):
        return self._by_id.get(bonus_id)

    def create(self, bonus: Bonus) -> int:
        self._id += 1
        self._by_id[self._id] = replace(bonus, bonus_id=self._id)
        return self._id

    def list_bonuses(self, *, employee_id=None, month=None, year=None, status=None):
        return [
            b
            for b in self._by_id.values()
            if (employee_id is None or b.employee_id == employee_id)
            and (month is None or b.month == month)
            and (year is None or b.year == year)
            and (status is None or b.status == status)
        ]

    def list_for_payroll(self, employee_id, month, year):
        return [
            b
            for b in self._by_id.values()
            if (b.employee_id, b.month, b.year) == (employee_id, month, year)
            and b.status == BonusStatus.APPROVED
            and not b.included_in_payroll
        ]

    def mark_included(self, bonus_ids) -> int:
        for bid in bonus_ids:
            self._by_id[bid] = replace(self._by_id[bid], included_in_payroll=True)
        return len(bonus_ids)

    def approve(self, bonus_id, *, approved_by, approved_on) -> bool:
        b = self._by_id.get(bonus_id)
        if not b or b.status != BonusStatus.PENDING:
            return False
        self._by_id[bonus_id] = replace(b, status=BonusStatus.APPROVED, approved_by=approved_by, approved_on=approved_on)
        return True


class InMemoryPayrollConfigs:
    def __init__(self):
        self.saved: list[PayrollConfig] = []

    def get_active(self):
        return next((c for c in self.saved if c.is_active), None)

    def save(self, config: PayrollConfig) -> int:
        if not config.config_id:
            config = replace(config, config_id=len(self.saved) + 1)
            self.saved.append(config)
        else:
            self.saved = [config if c.config_id == config.config_id else c for c in self.saved]
        return config.config_id


@pytest.fixture
def fixed_now() -> datetime:
    # Wednesday
    return datetime(2026, 4, 15, 9, 0, 0)


@pytest.fixture
def work_config() -> WorkConfig:
    return WorkConfig()


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees(
        [
            Employee("EMP001", "Aarav Sharma", "aarav@example.com", "Engineering", "Software Engineer"),
            Employee("EMP002", "Priya Nair", "priya@example.com", "Human Resources", "HR Manager"),
        ]
    )


@pytest.fixture
def attendance_repo(employees) -> InMemoryAttendance:
    return InMemoryAttendance(employees)


@pytest.fixture
def leave_balances() -> InMemoryLeaveBalances:
    return InMemoryLeaveBalances()


@pytest.fixture
def leave_types() -> InMemoryLeaveTypes:
    return InMemoryLeaveTypes()


@pytest.fixture
def leave_requests() -> InMemoryLeaveRequests:
    return InMemoryLeaveRequests()


@pytest.fixture
def holidays() -> InMemoryHolidays:
    return InMemoryHolidays()


@pytest.fixture
def structures() -> InMemorySalaryStructures:
    return InMemorySalaryStructures()


@pytest.fixture
def payrolls() -> InMemoryPayrolls:
    return InMemoryPayrolls()


@pytest.fixture
def bonuses() -> InMemoryBonuses:
    return InMemoryBonuses()


@pytest.fixture
def payroll_configs() -> InMemoryPayrollConfigs:
    return InMemoryPayrollConfigs()


@pytest.fixture
def container(
    employees,
    attendance_repo,
    leave_requests,
    leave_balances,
    leave_types,
    holidays,
    structures,
    payrolls,
    bonuses,
    payroll_configs,
    work_config,
):
    return build_services(
        conn=None,
        employees_repo=employees,
        attendance_repo=attendance_repo,
        leave_requests_repo=leave_requests,
        leave_balances_repo=leave_balances,
        leave_types_repo=leave_types,
        holidays_repo=holidays,
        salary_structures_repo=structures,
        payrolls_repo=payrolls,
        bonuses_repo=bonuses,
        payroll_config_repo=payroll_configs,
        work_config=work_config,
    )
