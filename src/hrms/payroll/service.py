from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds, now_local, to_date
from ..common.validators import (
    optional_enum,
    require_amount,
    require_enum,
    require_int,
    require_month,
    require_non_empty,
    require_year,
)
from ..core.constants import (
    DEFAULT_APPROVER,
    DEFAULT_COMPANY_ADDRESS,
    DEFAULT_COMPANY_NAME,
    DEFAULT_PROCESSOR,
    DEFAULT_PROFESSIONAL_TAX_SLAB,
)
from ..core.enums import BonusStatus, BonusType, LeaveStatus, PaymentMode, PayrollStatus
from ..core.exceptions import BusinessRuleError, DomainError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..leave.repository import HolidayRepository, LeaveRequestRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .derivations import normalize_breakdown, with_payroll_totals, with_salary_totals
from .model import (
    ALLOWANCE_KEYS,
    DEDUCTION_KEYS,
    Bonus,
    Payroll,
    PayrollConfig,
    PayrollError,
    PayrollRunResult,
    PayrollStats,
    Payslip,
    ProcessedEntry,
    SalaryStructure,
    TaxSlab,
)
from .repository import BonusRepository, PayrollConfigRepository, PayrollRepository, SalaryStructureRepository

logger = logging.getLogger(__name__)

# Records the lock operation moves to Locked.
LOCKABLE_STATUSES = (PayrollStatus.PROCESSED, PayrollStatus.APPROVED)


class PayrollService:
    """Monthly payroll runs and the records they depend on."""

    def __init__(
        self,
        *,
        payrolls: PayrollRepository,
        structures: SalaryStructureRepository,
        bonuses: BonusRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        leave_requests: LeaveRequestRepository,
        holidays: HolidayRepository,
        configs: PayrollConfigRepository,
        calculator: PayrollCalculator | None = None,
        company: Mapping[str, str] | None = None,
    ):
        self._payrolls = payrolls
        self._structures = structures
        self._bonuses = bonuses
        self._employees = employees
        self._attendance = attendance
        self._leave_requests = leave_requests
        self._holidays = holidays
        self._configs = configs
        self._calculator = calculator or StandardPayrollCalculator()
        self._company = dict(company or {"name": DEFAULT_COMPANY_NAME, "address": DEFAULT_COMPANY_ADDRESS})

    # ---- payroll runs ----

    def process_month(
        self,
        month,
        year,
        *,
        processed_by: Optional[str] = None,
        now: datetime | None = None,
    ) -> PayrollRunResult:
        if not month or not year:
            raise ValidationError("Month and year are required")
        month = require_month(month)
        year = require_year(year)
        processed_by = (processed_by or "").strip() or DEFAULT_PROCESSOR
        now = now or now_local()

        result = PayrollRunResult(month=month, year=year)
        for employee in self._employees.list_active():
            try:
                payroll = self._process_employee(employee, month, year, processed_by=processed_by, now=now)
            except DomainError as e:
                logger.warning("Payroll %02d/%d skipped for %s: %s", month, year, employee.employee_id, e)
                result.errors.append(PayrollError(employee_id=employee.employee_id, error=str(e)))
                continue
            except Exception as e:
                logger.exception("Payroll %02d/%d failed for %s", month, year, employee.employee_id)
                result.errors.append(PayrollError(employee_id=employee.employee_id, error=str(e)))
                continue
            result.processed.append(
                ProcessedEntry(
                    employee_id=employee.employee_id,
                    name=employee.full_name,
                    net_payable=payroll.net_payable,
                )
            )

        logger.info(
            "Payroll run %02d/%d processed=%d errors=%d by=%s",
            month,
            year,
            len(result.processed),
            len(result.errors),
            processed_by,
        )
        return result

    def _process_employee(
        self,
        employee: Employee,
        month: int,
        year: int,
        *,
        processed_by: str,
        now: datetime,
    ) -> Payroll:
        existing = self._payrolls.get_for_period(employee.employee_id, month, year)
        if existing and existing.is_locked:
            raise BusinessRuleError("Payroll is locked")

        structure = self._structures.get_active(employee.employee_id)
        if not structure:
            raise BusinessRuleError("No salary structure found")

        first, last = month_bounds(year, month)
        computation = self._calculator.compute(
            month=month,
            year=year,
            structure=structure,
            attendance=self._attendance.list_records(
                employee_id=employee.employee_id,
                start_date=first,
                end_date=last,
                newest_first=False,
            ),
            leaves=self._leave_requests.list_overlapping(
                start_date=first,
                end_date=last,
                statuses=(LeaveStatus.APPROVED,),
                employee_id=employee.employee_id,
            ),
            holidays=self._holidays.list_between(first, last),
            bonuses=self._bonuses.list_for_payroll(employee.employee_id, month, year),
        )

        payroll = with_payroll_totals(
            Payroll(
                payroll_id=existing.payroll_id if existing else 0,
                employee_id=employee.employee_id,
                month=month,
                year=year,
                earnings=computation.earnings,
                deductions=computation.deductions,
                attendance=computation.attendance,
                status=PayrollStatus.PROCESSED,
                processed_by=processed_by,
                processed_on=now,
            )
        )

        if existing:
            if not self._payrolls.overwrite_unlocked(payroll):
                raise BusinessRuleError("Payroll is locked")
        else:
            payroll_id = self._payrolls.create(payroll)
            if payroll_id is None:
                # Another run created the period record first; fall back to overwrite.
                if not self._payrolls.overwrite_unlocked(payroll):
                    raise BusinessRuleError("Payroll is locked")
            else:
                payroll = replace(payroll, payroll_id=payroll_id)

        if computation.bonus_ids:
            self._bonuses.mark_included(computation.bonus_ids)
        return payroll

    def lock_payroll(self, month, year) -> int:
        if not month or not year:
            raise ValidationError("Month and year are required")
        month = require_month(month)
        year = require_year(year)
        n = self._payrolls.lock_period(month, year, statuses=LOCKABLE_STATUSES)
        logger.info("Payroll %02d/%d locked records=%d", month, year, n)
        return n

    def approve_payroll(
        self,
        payroll_id: int,
        *,
        approved_by: Optional[str] = None,
        now: datetime | None = None,
    ) -> Payroll:
        payroll = self._require_payroll(payroll_id)
        if payroll.is_locked:
            raise BusinessRuleError("Payroll is locked")
        if payroll.status != PayrollStatus.PROCESSED:
            raise BusinessRuleError(f"Only processed payrolls can be approved (status: {payroll.status.value})")

        approved_by = (approved_by or "").strip() or DEFAULT_APPROVER
        if not self._payrolls.approve(payroll.payroll_id, approved_by=approved_by, approved_on=now or now_local()):
            raise BusinessRuleError("Payroll was modified concurrently, reload and retry")
        logger.info("Payroll %s approved by %s", payroll.payroll_id, approved_by)
        return self._require_payroll(payroll.payroll_id)

    def mark_paid(
        self,
        payroll_id: int,
        *,
        payment_mode=None,
        transaction_id: Optional[str] = None,
        now: datetime | None = None,
    ) -> Payroll:
        mode = optional_enum(payment_mode, PaymentMode, "paymentMode") or PaymentMode.BANK_TRANSFER
        payroll = self._require_payroll(payroll_id)
        if payroll.is_locked:
            raise BusinessRuleError("Payroll is locked")
        if payroll.status != PayrollStatus.APPROVED:
            raise BusinessRuleError(f"Only approved payrolls can be paid (status: {payroll.status.value})")

        paid = self._payrolls.mark_paid(
            payroll.payroll_id,
            payment_mode=mode,
            transaction_id=(transaction_id or "").strip(),
            paid_on=now or now_local(),
        )
        if not paid:
            raise BusinessRuleError("Payroll was modified concurrently, reload and retry")
        logger.info("Payroll %s paid via %s", payroll.payroll_id, mode.value)
        return self._require_payroll(payroll.payroll_id)

    def list_payroll(
        self,
        *,
        month=None,
        year=None,
        employee_id: Optional[str] = None,
        status=None,
    ) -> list[tuple[Payroll, Optional[Employee]]]:
        payrolls = self._payrolls.list_payrolls(
            month=require_month(month) if month else None,
            year=require_year(year) if year else None,
            employee_id=employee_id or None,
            status=optional_enum(status, PayrollStatus, "status"),
        )
        cache: dict[str, Optional[Employee]] = {}
        out = []
        for p in payrolls:
            if p.employee_id not in cache:
                cache[p.employee_id] = self._employees.get_by_id(p.employee_id)
            out.append((p, cache[p.employee_id]))
        return out

    def get_payslip(self, employee_id: str, month, year) -> Payslip:
        payroll = self._payrolls.get_for_period(employee_id, require_month(month), require_year(year))
        if not payroll:
            raise NotFoundError("Payslip not found")
        employee = self._employees.get_by_id(employee_id)
        return Payslip(
            payroll=payroll,
            employee={
                "employee_id": employee_id,
                "name": employee.full_name if employee else None,
                "email": employee.email if employee else None,
                "department": employee.department if employee else None,
                "designation": employee.designation if employee else None,
            },
            company=dict(self._company),
        )

    def get_stats(self, *, month=None, year=None, today: date | None = None) -> PayrollStats:
        today = today or now_local().date()
        month = require_month(month) if month else today.month
        year = require_year(year) if year else today.year

        payrolls = self._payrolls.list_payrolls(month=month, year=year)
        return PayrollStats(
            month=month,
            year=year,
            total_employees=len(payrolls),
            total_gross=sum(p.gross_earnings for p in payrolls),
            total_deductions=sum(p.total_deductions for p in payrolls),
            total_net=sum(p.net_payable for p in payrolls),
            processed=sum(1 for p in payrolls if p.status != PayrollStatus.DRAFT),
            pending=sum(1 for p in payrolls if p.status == PayrollStatus.PROCESSED),
            approved=sum(1 for p in payrolls if p.status == PayrollStatus.APPROVED),
            locked=sum(1 for p in payrolls if p.is_locked),
        )

    def _require_payroll(self, payroll_id: int) -> Payroll:
        payroll = self._payrolls.get_by_id(int(payroll_id))
        if not payroll:
            raise NotFoundError("Payroll not found")
        return payroll

    # ---- salary structures ----

    def upsert_structure(
        self,
        *,
        employee_id: str,
        basic,
        hra=0,
        allowances: Optional[Mapping[str, Any]] = None,
        deductions: Optional[Mapping[str, Any]] = None,
        effective_from=None,
    ) -> SalaryStructure:
        employee_id = require_non_empty(employee_id, "employeeId")
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")
        if basic is None or basic == "":
            raise ValidationError("basic is required")

        structure = with_salary_totals(
            SalaryStructure(
                structure_id=0,
                employee_id=employee_id,
                basic=require_amount(basic, "basic"),
                hra=require_amount(hra, "hra"),
                allowances=normalize_breakdown(allowances, ALLOWANCE_KEYS, "allowances"),
                deductions=normalize_breakdown(deductions, DEDUCTION_KEYS, "deductions"),
                effective_from=to_date(effective_from, "effectiveFrom") if effective_from else now_local().date(),
            )
        )
        structure_id = self._structures.upsert(structure)
        logger.info("Salary structure saved employee=%s gross=%.2f", employee_id, structure.gross_salary)
        return replace(structure, structure_id=structure_id)

    def get_structure(self, employee_id: str) -> SalaryStructure:
        structure = self._structures.get_active(employee_id)
        if not structure:
            raise NotFoundError("Salary structure not found")
        return structure

    def list_structures(self) -> list[tuple[SalaryStructure, Optional[Employee]]]:
        return [(s, self._employees.get_by_id(s.employee_id)) for s in self._structures.list_active()]

    # ---- bonuses ----

    def create_bonus(
        self,
        *,
        employee_id: str,
        bonus_type,
        amount,
        month,
        year,
        reason: Optional[str] = None,
    ) -> Bonus:
        employee_id = require_non_empty(employee_id, "employeeId")
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")
        value = require_amount(amount, "amount")
        if value <= 0:
            raise ValidationError("amount must be greater than zero")

        bonus = Bonus(
            bonus_id=0,
            employee_id=employee_id,
            bonus_type=require_enum(bonus_type, BonusType, "bonusType"),
            amount=value,
            month=require_month(month),
            year=require_year(year),
            reason=(reason or "").strip(),
        )
        bonus_id = self._bonuses.create(bonus)
        logger.info("Bonus %s created employee=%s amount=%.2f", bonus_id, employee_id, value)
        return self._bonuses.get_by_id(bonus_id) or replace(bonus, bonus_id=bonus_id)

    def approve_bonus(
        self,
        bonus_id: int,
        *,
        approved_by: Optional[str] = None,
        now: datetime | None = None,
    ) -> Bonus:
        bonus = self._bonuses.get_by_id(int(bonus_id))
        if not bonus:
            raise NotFoundError("Bonus not found")
        if bonus.status != BonusStatus.PENDING:
            raise BusinessRuleError("Bonus already processed")

        approved_by = (approved_by or "").strip() or DEFAULT_APPROVER
        if not self._bonuses.approve(bonus.bonus_id, approved_by=approved_by, approved_on=now or now_local()):
            raise BusinessRuleError("Bonus already processed")
        return self._bonuses.get_by_id(bonus.bonus_id)

    def list_bonuses(
        self,
        *,
        employee_id: Optional[str] = None,
        month=None,
        year=None,
        status=None,
    ) -> list[tuple[Bonus, str]]:
        bonuses: Sequence[Bonus] = self._bonuses.list_bonuses(
            employee_id=employee_id or None,
            month=require_month(month) if month else None,
            year=require_year(year) if year else None,
            status=optional_enum(status, BonusStatus, "status"),
        )
        names: dict[str, str] = {}
        out = []
        for b in bonuses:
            if b.employee_id not in names:
                e = self._employees.get_by_id(b.employee_id)
                names[b.employee_id] = e.full_name if e else b.employee_id
            out.append((b, names[b.employee_id]))
        return out

    # ---- statutory config ----

    def get_config(self) -> PayrollConfig:
        config = self._configs.get_active()
        if config is None:
            draft = PayrollConfig(
                config_id=0,
                professional_tax_slab=[
                    TaxSlab(min_salary=float(lo), max_salary=float(hi), tax=float(tax))
                    for lo, hi, tax in DEFAULT_PROFESSIONAL_TAX_SLAB
                ],
            )
            config = replace(draft, config_id=self._configs.save(draft))
            logger.info("Default payroll config created id=%s", config.config_id)
        return config

    def update_config(
        self,
        *,
        pf_percentage=None,
        esi_percentage=None,
        esi_threshold=None,
        professional_tax_slab=None,
        payroll_processing_day=None,
        payment_day=None,
        financial_year_start=None,
    ) -> PayrollConfig:
        """Merge the given fields into the active config; omitted fields keep their value."""
        current = self.get_config()
        updated = replace(
            current,
            pf_percentage=_percentage(pf_percentage, "pfPercentage", current.pf_percentage),
            esi_percentage=_percentage(esi_percentage, "esiPercentage", current.esi_percentage),
            esi_threshold=(
                current.esi_threshold if esi_threshold is None else require_amount(esi_threshold, "esiThreshold")
            ),
            professional_tax_slab=(
                current.professional_tax_slab
                if professional_tax_slab is None
                else _tax_slabs(professional_tax_slab)
            ),
            payroll_processing_day=_bounded_int(
                payroll_processing_day, "payrollProcessingDay", 1, 31, current.payroll_processing_day
            ),
            payment_day=_bounded_int(payment_day, "paymentDay", 1, 31, current.payment_day),
            financial_year_start=_bounded_int(
                financial_year_start, "financialYearStart", 1, 12, current.financial_year_start
            ),
        )
        self._configs.save(updated)
        logger.info("Payroll config updated id=%s", updated.config_id)
        return updated


def _percentage(value, field_name: str, current: float) -> float:
    if value is None:
        return current
    pct = require_amount(value, field_name)
    if pct > 100:
        raise ValidationError(f"{field_name} cannot exceed 100")
    return pct


def _bounded_int(value, field_name: str, low: int, high: int, current: int) -> int:
    if value is None:
        return current
    n = require_int(value, field_name)
    if not low <= n <= high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return n


def _tax_slabs(raw) -> list[TaxSlab]:
    """Slabs from [{minSalary, maxSalary, tax}] (snake_case keys accepted too), ordered by minSalary."""
    if not isinstance(raw, (list, tuple)):
        raise ValidationError("professionalTaxSlab must be a list")
    slabs = []
    for item in raw:
        if not isinstance(item, Mapping):
            raise ValidationError("professionalTaxSlab entries must be objects")
        lo = require_amount(item.get("minSalary", item.get("min_salary")), "minSalary")
        hi = require_amount(item.get("maxSalary", item.get("max_salary")), "maxSalary")
        if hi < lo:
            raise ValidationError("maxSalary cannot be below minSalary")
        slabs.append(TaxSlab(min_salary=lo, max_salary=hi, tax=require_amount(item.get("tax"), "tax")))
    return sorted(slabs, key=lambda s: s.min_salary)
