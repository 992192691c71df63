from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import BonusStatus, BonusType, PaymentMode, PayrollStatus

ALLOWANCE_KEYS = ("conveyance", "medical", "special", "lta", "food", "other")
DEDUCTION_KEYS = ("pf", "esi", "professional_tax", "tds", "loan_recovery", "other")

EARNING_KEYS = (
    "basic",
    "hra",
    "conveyance",
    "medical",
    "special",
    "lta",
    "food",
    "other_allowances",
    "bonus",
    "incentive",
    "overtime",
    "arrears",
)
PAYROLL_DEDUCTION_KEYS = (
    "pf",
    "esi",
    "professional_tax",
    "tds",
    "loan_recovery",
    "lop_deduction",
    "other_deductions",
)


@dataclass(frozen=True)
class SalaryStructure:
    """Monthly pay components of one employee.

    gross_salary, net_salary and ctc are derived; see ``derivations.with_salary_totals``.
    """

    structure_id: int
    employee_id: str
    basic: float
    hra: float = 0.0
    allowances: dict[str, float] = field(default_factory=dict)
    deductions: dict[str, float] = field(default_factory=dict)
    gross_salary: float = 0.0
    net_salary: float = 0.0
    ctc: float = 0.0
    effective_from: Optional[date] = None
    is_active: bool = True


@dataclass(frozen=True)
class PayrollAttendance:
    """Attendance summary of a pay period. present_days is the effective figure."""

    working_days: int = 0
    present_days: float = 0.0
    absent_days: int = 0
    lop_days: float = 0.0
    paid_leave_days: float = 0.0
    holidays: int = 0
    weekoffs: int = 0


@dataclass(frozen=True)
class Payroll:
    payroll_id: int
    employee_id: str
    month: int
    year: int
    earnings: dict[str, float] = field(default_factory=dict)
    deductions: dict[str, float] = field(default_factory=dict)
    attendance: PayrollAttendance = field(default_factory=PayrollAttendance)
    gross_earnings: float = 0.0
    total_deductions: float = 0.0
    net_payable: float = 0.0
    status: PayrollStatus = PayrollStatus.DRAFT
    processed_by: str = ""
    processed_on: Optional[datetime] = None
    approved_by: str = ""
    approved_on: Optional[datetime] = None
    paid_on: Optional[datetime] = None
    payment_mode: PaymentMode = PaymentMode.BANK_TRANSFER
    transaction_id: str = ""
    remarks: str = ""
    is_locked: bool = False


@dataclass(frozen=True)
class Bonus:
    bonus_id: int
    employee_id: str
    bonus_type: BonusType
    amount: float
    month: int
    year: int
    reason: str = ""
    status: BonusStatus = BonusStatus.PENDING
    approved_by: str = ""
    approved_on: Optional[datetime] = None
    included_in_payroll: bool = False
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class PayrollComputation:
    """Calculator output for one employee and period, before totals are derived."""

    earnings: dict[str, float]
    deductions: dict[str, float]
    attendance: PayrollAttendance
    bonus_ids: list[int]


@dataclass(frozen=True)
class ProcessedEntry:
    employee_id: str
    name: str
    net_payable: float


@dataclass(frozen=True)
class PayrollError:
    employee_id: str
    error: str


@dataclass(frozen=True)
class PayrollRunResult:
    month: int
    year: int
    processed: list[ProcessedEntry] = field(default_factory=list)
    errors: list[PayrollError] = field(default_factory=list)


@dataclass(frozen=True)
class PayrollStats:
    month: int
    year: int
    total_employees: int
    total_gross: float
    total_deductions: float
    total_net: float
    processed: int
    pending: int
    approved: int
    locked: int


@dataclass(frozen=True)
class Payslip:
    payroll: Payroll
    employee: dict
    company: dict


@dataclass(frozen=True)
class TaxSlab:
    min_salary: float
    max_salary: float
    tax: float


@dataclass(frozen=True)
class PayrollConfig:
    """Statutory rates and the payroll calendar. A single active row."""

    config_id: int
    pf_percentage: float = 12.0
    esi_percentage: float = 0.75
    esi_threshold: float = 21000.0
    professional_tax_slab: list[TaxSlab] = field(default_factory=list)
    payroll_processing_day: int = 28
    payment_day: int = 1
    financial_year_start: int = 4
    is_active: bool = True
