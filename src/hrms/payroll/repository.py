from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import BonusStatus, PaymentMode, PayrollStatus
from .model import Bonus, Payroll, PayrollConfig, SalaryStructure


class SalaryStructureRepository(Protocol):
    def get_active(self, employee_id: str) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def list_active(self) -> Sequence[SalaryStructure]:
        raise NotImplementedError

    def upsert(self, structure: SalaryStructure) -> int:
        """Insert or replace the employee's structure; totals must already be derived."""

        raise NotImplementedError


class PayrollRepository(Protocol):
    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        raise NotImplementedError

    def get_for_period(self, employee_id: str, month: int, year: int) -> Optional[Payroll]:
        raise NotImplementedError

    def list_payrolls(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[str] = None,
        status: Optional[PayrollStatus] = None,
    ) -> Sequence[Payroll]:
        raise NotImplementedError

    def create(self, payroll: Payroll) -> Optional[int]:
        """Insert a new period record; None when (employee, month, year) already exists."""

        raise NotImplementedError

    def overwrite_unlocked(self, payroll: Payroll) -> bool:
        """Replace the computed fields of the period record unless it is locked."""

        raise NotImplementedError

    def lock_period(self, month: int, year: int, *, statuses: Iterable[PayrollStatus]) -> int:
        raise NotImplementedError

    def approve(self, payroll_id: int, *, approved_by: str, approved_on: datetime) -> bool:
        """Processed -> Approved on an unlocked record."""

        raise NotImplementedError

    def mark_paid(
        self,
        payroll_id: int,
        *,
        payment_mode: PaymentMode,
        transaction_id: str,
        paid_on: datetime,
    ) -> bool:
        """Approved -> Paid on an unlocked record."""

        raise NotImplementedError


class BonusRepository(Protocol):
    def get_by_id(self, bonus_id: int) -> Optional[Bonus]:
        raise NotImplementedError

    def create(self, bonus: Bonus) -> int:
        raise NotImplementedError

    def list_bonuses(
        self,
        *,
        employee_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[BonusStatus] = None,
    ) -> Sequence[Bonus]:
        raise NotImplementedError

    def list_for_payroll(self, employee_id: str, month: int, year: int) -> Sequence[Bonus]:
        """Approved bonuses of the period not yet folded into a payroll."""

        raise NotImplementedError

    def mark_included(self, bonus_ids: Sequence[int]) -> int:
        raise NotImplementedError

    def approve(self, bonus_id: int, *, approved_by: str, approved_on: datetime) -> bool:
        """Pending -> Approved."""

        raise NotImplementedError


class PayrollConfigRepository(Protocol):
    def get_active(self) -> Optional[PayrollConfig]:
        raise NotImplementedError

    def save(self, config: PayrollConfig) -> int:
        """Insert when config_id is 0, otherwise overwrite that row. Returns the id."""

        raise NotImplementedError
