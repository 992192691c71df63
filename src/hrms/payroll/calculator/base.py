from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...attendance.model import AttendanceRecord
from ...leave.model import Holiday, LeaveRequest
from ..model import Bonus, PayrollComputation, SalaryStructure


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll).

    Works on records already fetched for one employee and one month.
    """

    @abstractmethod
    def compute(
        self,
        *,
        month: int,
        year: int,
        structure: SalaryStructure,
        attendance: Sequence[AttendanceRecord],
        leaves: Sequence[LeaveRequest],
        holidays: Sequence[Holiday],
        bonuses: Sequence[Bonus],
    ) -> PayrollComputation:
        raise NotImplementedError
