"""Pure derivations of salary and payroll totals.

Totals are never accepted from callers; every save path runs these first.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional

from ..common.validators import require_amount
from ..core.exceptions import ValidationError
from .model import Payroll, SalaryStructure

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass(frozen=True)
class SalaryTotals:
    gross_salary: float
    net_salary: float
    ctc: float


@dataclass(frozen=True)
class PayrollTotals:
    gross_earnings: float
    total_deductions: float
    net_payable: float


def round_half_up(value: float) -> float:
    """Round to a whole currency unit, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def salary_totals(
    *,
    basic: float,
    hra: float,
    allowances: Mapping[str, float],
    deductions: Mapping[str, float],
) -> SalaryTotals:
    gross = basic + hra + sum(allowances.values())
    return SalaryTotals(
        gross_salary=gross,
        net_salary=gross - sum(deductions.values()),
        ctc=gross + deductions.get("pf", 0.0),
    )


def with_salary_totals(structure: SalaryStructure) -> SalaryStructure:
    t = salary_totals(
        basic=structure.basic,
        hra=structure.hra,
        allowances=structure.allowances,
        deductions=structure.deductions,
    )
    return replace(structure, gross_salary=t.gross_salary, net_salary=t.net_salary, ctc=t.ctc)


def payroll_totals(earnings: Mapping[str, float], deductions: Mapping[str, float]) -> PayrollTotals:
    gross = sum(earnings.values())
    total = sum(deductions.values())
    return PayrollTotals(gross_earnings=gross, total_deductions=total, net_payable=gross - total)


def with_payroll_totals(payroll: Payroll) -> Payroll:
    t = payroll_totals(payroll.earnings, payroll.deductions)
    return replace(
        payroll,
        gross_earnings=t.gross_earnings,
        total_deductions=t.total_deductions,
        net_payable=t.net_payable,
    )


def normalize_breakdown(
    raw: Optional[Mapping[str, Any]],
    keys: Iterable[str],
    field_name: str,
) -> dict[str, float]:
    """Map a camelCase or snake_case amount map onto the fixed category keys.

    Missing categories become 0; unknown ones are rejected.
    """
    keys = tuple(keys)
    out = {k: 0.0 for k in keys}
    for k, v in (raw or {}).items():
        key = _CAMEL_BOUNDARY.sub("_", str(k)).lower()
        if key not in out:
            raise ValidationError(f"Unknown {field_name} category: {k}")
        out[key] = require_amount(v, f"{field_name}.{k}")
    return out
