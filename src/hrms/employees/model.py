from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee that attendance, leave and payroll refer to.

    Plain data object, no DB access.
    """

    employee_id: str
    full_name: str
    email: str
    department: str
    designation: str = ""
    is_active: bool = True
