from __future__ import annotations

from dataclasses import dataclass

from ..attendance.model import AttendanceRecord


@dataclass(frozen=True)
class PendingCorrection:
    """A Pending correction with the requesting employee's contact details (HR queue row)."""

    record: AttendanceRecord
    employee_name: str
    employee_email: str
