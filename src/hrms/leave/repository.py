from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import Holiday, LeaveBalanceEntry, LeaveRequest, LeaveTypePolicy


class LeaveTypeRepository(Protocol):
    def get_by_id(self, type_id: int) -> Optional[LeaveTypePolicy]:
        raise NotImplementedError

    def get_by_name(self, name: LeaveType) -> Optional[LeaveTypePolicy]:
        raise NotImplementedError

    def list_types(self, *, active_only: bool = True) -> Sequence[LeaveTypePolicy]:
        """Ordered by name."""

        raise NotImplementedError

    def create(self, policy: LeaveTypePolicy) -> Optional[int]:
        """None when the name or code is already taken."""

        raise NotImplementedError

    def update(self, policy: LeaveTypePolicy) -> Optional[bool]:
        """False when the row is gone, None when the new name or code is taken."""

        raise NotImplementedError

    def upsert_by_name(self, policy: LeaveTypePolicy) -> None:
        raise NotImplementedError


class LeaveBalanceRepository(Protocol):
    def list_for_employee(self, employee_id: str, year: int) -> Sequence[LeaveBalanceEntry]:
        raise NotImplementedError

    def list_for_year(self, year: int) -> Sequence[LeaveBalanceEntry]:
        raise NotImplementedError

    def ensure_entries(self, employee_id: str, year: int, allocations: Mapping[LeaveType, float]) -> int:
        """Create missing entries (available = allocated); existing ones are untouched.

        Returns how many entries were created.
        """

        raise NotImplementedError

    def adjust(
        self,
        *,
        employee_id: str,
        year: int,
        leave_type: LeaveType,
        used_delta: float = 0,
        pending_delta: float = 0,
        require_available: Optional[float] = None,
    ) -> bool:
        """Apply the deltas and recompute available in one atomic step.

        With ``require_available`` the change only happens while available >= that value.
        False when no entry matched.
        """

        raise NotImplementedError


class LeaveRequestRepository(Protocol):
    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(self, request: LeaveRequest) -> int:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[LeaveStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LeaveRequest]:
        """Filter on requests lying inside [start_date, end_date], newest applied first."""

        raise NotImplementedError

    def list_overlapping(
        self,
        *,
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
        employee_id: Optional[str] = None,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def transition(
        self,
        request_id: int,
        *,
        from_status: LeaveStatus,
        to_status: LeaveStatus,
        approved_by: Optional[str] = None,
        approved_on: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Move a request to ``to_status`` only while it is still ``from_status``."""

        raise NotImplementedError

    def count_by_status(self, status: LeaveStatus) -> int:
        raise NotImplementedError

    def count_approved_since(self, since: datetime) -> int:
        raise NotImplementedError


class HolidayRepository(Protocol):
    def get_by_id(self, holiday_id: int) -> Optional[Holiday]:
        raise NotImplementedError

    def list_for_year(self, year: int) -> Sequence[Holiday]:
        raise NotImplementedError

    def list_between(self, start_date: date, end_date: date) -> Sequence[Holiday]:
        """Active holidays inside the window, ordered by date."""

        raise NotImplementedError

    def create(self, holiday: Holiday) -> int:
        raise NotImplementedError

    def update(self, holiday: Holiday) -> bool:
        raise NotImplementedError

    def upsert_by_name(self, holiday: Holiday) -> None:
        """Insert or refresh the holiday with the same (name, year)."""

        raise NotImplementedError

    def delete(self, holiday_id: int) -> bool:
        raise NotImplementedError
