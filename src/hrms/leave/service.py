from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, to_date
from ..common.validators import optional_enum, require_amount, require_enum, require_non_empty, require_year
from ..core.constants import (
    DEFAULT_APPROVER,
    DEFAULT_HOLIDAYS,
    DEFAULT_LEAVE_TYPES,
    LEAVE_TYPE_CODES,
    UNPAID_LEAVE_TYPES,
    UPCOMING_HOLIDAYS_LIMIT,
)
from ..core.enums import HalfDayType, HolidayType, LeaveStatus, LeaveType, ReviewAction
from ..core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import EmployeeLeaveBalance, Holiday, LeaveDashboardStats, LeaveRequest, LeaveTypePolicy
from .repository import HolidayRepository, LeaveBalanceRepository, LeaveRequestRepository, LeaveTypeRepository

logger = logging.getLogger(__name__)

# Requests that hold days on the calendar.
BLOCKING_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)


def count_leave_days(start: date, end: date, *, is_half_day: bool) -> float:
    """Inclusive calendar day count, or 0.5 for a half-day."""
    if end < start:
        raise ValidationError("End date cannot be before start date")
    if is_half_day:
        if start != end:
            raise ValidationError("A half-day leave must start and end on the same date")
        return 0.5
    return float((end - start).days + 1)


class LeaveTypeService:
    """Configured leave types. The defaults are created the first time the table is read empty."""

    def __init__(self, types: LeaveTypeRepository):
        self._types = types

    def list_leave_types(self) -> Sequence[LeaveTypePolicy]:
        if not self._types.list_types(active_only=False):
            self.initialize_leave_types()
        return self._types.list_types(active_only=True)

    def allocations(self) -> dict[LeaveType, float]:
        """Yearly allocation of every active paid type."""
        return {p.name: p.default_days for p in self.list_leave_types() if p.is_paid}

    def is_tracked(self, leave_type: LeaveType) -> bool:
        policy = self._types.get_by_name(leave_type)
        if policy is None:
            return leave_type not in UNPAID_LEAVE_TYPES
        return policy.is_paid

    def create_leave_type(
        self,
        *,
        name,
        code: Optional[str] = None,
        default_days=0,
        is_paid: bool = True,
        carry_forward: bool = False,
        max_carry_forward=0,
        description: Optional[str] = None,
        is_active: bool = True,
    ) -> LeaveTypePolicy:
        leave_type = require_enum(name, LeaveType, "name")
        draft = LeaveTypePolicy(
            type_id=0,
            name=leave_type,
            code=(code or "").strip().upper() or LEAVE_TYPE_CODES[leave_type],
            default_days=require_amount(default_days, "defaultDays"),
            is_paid=bool(is_paid),
            carry_forward=bool(carry_forward),
            max_carry_forward=require_amount(max_carry_forward, "maxCarryForward"),
            description=description or "",
            is_active=bool(is_active),
        )
        type_id = self._types.create(draft)
        if type_id is None:
            raise BusinessRuleError("Leave type with this name or code already exists")
        logger.info("Leave type created %s (%s)", draft.name.value, draft.code)
        return replace(draft, type_id=type_id)

    def update_leave_type(
        self,
        type_id: int,
        *,
        name=None,
        code: Optional[str] = None,
        default_days=None,
        is_paid: Optional[bool] = None,
        carry_forward: Optional[bool] = None,
        max_carry_forward=None,
        description: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> LeaveTypePolicy:
        current = self._types.get_by_id(int(type_id))
        if not current:
            raise NotFoundError("Leave type not found")

        updated = replace(
            current,
            name=require_enum(name, LeaveType, "name") if name is not None else current.name,
            code=require_non_empty(code, "code").upper() if code is not None else current.code,
            default_days=current.default_days if default_days is None else require_amount(default_days, "defaultDays"),
            is_paid=current.is_paid if is_paid is None else bool(is_paid),
            carry_forward=current.carry_forward if carry_forward is None else bool(carry_forward),
            max_carry_forward=(
                current.max_carry_forward
                if max_carry_forward is None
                else require_amount(max_carry_forward, "maxCarryForward")
            ),
            description=current.description if description is None else description,
            is_active=current.is_active if is_active is None else bool(is_active),
        )
        stored = self._types.update(updated)
        if stored is None:
            raise BusinessRuleError("Leave type with this name or code already exists")
        if not stored:
            raise NotFoundError("Leave type not found")
        logger.info("Leave type %s updated", updated.name.value)
        return updated

    def initialize_leave_types(self) -> int:
        for leave_type, days, paid, carries, max_carry in DEFAULT_LEAVE_TYPES:
            self._types.upsert_by_name(
                LeaveTypePolicy(
                    type_id=0,
                    name=leave_type,
                    code=LEAVE_TYPE_CODES[leave_type],
                    default_days=float(days),
                    is_paid=paid,
                    carry_forward=carries,
                    max_carry_forward=float(max_carry),
                )
            )
        logger.info("Default leave types initialised")
        return len(DEFAULT_LEAVE_TYPES)


class LeaveService:
    def __init__(
        self,
        requests: LeaveRequestRepository,
        balances: LeaveBalanceRepository,
        employees: EmployeeRepository,
        leave_types: LeaveTypeService,
        holidays: HolidayRepository | None = None,
    ):
        self._requests = requests
        self._balances = balances
        self._employees = employees
        self._types = leave_types
        self._holidays = holidays

    def _employee_name(self, employee_id: str, cache: dict[str, str]) -> str:
        if employee_id not in cache:
            e = self._employees.get_by_id(employee_id)
            cache[employee_id] = e.full_name if e else employee_id
        return cache[employee_id]

    def get_balance(self, employee_id: str, *, year=None) -> EmployeeLeaveBalance:
        """Balances for one employee and year, created from the defaults on first access."""
        employee_id = require_non_empty(employee_id, "employeeId")
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        year = require_year(year) if year else now_local().year

        self._balances.ensure_entries(employee_id, year, self._types.allocations())
        return EmployeeLeaveBalance(
            employee_id=employee_id,
            employee_name=employee.full_name,
            year=year,
            balances=list(self._balances.list_for_employee(employee_id, year)),
        )

    def list_balances(self, *, year=None) -> list[EmployeeLeaveBalance]:
        year = require_year(year) if year else now_local().year
        grouped: dict[str, list] = {}
        for entry in self._balances.list_for_year(year):
            grouped.setdefault(entry.employee_id, []).append(entry)

        names: dict[str, str] = {}
        return [
            EmployeeLeaveBalance(
                employee_id=employee_id,
                employee_name=self._employee_name(employee_id, names),
                year=year,
                balances=entries,
            )
            for employee_id, entries in sorted(grouped.items())
        ]

    def initialize_all_balances(self, *, year=None) -> int:
        """Ensure default balances for every active employee; returns the employee count."""
        year = require_year(year) if year else now_local().year
        employees = self._employees.list_active()
        allocations = self._types.allocations()
        created = 0
        for e in employees:
            created += self._balances.ensure_entries(e.employee_id, year, allocations)
        logger.info("Leave balances initialised year=%s employees=%d new_entries=%d", year, len(employees), created)
        return len(employees)

    def apply_leave(
        self,
        *,
        employee_id: str,
        leave_type,
        start_date,
        end_date,
        reason: Optional[str],
        is_half_day: bool = False,
        half_day_type=None,
        now: datetime | None = None,
    ) -> LeaveRequest:
        employee_id = require_non_empty(employee_id, "employeeId")
        leave_type = require_enum(leave_type, LeaveType, "leaveType")
        reason = require_non_empty(reason, "reason")
        start = to_date(start_date, "startDate")
        end = to_date(end_date, "endDate")
        is_half_day = bool(is_half_day)
        half = optional_enum(half_day_type, HalfDayType, "halfDayType") if is_half_day else None
        days = count_leave_days(start, end, is_half_day=is_half_day)

        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")

        overlap = self._requests.list_overlapping(
            employee_id=employee_id,
            start_date=start,
            end_date=end,
            statuses=BLOCKING_STATUSES,
        )
        if overlap:
            raise BusinessRuleError("Leave request overlaps with existing request")

        tracked = self._types.is_tracked(leave_type)
        year = start.year
        if tracked:
            self._balances.ensure_entries(employee_id, year, self._types.allocations())
            reserved = self._balances.adjust(
                employee_id=employee_id,
                year=year,
                leave_type=leave_type,
                pending_delta=days,
                require_available=days,
            )
            if not reserved:
                raise BusinessRuleError("Insufficient leave balance")

        draft = LeaveRequest(
            request_id=0,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            number_of_days=days,
            reason=reason,
            is_half_day=is_half_day,
            half_day_type=half,
            applied_on=now or now_local(),
        )
        try:
            request_id = self._requests.create(draft)
        except Exception:
            if tracked:
                self._balances.adjust(
                    employee_id=employee_id, year=year, leave_type=leave_type, pending_delta=-days
                )
            raise

        logger.info(
            "Leave applied id=%s employee=%s type=%s %s..%s days=%s",
            request_id,
            employee_id,
            leave_type.value,
            start,
            end,
            days,
        )
        return replace(draft, request_id=request_id)

    def list_requests(
        self,
        *,
        employee_id: Optional[str] = None,
        status=None,
        start_date=None,
        end_date=None,
    ) -> list[tuple[LeaveRequest, str]]:
        """Requests with the employee's name, newest first."""
        requests = self._requests.list_requests(
            employee_id=employee_id or None,
            status=optional_enum(status, LeaveStatus, "status"),
            start_date=to_date(start_date, "startDate") if start_date else None,
            end_date=to_date(end_date, "endDate") if end_date else None,
        )
        names: dict[str, str] = {}
        return [(r, self._employee_name(r.employee_id, names)) for r in requests]

    def process_leave(
        self,
        request_id: int,
        *,
        action,
        approved_by: Optional[str] = None,
        rejection_reason: Optional[str] = None,
        now: datetime | None = None,
    ) -> LeaveRequest:
        try:
            action = ReviewAction(action)
        except ValueError:
            raise ValidationError('Action must be either "approve" or "reject"')

        request = self._require_request(request_id)
        if request.status != LeaveStatus.PENDING:
            raise BusinessRuleError("Request already processed")

        approve = action == ReviewAction.APPROVE
        moved = self._requests.transition(
            request.request_id,
            from_status=LeaveStatus.PENDING,
            to_status=LeaveStatus.APPROVED if approve else LeaveStatus.REJECTED,
            approved_by=(approved_by or "").strip() or DEFAULT_APPROVER,
            approved_on=now or now_local(),
            rejection_reason=None if approve else (rejection_reason or ""),
        )
        if not moved:
            raise BusinessRuleError("Request already processed")

        if self._types.is_tracked(request.leave_type):
            d = request.number_of_days
            self._balances.adjust(
                employee_id=request.employee_id,
                year=request.start_date.year,
                leave_type=request.leave_type,
                pending_delta=-d,
                used_delta=d if approve else 0,
            )

        logger.info("Leave %s %s", request.request_id, "approved" if approve else "rejected")
        return self._require_request(request.request_id)

    def cancel_leave(self, request_id: int) -> LeaveRequest:
        request = self._require_request(request_id)
        if request.status == LeaveStatus.CANCELLED:
            raise BusinessRuleError("Request already cancelled")
        if request.status not in BLOCKING_STATUSES:
            raise BusinessRuleError(f"A {request.status.value.lower()} request cannot be cancelled")

        moved = self._requests.transition(
            request.request_id,
            from_status=request.status,
            to_status=LeaveStatus.CANCELLED,
        )
        if not moved:
            raise BusinessRuleError("Request was modified concurrently, reload and retry")

        if self._types.is_tracked(request.leave_type):
            d = request.number_of_days
            was_pending = request.status == LeaveStatus.PENDING
            self._balances.adjust(
                employee_id=request.employee_id,
                year=request.start_date.year,
                leave_type=request.leave_type,
                pending_delta=-d if was_pending else 0,
                used_delta=0 if was_pending else -d,
            )

        logger.info("Leave %s cancelled (was %s)", request.request_id, request.status.value)
        return self._require_request(request.request_id)

    def get_dashboard_stats(self, *, today: date | None = None) -> LeaveDashboardStats:
        today = today or now_local().date()
        month_start = datetime(today.year, today.month, 1)
        upcoming: list[Holiday] = []
        if self._holidays is not None:
            upcoming = [h for h in self._holidays.list_for_year(today.year) if h.holiday_date >= today]
        return LeaveDashboardStats(
            pending_requests=self._requests.count_by_status(LeaveStatus.PENDING),
            approved_this_month=self._requests.count_approved_since(month_start),
            upcoming_holidays=upcoming[:UPCOMING_HOLIDAYS_LIMIT],
        )

    def _require_request(self, request_id: int) -> LeaveRequest:
        request = self._requests.get_by_id(int(request_id))
        if not request:
            raise NotFoundError("Leave request not found")
        return request


class HolidayService:
    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def list_holidays(self, *, year=None) -> Sequence[Holiday]:
        year = require_year(year) if year else now_local().year
        return self._holidays.list_for_year(year)

    def create_holiday(
        self,
        *,
        name: Optional[str],
        holiday_date,
        holiday_type=None,
        description: Optional[str] = None,
        is_optional: bool = False,
    ) -> Holiday:
        day = to_date(holiday_date)
        draft = Holiday(
            holiday_id=0,
            name=require_non_empty(name, "name"),
            holiday_date=day,
            year=day.year,
            holiday_type=optional_enum(holiday_type, HolidayType, "type") or HolidayType.COMPANY,
            description=description or "",
            is_optional=bool(is_optional),
        )
        holiday_id = self._holidays.create(draft)
        logger.info("Holiday created %s on %s", draft.name, day)
        return replace(draft, holiday_id=holiday_id)

    def update_holiday(
        self,
        holiday_id: int,
        *,
        name: Optional[str] = None,
        holiday_date=None,
        holiday_type=None,
        description: Optional[str] = None,
        is_optional: Optional[bool] = None,
        is_active: Optional[bool] = None,
    ) -> Holiday:
        current = self._holidays.get_by_id(int(holiday_id))
        if not current:
            raise NotFoundError("Holiday not found")

        day = to_date(holiday_date) if holiday_date else current.holiday_date
        updated = replace(
            current,
            name=require_non_empty(name, "name") if name is not None else current.name,
            holiday_date=day,
            year=day.year,
            holiday_type=optional_enum(holiday_type, HolidayType, "type") or current.holiday_type,
            description=current.description if description is None else description,
            is_optional=current.is_optional if is_optional is None else bool(is_optional),
            is_active=current.is_active if is_active is None else bool(is_active),
        )
        self._holidays.update(updated)
        return updated

    def delete_holiday(self, holiday_id: int) -> None:
        if not self._holidays.delete(int(holiday_id)):
            raise NotFoundError("Holiday not found")
        logger.info("Holiday %s deleted", holiday_id)

    def initialize_holidays(self, *, year=None) -> int:
        year = require_year(year) if year else now_local().year
        for name, month_day, holiday_type in DEFAULT_HOLIDAYS:
            self._holidays.upsert_by_name(
                Holiday(
                    holiday_id=0,
                    name=name,
                    holiday_date=date.fromisoformat(f"{year}-{month_day}"),
                    year=year,
                    holiday_type=HolidayType(holiday_type),
                )
            )
        logger.info("Default holidays initialised for %s", year)
        return len(DEFAULT_HOLIDAYS)
