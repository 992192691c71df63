from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status of one employee for one calendar day."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    EARLY = "Early"
    HALF_DAY = "Half-Day"


class ApprovalStatus(str, Enum):
    """Sub-state of an attendance record under manual correction."""

    NONE = "None"
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ReviewAction(str, Enum):
    """Decision taken on a Pending correction or leave request."""

    APPROVE = "approve"
    REJECT = "reject"


class LeaveType(str, Enum):
    CASUAL = "Casual"
    SICK = "Sick"
    EARNED = "Earned"
    LOP = "LOP"
    MATERNITY = "Maternity"
    PATERNITY = "Paternity"
    COMPENSATORY = "Compensatory"


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class HalfDayType(str, Enum):
    FIRST_HALF = "First Half"
    SECOND_HALF = "Second Half"


class HolidayType(str, Enum):
    NATIONAL = "National"
    REGIONAL = "Regional"
    COMPANY = "Company"
    OPTIONAL = "Optional"


class PayrollStatus(str, Enum):
    """Payroll lifecycle: Draft -> Processed -> Approved -> Paid, Locked is absorbing."""

    DRAFT = "Draft"
    PROCESSED = "Processed"
    APPROVED = "Approved"
    PAID = "Paid"
    LOCKED = "Locked"


class PaymentMode(str, Enum):
    BANK_TRANSFER = "Bank Transfer"
    CHEQUE = "Cheque"
    CASH = "Cash"
    UPI = "UPI"


class BonusType(str, Enum):
    PERFORMANCE = "Performance Bonus"
    FESTIVAL = "Festival Bonus"
    ANNUAL = "Annual Bonus"
    REFERRAL = "Referral Bonus"
    INCENTIVE = "Incentive"
    OTHER = "Other"


class BonusStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    PAID = "Paid"
    CANCELLED = "Cancelled"
