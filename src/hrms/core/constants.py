"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import LeaveType

DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "18:00"
DEFAULT_LATE_THRESHOLD_MINUTES = 15
DEFAULT_EARLY_LEAVE_THRESHOLD_MINUTES = 30
DEFAULT_HALF_DAY_THRESHOLD_HOURS = 4
DEFAULT_FULL_DAY_HOURS = 8

# date.weekday() value counted as the weekly off day
WEEKOFF_WEEKDAY = 6

DEFAULT_APPROVER = "HR Admin"
DEFAULT_PROCESSOR = "System"

# (leave type, yearly days, paid, carries forward, max carry forward)
DEFAULT_LEAVE_TYPES = (
    (LeaveType.CASUAL, 12, True, False, 0),
    (LeaveType.SICK, 12, True, False, 0),
    (LeaveType.EARNED, 15, True, True, 30),
    (LeaveType.LOP, 0, False, False, 0),
)

# Leave types that are never deducted from a balance and count as loss of pay.
UNPAID_LEAVE_TYPES = frozenset({LeaveType.LOP})

# (name, "MM-DD", type)
DEFAULT_HOLIDAYS = (
    ("Republic Day", "01-26", "National"),
    ("Holi", "03-14", "National"),
    ("Good Friday", "03-29", "National"),
    ("Independence Day", "08-15", "National"),
    ("Gandhi Jayanti", "10-02", "National"),
    ("Diwali", "11-01", "National"),
    ("Christmas", "12-25", "National"),
)

LEAVE_TYPE_CODES = {
    LeaveType.CASUAL: "CL",
    LeaveType.SICK: "SL",
    LeaveType.EARNED: "EL",
    LeaveType.LOP: "LOP",
    LeaveType.MATERNITY: "ML",
    LeaveType.PATERNITY: "PL",
    LeaveType.COMPENSATORY: "CO",
}

UPCOMING_HOLIDAYS_LIMIT = 5

DEFAULT_COMPANY_NAME = "HRMS Lite Company"
DEFAULT_COMPANY_ADDRESS = "Company Address Here"

# (min salary, max salary, monthly professional tax)
DEFAULT_PROFESSIONAL_TAX_SLAB = (
    (0, 15000, 0),
    (15001, 20000, 150),
    (20001, 999999999, 200),
)
