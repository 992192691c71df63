class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid (missing field, malformed date, unknown enum value)."""


class BusinessRuleError(DomainError):
    """Raised when a well-formed request conflicts with current state.

    Examples: duplicate punch-in, overlapping leave, locked payroll.
    """


class NotFoundError(DomainError):
    """Raised when an employee or record id does not exist."""
