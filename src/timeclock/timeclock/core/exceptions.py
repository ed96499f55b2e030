from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"
    default_message = "Business rule violated"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class EmployeeNotFound(DomainError):
    """Raised when the employee is unknown or no longer active."""

    code = "EMPLOYEE_NOT_FOUND"
    default_message = "Employee not found or inactive"


class AttendanceError(DomainError):
    """Base for attendance state-machine precondition violations."""

    code = "ATTENDANCE_ERROR"


class AlreadyClockedIn(AttendanceError):
    code = "ALREADY_CLOCKED_IN"
    default_message = "You have already clocked in today"


class NotClockedIn(AttendanceError):
    code = "NOT_CLOCKED_IN"
    default_message = "You must clock in first"


class AlreadyClockedOut(NotClockedIn):
    """No open record today because the day is already closed."""

    code = "ALREADY_CLOCKED_OUT"
    default_message = "You have already clocked out today"


class AlreadyOnBreak(AttendanceError):
    code = "ALREADY_ON_BREAK"
    default_message = "You are already on a break"


class NotOnBreak(AttendanceError):
    code = "NOT_ON_BREAK"
    default_message = "You are not on a break"


class ConcurrencyConflict(DomainError):
    """Raised when a write kept losing the race after the bounded retries."""

    code = "CONCURRENCY_CONFLICT"
    default_message = "The attendance record was modified concurrently, please retry"
