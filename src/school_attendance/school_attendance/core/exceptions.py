class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DuplicateError(DomainError):
    """Raised when a uniqueness rule rejects a write (same student/date, same report)."""


class NotFoundError(DomainError):
    """Raised when a student, report, record or holiday does not exist."""


class InvalidStateError(DomainError):
    """Raised when a report is processed outside of the pending state."""


class HolidayRejection(DomainError):
    """Raised when a check-in is attempted on a non-attendance day."""

    def __init__(self, message: str, *, name: str | None = None, kind: str | None = None):
        super().__init__(message)
        self.name = name
        self.kind = kind


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""
