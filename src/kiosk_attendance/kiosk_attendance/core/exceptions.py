class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidInputError(ValidationError):
    """Raised before any I/O when a status or student reference is malformed."""


class NotFoundError(DomainError):
    """Raised when a reference does not resolve to exactly one aggregate."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class PersistenceError(DomainError):
    """Raised when the record store cannot be read or written."""


class ConcurrencyConflictError(PersistenceError):
    """Raised when a conditional write keeps losing to concurrent writers."""


class NotificationError(DomainError):
    """Raised by dispatchers; never fails an attendance write."""


class TimestampFormatError(DomainError):
    """Internal codec failure, recovered by the fallback clock."""
