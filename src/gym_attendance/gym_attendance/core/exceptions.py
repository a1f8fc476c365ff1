class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"
    http_status = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""

    code = "FORBIDDEN"
    http_status = 403


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    http_status = 404


class AlreadyCheckedIn(DomainError):
    """The subject already has an open session at this facility."""

    code = "ALREADY_IN_GYM"
    http_status = 409

    def __init__(self, message: str = "Already checked in. Please check out first."):
        super().__init__(message)


class NotCheckedIn(DomainError):
    """No open session exists to check out from."""

    code = "NOT_IN_GYM"

    def __init__(self, message: str = "You are not currently checked in."):
        super().__init__(message)


class QrCodeError(ValidationError):
    code = "INVALID_QR"


class StorageError(Exception):
    """Raised when the persistence layer fails."""


class TransientStorageError(StorageError):
    """Storage failure that is safe to retry (lock contention, dropped connection)."""


class DuplicateOpenSession(StorageError):
    """The one-open-session unique index rejected an insert."""
