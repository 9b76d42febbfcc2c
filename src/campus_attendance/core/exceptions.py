class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class MalformedTokenError(ValidationError):
    """Raised when a proof token cannot be decoded."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class PersistenceError(DomainError):
    """Raised when the backing store fails."""


class DuplicateRecordError(PersistenceError):
    """Raised when a uniqueness constraint rejects an insert."""
