class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when compensation settings are malformed."""


class StorageError(DomainError):
    """Raised when a persisted value cannot be decoded."""
