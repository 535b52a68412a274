class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class MissingConfigurationError(DomainError):
    """Raised when required configuration is absent (academic year, SMS settings, ...)."""


class GatewayError(DomainError):
    """Raised when the SMS gateway rejects a request or cannot be reached."""


class StoreError(DomainError):
    """Raised when the data store returns an error for a query or update."""


class ConcurrentUpdateError(StoreError):
    """Raised when a row kept changing underneath a compare-and-swap write."""
