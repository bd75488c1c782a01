"""Domain-specific exceptions.

NetworkFailure and NotFound come out of the backend client; services decide
whether they reach the caller. ValidationFailure stays with the form that
raised it and never reaches the store.
"""


class DomainException(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        """Initialize domain exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NetworkFailure(DomainException):
    """Raised when a backend request is rejected or the connection fails."""

    def __init__(
        self, message: str, status_code: int | None = None, details: dict | None = None
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class NotFound(DomainException):
    """Raised when a lookup by id or url yields no entity."""

    pass


class ValidationFailure(DomainException):
    """Raised when form input is malformed.

    ``fields`` names the inputs that should be marked invalid.
    """

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message, {"fields": list(fields or [])})
        self.fields = list(fields or [])


class ActionValidationError(DomainException):
    """Raised when an action cannot be decoded at the dispatch boundary."""

    pass
