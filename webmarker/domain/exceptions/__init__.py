from webmarker.domain.exceptions.domain_exceptions import (
    ActionValidationError,
    DomainException,
    NetworkFailure,
    NotFound,
    ValidationFailure,
)

__all__ = [
    "ActionValidationError",
    "DomainException",
    "NetworkFailure",
    "NotFound",
    "ValidationFailure",
]
