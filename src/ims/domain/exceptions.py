"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the outer layers can catch them uniformly.  Each subclass carries a
``kind`` that callers translate into a transport-level status.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    kind = "DomainError"


class ValidationError(DomainException):
    """Malformed input or a violated business rule."""

    kind = "ValidationError"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    kind = "NotFound"


class InvalidStateError(DomainException):
    """A transition was attempted from a status that does not permit it."""

    kind = "InvalidState"


class InsufficientStockError(DomainException):
    """A deduction exceeds the quantity available."""

    kind = "InsufficientStock"


class PermissionDeniedError(DomainException):
    """The acting user's role may not perform this transition."""

    kind = "Forbidden"
