"""Custom exceptions for the repair request lifecycle."""


class LifecycleError(Exception):
    """Base class for errors raised by lifecycle operations.

    ``kind`` is the machine-readable error name returned to API clients.
    """
    kind = "error"
    status_code = 400


class NotFoundError(LifecycleError):
    """Raised when a referenced entity cannot be found."""
    kind = "not_found"
    status_code = 404


class InvalidStateError(LifecycleError):
    """Raised when an entity is not in a valid state for the operation."""
    kind = "invalid_state"
    status_code = 409


class ForbiddenError(LifecycleError):
    """Raised when the caller does not own the entity or lacks the role."""
    kind = "forbidden"
    status_code = 403


class ConflictError(LifecycleError):
    """Raised on uniqueness violations (duplicate offer, duplicate review)."""
    kind = "conflict"
    status_code = 409


class InvalidInputError(LifecycleError):
    """Raised when input is malformed or missing."""
    kind = "validation_error"
    status_code = 400
