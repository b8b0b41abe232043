"""
Typed failures raised by the service layer.

The HTTP layer maps these to responses (see common.exception_handler);
nothing in services/ knows about status codes.
"""


class RideShareError(Exception):
    """Base class for all service-layer failures."""

    code = "error"
    retryable = False

    def __init__(self, message: str = "", **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra


class NotFoundError(RideShareError):
    """Raised when the requested entity does not exist."""
    code = "not_found"


class ForbiddenError(RideShareError):
    """Raised when the caller has no rights over the entity."""
    code = "forbidden"


class NotOwnerError(ForbiddenError):
    """Raised when the caller does not own the ride, booking or request."""
    code = "not_owner"


class NotEligibleError(ForbiddenError):
    """Raised when the caller lacks a verified driver profile."""
    code = "not_eligible"


class InvalidStateError(RideShareError):
    """Raised when the operation is illegal for the entity's current status."""
    code = "invalid_state"


class InvalidInputError(RideShareError):
    """Raised for payload-level constraint violations."""
    code = "invalid_input"


class ConflictError(RideShareError):
    """
    Raised when a concurrency-sensitive precondition fails.

    Insufficient seats, duplicate active booking/request, late cancellation.
    Lock-wait and deadlock failures are reported with retryable=True.
    """
    code = "conflict"

    def __init__(self, message: str = "", retryable: bool = False, **extra):
        super().__init__(message, **extra)
        self.retryable = retryable
