"""
Services package - Business logic layer.

This package contains all business logic services that operate on Django models
but are decoupled from the HTTP layer. Callers pass an authenticated user id and
validated values; failures are raised as the typed errors in services.exceptions.

Modules:
    - ride_management: Ride lifecycle (create, update, status machine, browse)
    - booking: Seat allocation (create/accept/reject/cancel bookings)
    - matching: Ride requests (post, match, expire)
    - reviews: Review gate for completed bookings
"""

from .exceptions import (
    RideShareError,
    NotFoundError,
    ForbiddenError,
    NotOwnerError,
    NotEligibleError,
    InvalidStateError,
    InvalidInputError,
    ConflictError,
)

__all__ = [
    "RideShareError",
    "NotFoundError",
    "ForbiddenError",
    "NotOwnerError",
    "NotEligibleError",
    "InvalidStateError",
    "InvalidInputError",
    "ConflictError",
]
