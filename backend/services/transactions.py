"""
Transaction helpers shared by the seat-mutating services.

Every read-modify-write of Ride.available_seats runs inside one
transaction.atomic() block, takes a row lock on the ride and applies the
seat delta through a conditional UPDATE. Lock-wait, deadlock and
serialization failures coming out of that block are reported as a
retryable ConflictError.
"""

import functools
import logging
from contextlib import contextmanager

from django.db import OperationalError, transaction
from django.db.models import F

from rides.models import Ride
from .exceptions import ConflictError

logger = logging.getLogger(__name__)

# PostgreSQL: serialization_failure, deadlock_detected, lock_not_available
_RETRYABLE_SQLSTATES = {"40001", "40P01", "55P03"}
# MySQL: lock wait timeout, deadlock
_RETRYABLE_MYSQL_CODES = {1205, 1213}


def is_lock_contention(exc: OperationalError) -> bool:
    """True if the store gave up waiting on a lock rather than failing outright."""
    cause = exc.__cause__
    sqlstate = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    if sqlstate in _RETRYABLE_SQLSTATES:
        return True
    args = getattr(cause, "args", None) or exc.args
    if args and args[0] in _RETRYABLE_MYSQL_CODES:
        return True
    # SQLite reports contention as "database is locked" / "database table is locked"
    return "locked" in str(exc).lower()


@contextmanager
def lock_errors_as_conflict():
    try:
        yield
    except OperationalError as exc:
        if not is_lock_contention(exc):
            raise
        logger.warning("Seat update hit lock contention: %s", exc)
        raise ConflictError(
            "The ride is busy right now. Please try again.",
            retryable=True,
        ) from exc


def atomic_seat_operation(func):
    """
    Run func in its own transaction, translating lock contention to ConflictError.

    The translation wraps the atomic block so the transaction is already rolled
    back when the caller sees the error.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with lock_errors_as_conflict():
            with transaction.atomic():
                return func(*args, **kwargs)

    return wrapper


def lock_ride(ride_id: int):
    """SELECT ... FOR UPDATE on the ride row (with its driver). None if absent."""
    return (
        Ride.objects.select_for_update(of=("self",))
        .select_related("driver")
        .filter(pk=ride_id)
        .first()
    )


def reserve_seats(ride_id: int, seats: int) -> bool:
    """
    Decrement available_seats by `seats` only if that many are still open.

    Returns False (nothing written) when capacity is insufficient.
    """
    updated = Ride.objects.filter(pk=ride_id, available_seats__gte=seats).update(
        available_seats=F("available_seats") - seats
    )
    return updated == 1


def release_seats(ride_id: int, seats: int):
    """
    Increment available_seats by `seats` without exceeding total_seats.

    Raises ConflictError (nothing written) if the release would overflow
    capacity, which means the counters were already out of sync. Callers run
    inside an atomic block, so the booking change that triggered the release
    is rolled back with it.
    """
    updated = Ride.objects.filter(
        pk=ride_id,
        available_seats__lte=F("total_seats") - seats,
    ).update(available_seats=F("available_seats") + seats)
    if updated != 1:
        logger.error(
            "Seat release of %s on ride %s would exceed capacity; counter left unchanged",
            seats, ride_id,
        )
        raise ConflictError("Seat counter for this ride is out of sync")
