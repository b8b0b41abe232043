"""
Core ride lifecycle operations.

This module owns Ride records: creation by verified drivers, detail edits
while a ride is still scheduled, the forward-only status machine and the
public browse queries. Seat counters are only touched here when a status
change releases the seats of bookings it cancels.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db.models import F, Sum
from django.utils import timezone

from accounts.models import User
from drivers.models import DriverProfile
from rides.models import BookingStatus, Ride, RideStatus, SEAT_HOLDING_STATUSES
from common.utils import combine_departure
from services.exceptions import (
    ConflictError,
    InvalidInputError,
    InvalidStateError,
    NotEligibleError,
    NotFoundError,
    NotOwnerError,
)
from services.transactions import atomic_seat_operation, lock_ride, release_seats

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('departure_date', 'departure_time', 'available_seats', 'fare')


@dataclass
class RideResult:
    """Result object for ride operations."""
    ride: Ride
    message: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RidePage:
    rides: List[Ride]
    total: int
    page: int
    total_pages: int
    has_more: bool


# ===================== Helpers =====================

def get_driver_profile(user_id: int) -> DriverProfile:
    """Return the caller's driver profile or raise NotEligibleError."""
    try:
        return DriverProfile.objects.select_related('user').get(user_id=user_id)
    except DriverProfile.DoesNotExist:
        raise NotEligibleError("Only drivers can manage rides")


def get_verified_driver(user_id: int) -> DriverProfile:
    """
    Re-check the driver's verification status from the database.

    The HTTP layer may already have checked it; that is never trusted here.
    """
    profile = get_driver_profile(user_id)
    if not profile.is_verified:
        raise NotEligibleError("Driver must be verified to create rides")
    return profile


def ensure_owner(ride: Ride, user_id: int, action: str = "manage"):
    if ride.driver.user_id != user_id:
        raise NotOwnerError(f"Only the ride owner can {action} this ride")


def reserved_seats(ride: Ride) -> int:
    """Seats held by PENDING/CONFIRMED bookings on the ride."""
    total = ride.bookings.filter(status__in=SEAT_HOLDING_STATUSES).aggregate(
        seats=Sum('seats_booked')
    )['seats']
    return total or 0


def _page_bounds(page: int, limit: Optional[int]):
    default_size = getattr(settings, 'DEFAULT_PAGE_SIZE', 10)
    max_size = getattr(settings, 'MAX_PAGE_SIZE', 100)
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or default_size), 1), max_size)
    return page, limit, (page - 1) * limit


def _paginate(queryset, page: int, limit: Optional[int]) -> RidePage:
    page, limit, offset = _page_bounds(page, limit)
    total = queryset.count()
    rides = list(queryset[offset:offset + limit])
    return RidePage(
        rides=rides,
        total=total,
        page=page,
        total_pages=math.ceil(total / limit) if total else 0,
        has_more=offset + len(rides) < total,
    )


# ===================== Driver Operations =====================

def create_ride(
    driver_user_id: int,
    origin: str,
    destination: str,
    departure_date: date,
    departure_time: time,
    available_seats: int,
    fare: Optional[Decimal] = None,
) -> RideResult:
    """
    Post a new ride.

    Args:
        driver_user_id: Authenticated user id of the driver
        origin: Departure location
        destination: Arrival location
        departure_date: Calendar day of departure
        departure_time: Time of day of departure
        available_seats: Seats offered to passengers
        fare: Per-seat fare (defaults to 0)

    Returns:
        RideResult with the SCHEDULED ride

    Raises:
        NotEligibleError: caller has no VERIFIED driver profile
        InvalidInputError: seats exceed vehicle capacity or departure is in the past
    """
    profile = get_verified_driver(driver_user_id)

    if available_seats < 1:
        raise InvalidInputError("At least one seat must be offered")
    if available_seats > profile.number_of_seats:
        raise InvalidInputError(
            f"Vehicle has only {profile.number_of_seats} seat(s); cannot offer {available_seats}"
        )
    fare = Decimal(fare) if fare is not None else Decimal('0')
    if fare < 0:
        raise InvalidInputError("Fare cannot be negative")
    if combine_departure(departure_date, departure_time) <= timezone.now():
        raise InvalidInputError("Departure must be in the future")

    ride = Ride.objects.create(
        driver=profile,
        origin=origin,
        destination=destination,
        departure_date=departure_date,
        departure_time=departure_time,
        available_seats=available_seats,
        total_seats=profile.number_of_seats,
        fare=fare,
        status=RideStatus.SCHEDULED,
    )

    logger.info(
        "Ride %s created by driver %s (%s -> %s, %s seats)",
        ride.id, profile.id, origin, destination, available_seats,
    )
    return RideResult(ride=ride, message="Ride published successfully")


@atomic_seat_operation
def update_ride_details(ride_id: int, driver_user_id: int, patch: Dict[str, Any]) -> RideResult:
    """
    Edit departure, seats or fare of a SCHEDULED ride.

    `available_seats` in the patch is the number of seats still open; together
    with the seats already reserved by bookings it may not exceed total_seats.
    Existing bookings keep the fare they were created with.
    """
    ride = lock_ride(ride_id)
    if ride is None:
        raise NotFoundError("Ride not found")
    ensure_owner(ride, driver_user_id, "update")
    if ride.status != RideStatus.SCHEDULED:
        raise InvalidStateError("Can only update scheduled rides", status=ride.status)

    changes = {key: value for key, value in patch.items() if key in UPDATABLE_FIELDS and value is not None}
    if not changes:
        return RideResult(ride=ride, message="Nothing to update")

    if 'available_seats' in changes:
        seats = changes['available_seats']
        held = reserved_seats(ride)
        if seats < 0:
            raise InvalidInputError("Available seats cannot be negative")
        if held + seats > ride.total_seats:
            raise ConflictError(
                f"{held} seat(s) are already reserved; at most {ride.total_seats - held} can stay open",
            )

    if 'fare' in changes and Decimal(changes['fare']) < 0:
        raise InvalidInputError("Fare cannot be negative")

    new_date = changes.get('departure_date', ride.departure_date)
    new_time = changes.get('departure_time', ride.departure_time)
    if ('departure_date' in changes or 'departure_time' in changes) and \
            combine_departure(new_date, new_time) <= timezone.now():
        raise InvalidInputError("Departure must be in the future")

    for key, value in changes.items():
        setattr(ride, key, value)
    ride.save(update_fields=list(changes) + ['updated_at'])

    logger.info("Ride %s updated by driver user %s: %s", ride.id, driver_user_id, sorted(changes))
    return RideResult(ride=ride, message="Ride updated successfully")


@atomic_seat_operation
def transition_ride_status(ride_id: int, driver_user_id: int, target_status: str) -> RideResult:
    """
    Move a ride forward through its status machine.

    SCHEDULED -> STARTED, STARTED -> COMPLETED, SCHEDULED -> CANCELLED.

    Side effects on bookings:
        CANCELLED: every PENDING/CONFIRMED booking is cancelled and its seats released.
        COMPLETED: CONFIRMED bookings complete; still-PENDING ones are cancelled
            and their seats released. Completed-ride counters are bumped.
    """
    ride = lock_ride(ride_id)
    if ride is None:
        raise NotFoundError("Ride not found")
    ensure_owner(ride, driver_user_id, "update the status of")

    if not ride.can_transition_to(target_status):
        raise InvalidStateError(
            f"Cannot move ride from {ride.status} to {target_status}",
            status=ride.status,
        )

    previous = ride.status
    extra: Dict[str, Any] = {}

    if target_status == RideStatus.CANCELLED:
        extra['bookings_cancelled'] = _cancel_seat_holding_bookings(
            ride, SEAT_HOLDING_STATUSES, "Ride cancelled by driver",
        )
    elif target_status == RideStatus.COMPLETED:
        extra['bookings_cancelled'] = _cancel_seat_holding_bookings(
            ride, [BookingStatus.PENDING], "Ride completed before the booking was accepted",
        )
        extra['bookings_completed'] = _complete_confirmed_bookings(ride)

    ride.status = target_status
    ride.save(update_fields=['status', 'updated_at'])

    logger.info("Ride %s moved %s -> %s by driver user %s", ride.id, previous, target_status, driver_user_id)
    return RideResult(ride=ride, message=f"Ride status updated to {target_status}", extra=extra)


def cancel_ride(ride_id: int, driver_user_id: int) -> RideResult:
    """Cancel a scheduled ride (shorthand for transition to CANCELLED)."""
    return transition_ride_status(ride_id, driver_user_id, RideStatus.CANCELLED)


def _cancel_seat_holding_bookings(ride: Ride, statuses, reason: str) -> int:
    """Cancel bookings in `statuses` and hand their seats back to the ride."""
    bookings = list(ride.bookings.select_for_update().filter(status__in=statuses))
    for booking in bookings:
        release_seats(ride.id, booking.seats_booked)
        booking.status = BookingStatus.CANCELLED
        booking.rejection_reason = reason
        booking.save(update_fields=['status', 'rejection_reason', 'updated_at'])
    if bookings:
        ride.refresh_from_db(fields=['available_seats'])
    return len(bookings)


def _complete_confirmed_bookings(ride: Ride) -> int:
    confirmed = ride.bookings.filter(status=BookingStatus.CONFIRMED)
    passenger_ids = list(confirmed.values_list('passenger_id', flat=True))
    count = confirmed.update(status=BookingStatus.COMPLETED, updated_at=timezone.now())

    # Update ride counts
    if passenger_ids:
        User.objects.filter(id__in=passenger_ids).update(completed_rides=F('completed_rides') + 1)
    User.objects.filter(id=ride.driver.user_id).update(completed_rides=F('completed_rides') + 1)
    return count


# ===================== Queries =====================

def get_ride(ride_id: int) -> Ride:
    try:
        return Ride.objects.select_related('driver__user').get(pk=ride_id)
    except Ride.DoesNotExist:
        raise NotFoundError("Ride not found")


def get_my_rides(driver_user_id: int, status: Optional[str] = None) -> List[Ride]:
    """Rides posted by the driver, earliest departure first."""
    profile = get_driver_profile(driver_user_id)
    rides = Ride.objects.filter(driver=profile).select_related('driver__user')
    if status:
        rides = rides.filter(status=status)
    return list(rides.order_by('departure_at'))


def search_rides(
    origin: str,
    destination: str,
    departure_date: date,
    seats: int = 1,
    page: int = 1,
    limit: Optional[int] = None,
) -> RidePage:
    """Scheduled, not-yet-departed rides on a day with enough open seats."""
    rides = (
        Ride.objects.select_related('driver__user')
        .filter(
            status=RideStatus.SCHEDULED,
            origin__icontains=origin,
            destination__icontains=destination,
            departure_date=departure_date,
            departure_at__gt=timezone.now(),
            available_seats__gte=seats,
        )
        .order_by('departure_at')
    )
    return _paginate(rides, page, limit)


def get_upcoming_rides(
    origin: Optional[str] = None,
    destination: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> RidePage:
    """Public browse: every scheduled ride that has not departed yet."""
    rides = Ride.objects.select_related('driver__user').filter(
        status=RideStatus.SCHEDULED,
        departure_at__gt=timezone.now(),
    )
    if origin:
        rides = rides.filter(origin__icontains=origin)
    if destination:
        rides = rides.filter(destination__icontains=destination)
    return _paginate(rides.order_by('departure_at'), page, limit)
