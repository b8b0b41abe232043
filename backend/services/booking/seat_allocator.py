"""
Seat allocation: booking creation, acceptance, rejection and cancellation.

Seats are reserved when a booking is created (PENDING already consumes
capacity) and handed back whenever a booking is rejected or cancelled,
whatever its previous status. Every operation that moves
Ride.available_seats runs in a single transaction that locks the ride row,
re-validates its preconditions and applies the delta with a conditional
UPDATE, so concurrent callers can never allocate more than total_seats.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, Optional

from django.conf import settings
from django.utils import timezone

from rides.models import Booking, BookingStatus, Ride, RideStatus
from services.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    NotOwnerError,
)
from services.transactions import (
    atomic_seat_operation,
    lock_ride,
    release_seats,
    reserve_seats,
)

logger = logging.getLogger(__name__)


@dataclass
class EligibilityResult:
    """Advisory verdict returned by check_eligibility."""
    eligible: bool
    reason: str = ""
    ride: Optional[Dict[str, Any]] = None


@dataclass
class BookingResult:
    """Result object for booking operations."""
    booking: Booking
    message: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


def cancellation_cutoff(ride: Ride):
    minutes = getattr(settings, 'BOOKING_CANCELLATION_CUTOFF_MINUTES', 60)
    return ride.departure_at - timedelta(minutes=minutes)


def _has_departed(ride: Ride, now=None) -> bool:
    return ride.departure_at <= (now or timezone.now())


def _ineligibility_reason(passenger_id: int, ride: Ride, seats_needed: int) -> Optional[str]:
    """First reason the passenger cannot book, or None."""
    if ride.driver.user_id == passenger_id:
        return "You cannot book your own ride"
    if ride.status != RideStatus.SCHEDULED:
        return f"Ride is {ride.status.lower()} and no longer accepts bookings"
    if _has_departed(ride):
        return "Cannot book rides that have already departed"
    if ride.available_seats < seats_needed:
        return f"Only {ride.available_seats} seat(s) available, you need {seats_needed}"
    if Booking.objects.filter(ride=ride, passenger_id=passenger_id).exclude(
        status=BookingStatus.CANCELLED
    ).exists():
        return "You already have a booking for this ride"
    return None


def _lock_booking(booking_id: int) -> Booking:
    """
    Lock a booking and its ride, ride row first.

    Every seat-moving path takes the ride lock before any booking lock so
    that ride status transitions and booking changes cannot deadlock.
    """
    ride_id = Booking.objects.filter(pk=booking_id).values_list('ride_id', flat=True).first()
    if ride_id is None:
        raise NotFoundError("Booking not found")
    lock_ride(ride_id)
    return (
        Booking.objects.select_for_update(of=("self",))
        .select_related('ride__driver')
        .get(pk=booking_id)
    )


# ===================== Passenger Operations =====================

def check_eligibility(passenger_id: int, ride_id: int, seats_needed: int) -> EligibilityResult:
    """
    Read-only preview of whether a booking would go through.

    The verdict is advisory only: create_booking re-validates everything
    inside its own transaction.
    """
    ride = Ride.objects.select_related('driver').filter(pk=ride_id).first()
    if ride is None:
        raise NotFoundError("Ride not found")

    reason = _ineligibility_reason(passenger_id, ride, seats_needed)
    if reason:
        return EligibilityResult(eligible=False, reason=reason)

    return EligibilityResult(
        eligible=True,
        ride={
            'id': ride.id,
            'origin': ride.origin,
            'destination': ride.destination,
            'departure_date': ride.departure_date,
            'departure_time': ride.departure_time,
            'available_seats': ride.available_seats,
            'fare': ride.fare,
            'total_fare': ride.fare * seats_needed,
        },
    )


@atomic_seat_operation
def create_booking(passenger_id: int, ride_id: int, seats_booked: int) -> BookingResult:
    """
    Reserve seats on a ride and record a PENDING booking.

    Args:
        passenger_id: Authenticated user id of the passenger
        ride_id: Ride to book
        seats_booked: Number of seats (>= 1)

    Returns:
        BookingResult with the PENDING booking

    Raises:
        NotFoundError: ride does not exist
        ForbiddenError: passenger is the ride's own driver
        InvalidStateError: ride is not scheduled or has departed
        InvalidInputError: fewer than one seat requested
        ConflictError: not enough seats, or an active booking already exists
    """
    if seats_booked < 1:
        raise InvalidInputError("At least one seat must be booked")

    ride = lock_ride(ride_id)
    if ride is None:
        raise NotFoundError("Ride not found")

    if ride.driver.user_id == passenger_id:
        raise ForbiddenError("Driver cannot book their own ride")

    if ride.status != RideStatus.SCHEDULED:
        raise InvalidStateError(f"Ride is {ride.status.lower()} and no longer accepts bookings")
    if _has_departed(ride):
        raise InvalidStateError("Cannot book rides that have already departed")

    if Booking.objects.filter(ride=ride, passenger_id=passenger_id).exclude(
        status=BookingStatus.CANCELLED
    ).exists():
        raise ConflictError("You already have a booking for this ride")

    if ride.available_seats < seats_booked or not reserve_seats(ride.id, seats_booked):
        raise ConflictError(
            "Seats no longer available. Another passenger may have just booked.",
            available_seats=ride.available_seats,
        )

    booking = Booking.objects.create(
        ride=ride,
        passenger_id=passenger_id,
        seats_booked=seats_booked,
        fare=Decimal(ride.fare) * seats_booked,
        status=BookingStatus.PENDING,
    )

    logger.info(
        "Booking %s created: passenger %s reserved %s seat(s) on ride %s",
        booking.id, passenger_id, seats_booked, ride.id,
    )
    return BookingResult(
        booking=booking,
        message="Booking request sent to the driver",
    )


@atomic_seat_operation
def cancel_booking(booking_id: int, passenger_id: int) -> BookingResult:
    """
    Cancel a booking as its passenger and release its seats.

    Seats are released for PENDING and CONFIRMED bookings alike, since both
    reserved them at creation. Cancelling later than the configured cutoff
    before departure (one hour by default) is refused.
    """
    booking = _lock_booking(booking_id)
    if booking.passenger_id != passenger_id:
        raise NotOwnerError("Only the passenger can cancel this booking")

    if not booking.can_transition_to(BookingStatus.CANCELLED):
        raise InvalidStateError(
            "Cannot cancel completed or already cancelled booking",
            status=booking.status,
        )

    ride = booking.ride
    if timezone.now() > cancellation_cutoff(ride):
        raise ConflictError("Too late to cancel: bookings close to departure cannot be cancelled")

    previous = booking.status
    release_seats(ride.id, booking.seats_booked)
    booking.status = BookingStatus.CANCELLED
    booking.save(update_fields=['status', 'updated_at'])

    logger.info(
        "Booking %s (%s) cancelled by passenger %s; %s seat(s) released on ride %s",
        booking.id, previous, passenger_id, booking.seats_booked, ride.id,
    )
    return BookingResult(booking=booking, message="Booking cancelled successfully")


# ===================== Driver Operations =====================

def _pending_booking_for_driver(booking_id: int, driver_user_id: int) -> Booking:
    booking = _lock_booking(booking_id)
    if booking.ride.driver.user_id != driver_user_id:
        raise NotOwnerError("Not your ride")
    if booking.status != BookingStatus.PENDING:
        raise InvalidStateError("Booking not pending", status=booking.status)
    return booking


@atomic_seat_operation
def accept_booking(booking_id: int, driver_user_id: int) -> BookingResult:
    """
    Confirm a PENDING booking.

    Seats were reserved at creation, so the counter does not move.
    """
    booking = _pending_booking_for_driver(booking_id, driver_user_id)

    booking.status = BookingStatus.CONFIRMED
    booking.save(update_fields=['status', 'updated_at'])

    logger.info("Booking %s accepted by driver user %s", booking.id, driver_user_id)
    return BookingResult(booking=booking, message="Booking confirmed")


@atomic_seat_operation
def reject_booking(booking_id: int, driver_user_id: int, reason: Optional[str] = None) -> BookingResult:
    """Reject a PENDING booking and release its seats in the same transaction."""
    booking = _pending_booking_for_driver(booking_id, driver_user_id)

    release_seats(booking.ride_id, booking.seats_booked)
    booking.status = BookingStatus.CANCELLED
    booking.rejection_reason = reason or None
    booking.save(update_fields=['status', 'rejection_reason', 'updated_at'])

    logger.info(
        "Booking %s rejected by driver user %s; %s seat(s) released on ride %s",
        booking.id, driver_user_id, booking.seats_booked, booking.ride_id,
    )
    return BookingResult(booking=booking, message="Booking rejected")
