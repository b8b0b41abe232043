"""Read-only booking queries for passengers and drivers."""

from typing import Dict, List, Optional

from django.db.models import Count

from rides.models import Booking, BookingStatus, Ride
from services.exceptions import ForbiddenError, NotFoundError, NotOwnerError
from services.ride_management import get_driver_profile


def _status_counts(bookings) -> Dict[str, int]:
    counts = {status.lower(): 0 for status in BookingStatus.values}
    for row in bookings.order_by().values('status').annotate(n=Count('id')):
        counts[row['status'].lower()] = row['n']
    counts['total'] = sum(counts.values())
    return counts


def get_my_bookings(passenger_id: int, status: Optional[str] = None) -> List[Booking]:
    bookings = Booking.objects.filter(passenger_id=passenger_id).select_related('ride__driver__user')
    if status:
        bookings = bookings.filter(status=status)
    return list(bookings.order_by('-created_at'))


def get_booking(booking_id: int, user_id: int) -> Booking:
    """A booking is visible to its passenger and to the ride's driver."""
    try:
        booking = Booking.objects.select_related('ride__driver__user', 'passenger').get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFoundError("Booking not found")

    if booking.passenger_id != user_id and booking.ride.driver.user_id != user_id:
        raise ForbiddenError("Access denied")
    return booking


def get_pending_requests(driver_user_id: int) -> List[Booking]:
    """PENDING bookings across all of the driver's rides."""
    profile = get_driver_profile(driver_user_id)
    return list(
        Booking.objects.filter(status=BookingStatus.PENDING, ride__driver=profile)
        .select_related('ride', 'passenger')
        .order_by('created_at')
    )


def get_ride_bookings(ride_id: int, driver_user_id: int) -> List[Booking]:
    try:
        ride = Ride.objects.select_related('driver').get(pk=ride_id)
    except Ride.DoesNotExist:
        raise NotFoundError("Ride not found")
    if ride.driver.user_id != driver_user_id:
        raise NotOwnerError("Not your ride")
    return list(ride.bookings.select_related('passenger').order_by('created_at'))


def get_passenger_booking_stats(passenger_id: int) -> Dict[str, int]:
    return _status_counts(Booking.objects.filter(passenger_id=passenger_id))


def get_driver_booking_stats(driver_user_id: int) -> Dict[str, int]:
    profile = get_driver_profile(driver_user_id)
    return _status_counts(Booking.objects.filter(ride__driver=profile))
