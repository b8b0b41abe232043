"""
Booking service - seat allocation against rides.

This module handles:
    - Eligibility previews
    - Creating bookings (seats reserved at creation)
    - Accepting/rejecting bookings (driver)
    - Cancelling bookings (passenger)
    - Booking lists and statistics
"""

from .seat_allocator import (
    BookingResult,
    EligibilityResult,
    check_eligibility,
    create_booking,
    accept_booking,
    reject_booking,
    cancel_booking,
)
from .queries import (
    get_my_bookings,
    get_booking,
    get_pending_requests,
    get_ride_bookings,
    get_passenger_booking_stats,
    get_driver_booking_stats,
)

__all__ = [
    "BookingResult",
    "EligibilityResult",
    "check_eligibility",
    "create_booking",
    "accept_booking",
    "reject_booking",
    "cancel_booking",
    "get_my_bookings",
    "get_booking",
    "get_pending_requests",
    "get_ride_bookings",
    "get_passenger_booking_stats",
    "get_driver_booking_stats",
]
