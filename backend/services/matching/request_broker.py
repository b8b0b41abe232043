"""
Ride request brokering.

Passengers who cannot find a ride post a RideRequest: a route, a day and a
departure window. Requests stay ACTIVE for a fixed time-to-live and are then
swept to EXPIRED. Every read path sweeps first so that a stale request is
never reported as live.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, time, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from rides.models import Ride, RideRequest, RideRequestStatus, RideStatus
from common.utils import combine_departure
from services.exceptions import (
    ConflictError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    NotOwnerError,
)

logger = logging.getLogger(__name__)


@dataclass
class RideRequestResult:
    """Result object for ride request operations."""
    ride_request: RideRequest
    message: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class MatchResult:
    ride_request: RideRequest
    rides: List[Ride]

    @property
    def total_matches(self):
        return len(self.rides)


# ===================== Maintenance =====================

def sweep_expired() -> int:
    """
    Transition every ACTIVE request past its expiry to EXPIRED.

    A single conditional bulk UPDATE, so it is idempotent and safe to run
    concurrently with itself. Returns the number of requests expired.
    """
    now = timezone.now()
    expired = RideRequest.objects.filter(
        status=RideRequestStatus.ACTIVE,
        expires_at__lt=now,
    ).update(status=RideRequestStatus.EXPIRED, updated_at=now)

    if expired:
        logger.info("Expired %d stale ride request(s)", expired)
    return expired


# ===================== Passenger Operations =====================

@transaction.atomic
def create_ride_request(
    passenger_id: int,
    origin: str,
    destination: str,
    earliest_date: date,
    earliest_time: time,
    latest_time: time,
    seats_needed: int,
    offer_per_seat: Optional[Decimal] = None,
) -> RideRequestResult:
    """
    Post a ride request valid for the configured time-to-live (24h by default).

    Raises:
        NotFoundError: passenger does not exist
        InvalidInputError: empty/inverted window, past window, bad seat count or offer
        ConflictError: an ACTIVE request for the same route and day already exists
    """
    window_start = combine_departure(earliest_date, earliest_time)
    window_end = combine_departure(earliest_date, latest_time)

    if window_end <= window_start:
        raise InvalidInputError("Latest time must be after earliest time")

    now = timezone.now()
    if window_start < now:
        raise InvalidInputError("Cannot create a ride request for a past time")

    max_seats = getattr(settings, 'RIDE_REQUEST_MAX_SEATS', 7)
    if not 1 <= seats_needed <= max_seats:
        raise InvalidInputError(f"Seats needed must be between 1 and {max_seats}")
    if offer_per_seat is not None and Decimal(offer_per_seat) < 0:
        raise InvalidInputError("Offer per seat cannot be negative")

    # Serialize concurrent creates by the same passenger on their user row
    if User.objects.select_for_update().filter(pk=passenger_id).first() is None:
        raise NotFoundError("Passenger not found")

    sweep_expired()

    if RideRequest.objects.filter(
        passenger_id=passenger_id,
        origin=origin,
        destination=destination,
        earliest_date=earliest_date,
        status=RideRequestStatus.ACTIVE,
    ).exists():
        raise ConflictError("You already have an active ride request for this route and date")

    ttl_hours = getattr(settings, 'RIDE_REQUEST_TTL_HOURS', 24)
    ride_request = RideRequest.objects.create(
        passenger_id=passenger_id,
        origin=origin,
        destination=destination,
        earliest_date=earliest_date,
        earliest_time=earliest_time,
        latest_time=latest_time,
        seats_needed=seats_needed,
        offer_per_seat=offer_per_seat,
        status=RideRequestStatus.ACTIVE,
        expires_at=now + timedelta(hours=ttl_hours),
    )

    logger.info(
        "Ride request %s posted by passenger %s (%s -> %s on %s)",
        ride_request.id, passenger_id, origin, destination, earliest_date,
    )
    return RideRequestResult(
        ride_request=ride_request,
        message="Ride request posted. Drivers on this route will be notified.",
    )


def _owned_request(request_id: int, passenger_id: int, action: str) -> RideRequest:
    ride_request = RideRequest.objects.select_for_update().filter(pk=request_id).first()
    if ride_request is None:
        raise NotFoundError("Ride request not found")
    if ride_request.passenger_id != passenger_id:
        raise NotOwnerError(f"You can only {action} your own ride requests")
    return ride_request


def _close_request(request_id: int, passenger_id: int, target: str, action: str) -> RideRequest:
    sweep_expired()
    ride_request = _owned_request(request_id, passenger_id, action)
    if not ride_request.can_transition_to(target):
        raise InvalidStateError(
            f"Cannot {action} a {ride_request.status.lower()} request",
            status=ride_request.status,
        )
    ride_request.status = target
    ride_request.save(update_fields=['status', 'updated_at'])
    logger.info("Ride request %s -> %s by passenger %s", ride_request.id, target, passenger_id)
    return ride_request


@transaction.atomic
def cancel_ride_request(request_id: int, passenger_id: int) -> RideRequestResult:
    """Withdraw an ACTIVE request."""
    ride_request = _close_request(request_id, passenger_id, RideRequestStatus.CANCELLED, "cancel")
    return RideRequestResult(ride_request=ride_request, message="Ride request cancelled successfully")


@transaction.atomic
def fulfill_ride_request(request_id: int, passenger_id: int) -> RideRequestResult:
    """
    Mark an ACTIVE request as fulfilled after the passenger booked a ride.

    Bookkeeping only: the booking itself is what moves seats.
    """
    ride_request = _close_request(request_id, passenger_id, RideRequestStatus.FULFILLED, "fulfill")
    return RideRequestResult(ride_request=ride_request, message="Ride request marked as fulfilled")


def find_matches(request_id: int, passenger_id: int) -> MatchResult:
    """
    Scheduled rides that fit the request.

    Route substrings match, departure falls inside the request's window on its
    day, and enough seats are open. Earliest departure first.
    """
    sweep_expired()
    ride_request = RideRequest.objects.filter(pk=request_id).first()
    if ride_request is None:
        raise NotFoundError("Ride request not found")
    if ride_request.passenger_id != passenger_id:
        raise NotOwnerError("You can only check matches for your own requests")

    rides = list(
        Ride.objects.select_related('driver__user')
        .filter(
            status=RideStatus.SCHEDULED,
            origin__icontains=ride_request.origin,
            destination__icontains=ride_request.destination,
            departure_date=ride_request.earliest_date,
            departure_at__gte=ride_request.window_start,
            departure_at__lte=ride_request.window_end,
            available_seats__gte=ride_request.seats_needed,
        )
        .order_by('departure_at')
    )
    return MatchResult(ride_request=ride_request, rides=rides)


# ===================== Queries =====================

def get_my_ride_requests(passenger_id: int, status: Optional[str] = None) -> List[RideRequest]:
    sweep_expired()
    requests = RideRequest.objects.filter(passenger_id=passenger_id)
    if status:
        requests = requests.filter(status=status)
    return list(requests.order_by('-created_at'))


def get_active_ride_requests(
    origin: Optional[str] = None,
    destination: Optional[str] = None,
    on_date: Optional[date] = None,
) -> List[RideRequest]:
    """ACTIVE requests for drivers to browse, newest first."""
    sweep_expired()
    requests = RideRequest.objects.select_related('passenger').filter(
        status=RideRequestStatus.ACTIVE,
        expires_at__gt=timezone.now(),
    )
    if origin:
        requests = requests.filter(origin__icontains=origin)
    if destination:
        requests = requests.filter(destination__icontains=destination)
    if on_date:
        requests = requests.filter(earliest_date=on_date)
    return list(requests.order_by('-created_at'))


def get_ride_request(request_id: int) -> RideRequest:
    sweep_expired()
    try:
        return RideRequest.objects.select_related('passenger').get(pk=request_id)
    except RideRequest.DoesNotExist:
        raise NotFoundError("Ride request not found")
