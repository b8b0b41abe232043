"""
Ride request brokering and matching service.

This module handles:
    - Posting ride requests (passenger)
    - Matching requests against scheduled rides
    - Cancelling/fulfilling requests
    - Expiring stale requests (sweep)
"""

from .request_broker import (
    MatchResult,
    RideRequestResult,
    sweep_expired,
    create_ride_request,
    cancel_ride_request,
    fulfill_ride_request,
    find_matches,
    get_my_ride_requests,
    get_active_ride_requests,
    get_ride_request,
)

__all__ = [
    "MatchResult",
    "RideRequestResult",
    "sweep_expired",
    "create_ride_request",
    "cancel_ride_request",
    "fulfill_ride_request",
    "find_matches",
    "get_my_ride_requests",
    "get_active_ride_requests",
    "get_ride_request",
]
