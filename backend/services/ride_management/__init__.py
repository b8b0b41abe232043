"""
Ride management service - Core ride lifecycle operations.

This module handles:
    - Creating rides (verified drivers only)
    - Updating ride details while scheduled
    - Status transitions (start, complete, cancel)
    - Browsing and searching rides
"""

from .ride_lifecycle import (
    RideResult,
    RidePage,
    create_ride,
    update_ride_details,
    transition_ride_status,
    cancel_ride,
    get_ride,
    get_my_rides,
    search_rides,
    get_upcoming_rides,
    get_driver_profile,
    ensure_owner,
)

__all__ = [
    "RideResult",
    "RidePage",
    "create_ride",
    "update_ride_details",
    "transition_ride_status",
    "cancel_ride",
    "get_ride",
    "get_my_rides",
    "search_rides",
    "get_upcoming_rides",
    "get_driver_profile",
    "ensure_owner",
]
