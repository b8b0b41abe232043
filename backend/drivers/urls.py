from django.urls import path
from .views import (
    DriverAcceptBookingView,
    DriverCancelRideView,
    DriverPendingBookingsView,
    DriverProfileView,
    DriverRejectBookingView,
    DriverRideBookingsView,
    DriverRideDetailView,
    DriverRidesView,
    DriverRideStatusView,
    DriverStatsView,
)

urlpatterns = [
    path("profile/", DriverProfileView.as_view(), name="driver-profile"),
    path("stats/", DriverStatsView.as_view(), name="driver-stats"),

    # Rides
    path("rides/", DriverRidesView.as_view(), name="driver-rides"),
    path("rides/<int:ride_id>/", DriverRideDetailView.as_view(), name="driver-ride-detail"),
    path("rides/<int:ride_id>/status/", DriverRideStatusView.as_view(), name="driver-ride-status"),
    path("rides/<int:ride_id>/cancel/", DriverCancelRideView.as_view(), name="driver-ride-cancel"),
    path("rides/<int:ride_id>/bookings/", DriverRideBookingsView.as_view(), name="driver-ride-bookings"),

    # Booking requests
    path("bookings/pending/", DriverPendingBookingsView.as_view(), name="driver-pending-bookings"),
    path("bookings/<int:booking_id>/accept/", DriverAcceptBookingView.as_view(), name="driver-accept-booking"),
    path("bookings/<int:booking_id>/reject/", DriverRejectBookingView.as_view(), name="driver-reject-booking"),
]
