# passengers/urls.py

from django.urls import path

from .views.bookings import (
    BookingCancelView,
    BookingDetailView,
    BookingEligibilityView,
    BookingListCreateView,
    BookingStatsView,
)
from .views.ride_requests import (
    RideRequestCancelView,
    RideRequestFulfillView,
    RideRequestListCreateView,
    RideRequestMatchesView,
)
from .views.reviews import (
    BookingReviewView,
    CanReviewView,
    MyGivenReviewsView,
    ReviewCreateView,
    UserReviewStatsView,
    UserReviewsView,
)

app_name = "passengers"

urlpatterns = [
    # BOOKINGS
    path("bookings/", BookingListCreateView.as_view(), name="bookings"),
    path("bookings/eligibility/", BookingEligibilityView.as_view(), name="booking-eligibility"),
    path("bookings/stats/", BookingStatsView.as_view(), name="booking-stats"),
    path("bookings/<int:booking_id>/", BookingDetailView.as_view(), name="booking-detail"),
    path("bookings/<int:booking_id>/cancel/", BookingCancelView.as_view(), name="booking-cancel"),

    # RIDE REQUESTS
    path("ride-requests/", RideRequestListCreateView.as_view(), name="ride-requests"),
    path("ride-requests/<int:request_id>/cancel/", RideRequestCancelView.as_view(), name="ride-request-cancel"),
    path("ride-requests/<int:request_id>/fulfill/", RideRequestFulfillView.as_view(), name="ride-request-fulfill"),
    path("ride-requests/<int:request_id>/matches/", RideRequestMatchesView.as_view(), name="ride-request-matches"),

    # REVIEWS
    path("reviews/", ReviewCreateView.as_view(), name="review-create"),
    path("reviews/mine/", MyGivenReviewsView.as_view(), name="my-reviews"),
    path("reviews/can-review/<int:booking_id>/", CanReviewView.as_view(), name="can-review"),
    path("reviews/bookings/<int:booking_id>/", BookingReviewView.as_view(), name="booking-review"),
    path("reviews/users/<int:user_id>/", UserReviewsView.as_view(), name="user-reviews"),
    path("reviews/users/<int:user_id>/stats/", UserReviewStatsView.as_view(), name="user-review-stats"),
]
