from django.db import models
from django.conf import settings
from django.db.models import F, Q

from common.utils import combine_departure


class RideStatus(models.TextChoices):
    SCHEDULED = 'SCHEDULED', 'Scheduled'
    STARTED = 'STARTED', 'Started'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class BookingStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    CONFIRMED = 'CONFIRMED', 'Confirmed'
    CANCELLED = 'CANCELLED', 'Cancelled'
    COMPLETED = 'COMPLETED', 'Completed'


class RideRequestStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    FULFILLED = 'FULFILLED', 'Fulfilled'
    CANCELLED = 'CANCELLED', 'Cancelled'
    EXPIRED = 'EXPIRED', 'Expired'


# Legal forward transitions. Anything missing here is rejected.
RIDE_TRANSITIONS = {
    RideStatus.SCHEDULED: {RideStatus.STARTED, RideStatus.CANCELLED},
    RideStatus.STARTED: {RideStatus.COMPLETED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}

BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED, BookingStatus.COMPLETED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}

RIDE_REQUEST_TRANSITIONS = {
    RideRequestStatus.ACTIVE: {
        RideRequestStatus.FULFILLED,
        RideRequestStatus.CANCELLED,
        RideRequestStatus.EXPIRED,
    },
    RideRequestStatus.FULFILLED: set(),
    RideRequestStatus.CANCELLED: set(),
    RideRequestStatus.EXPIRED: set(),
}

# Bookings that hold seats against their ride
SEAT_HOLDING_STATUSES = [BookingStatus.PENDING, BookingStatus.CONFIRMED]


class Ride(models.Model):
    """A driver-posted trip with a fixed seat capacity"""

    driver = models.ForeignKey(
        'drivers.DriverProfile',
        on_delete=models.CASCADE,
        related_name='rides'
    )

    origin = models.CharField(max_length=100)
    destination = models.CharField(max_length=100)

    # Clients send a day and a time-of-day; departure_at is the combined
    # timestamp every comparison runs against. Kept in sync in save().
    departure_date = models.DateField()
    departure_time = models.TimeField()
    departure_at = models.DateTimeField(db_index=True)

    available_seats = models.PositiveSmallIntegerField()
    total_seats = models.PositiveSmallIntegerField()
    fare = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    status = models.CharField(max_length=10, choices=RideStatus.choices, default=RideStatus.SCHEDULED)
    is_suspicious = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'rides'
        ordering = ['departure_at']
        indexes = [
            models.Index(fields=['status', 'departure_date'], name='ride_status_date_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(available_seats__gte=0) & Q(available_seats__lte=F('total_seats')),
                name='ride_available_seats_within_capacity',
            ),
        ]

    def save(self, *args, **kwargs):
        self.departure_at = combine_departure(self.departure_date, self.departure_time)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and (
            'departure_date' in update_fields or 'departure_time' in update_fields
        ):
            kwargs['update_fields'] = set(update_fields) | {'departure_at'}
        super().save(*args, **kwargs)

    def can_transition_to(self, target):
        try:
            target = RideStatus(target)
        except ValueError:
            return False
        return target in RIDE_TRANSITIONS[RideStatus(self.status)]

    def __str__(self):
        return f"Ride #{self.id} {self.origin} -> {self.destination} ({self.status})"


class Booking(models.Model):
    """A passenger's seat reservation against a Ride"""

    ride = models.ForeignKey(Ride, on_delete=models.CASCADE, related_name='bookings')
    passenger = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='bookings'
    )

    seats_booked = models.PositiveSmallIntegerField()
    # Snapshot of ride.fare * seats_booked at creation time
    fare = models.DecimalField(max_digits=10, decimal_places=2)

    status = models.CharField(max_length=10, choices=BookingStatus.choices, default=BookingStatus.PENDING)
    rejection_reason = models.CharField(max_length=500, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bookings'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['ride', 'passenger', 'status'], name='booking_ride_passenger_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(seats_booked__gte=1), name='booking_seats_booked_positive'),
        ]

    def can_transition_to(self, target):
        try:
            target = BookingStatus(target)
        except ValueError:
            return False
        return target in BOOKING_TRANSITIONS[BookingStatus(self.status)]

    def __str__(self):
        return f"Booking #{self.id} - Ride {self.ride_id} - {self.passenger} - {self.status}"


class RideRequest(models.Model):
    """A passenger's open solicitation for a ride on a given day and window"""

    passenger = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='ride_requests'
    )

    origin = models.CharField(max_length=100)
    destination = models.CharField(max_length=100)

    earliest_date = models.DateField()
    earliest_time = models.TimeField()
    latest_time = models.TimeField()
    # Combined window bounds on earliest_date, kept in sync in save()
    window_start = models.DateTimeField()
    window_end = models.DateTimeField()

    seats_needed = models.PositiveSmallIntegerField(default=1)
    offer_per_seat = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    status = models.CharField(
        max_length=10,
        choices=RideRequestStatus.choices,
        default=RideRequestStatus.ACTIVE
    )
    expires_at = models.DateTimeField(db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'ride_requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'expires_at'], name='ride_request_status_exp_idx'),
        ]

    def save(self, *args, **kwargs):
        self.window_start = combine_departure(self.earliest_date, self.earliest_time)
        self.window_end = combine_departure(self.earliest_date, self.latest_time)
        super().save(*args, **kwargs)

    def can_transition_to(self, target):
        try:
            target = RideRequestStatus(target)
        except ValueError:
            return False
        return target in RIDE_REQUEST_TRANSITIONS[RideRequestStatus(self.status)]

    def __str__(self):
        return f"RideRequest #{self.id} - {self.passenger} - {self.status}"


class Review(models.Model):
    """One review per completed booking, written by the passenger about the driver"""

    booking = models.OneToOneField(Booking, on_delete=models.CASCADE, related_name='review')
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reviews_given'
    )
    reviewee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reviews_received'
    )

    rating = models.PositiveSmallIntegerField()
    tags = models.JSONField(default=list, blank=True)
    comment = models.CharField(max_length=250, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'reviews'
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=Q(rating__gte=1) & Q(rating__lte=5),
                name='review_rating_between_1_and_5',
            ),
        ]

    def __str__(self):
        return f"Review #{self.id} - Booking {self.booking_id} - {self.rating}/5"
