"""Fixtures shared by the rides test modules."""

from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from accounts.models import User
from drivers.models import DriverProfile
from rides.models import Booking, BookingStatus, Ride, RideStatus


def make_passenger(username, **extra):
    return User.objects.create_user(
        username=username,
        password='pass1234',
        role='passenger',
        phone_number=extra.pop('phone_number', '9000000000'),
        **extra
    )


def make_driver(username, seats=4, verified=True):
    user = User.objects.create_user(
        username=username,
        password='driver1234',
        role='driver',
        phone_number='9100000000',
    )
    profile = DriverProfile.objects.create(
        user=user,
        vehicle_number=f'MH-{username.upper()}',
        number_of_seats=seats,
        verification_status=(
            DriverProfile.VerificationStatus.VERIFIED
            if verified else DriverProfile.VerificationStatus.PENDING
        ),
    )
    return user, profile


def slot(delta):
    """(date, time) of now + delta in the current timezone."""
    moment = timezone.localtime() + delta
    return moment.date(), moment.time().replace(microsecond=0)


def make_ride(profile, ahead=timedelta(days=2), seats=4, total=None,
              fare=Decimal('100.00'), status=RideStatus.SCHEDULED, **fields):
    if 'departure_date' not in fields:
        fields['departure_date'], fields['departure_time'] = slot(ahead)
    return Ride.objects.create(
        driver=profile,
        origin=fields.pop('origin', 'Pune Station'),
        destination=fields.pop('destination', 'Mumbai Central'),
        available_seats=seats,
        total_seats=total if total is not None else profile.number_of_seats,
        fare=fare,
        status=status,
        **fields
    )


def make_booking(ride, passenger, seats=1, status=BookingStatus.PENDING):
    """Insert a booking and take its seats off the ride, as create_booking would."""
    ride.available_seats -= seats
    ride.save(update_fields=['available_seats'])
    return Booking.objects.create(
        ride=ride,
        passenger=passenger,
        seats_booked=seats,
        fare=ride.fare * seats,
        status=status,
    )
