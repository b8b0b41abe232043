from django.conf import settings
from rest_framework import serializers

HHMM_FORMATS = ['%H:%M', '%H:%M:%S']


class CheckEligibilitySerializer(serializers.Serializer):
    ride_id = serializers.IntegerField()
    seats_needed = serializers.IntegerField(min_value=1, default=1)


class CreateBookingSerializer(serializers.Serializer):
    """
    Expected body:
    {
        "ride_id": <int>,
        "seats_booked": <int >= 1>
    }
    """
    ride_id = serializers.IntegerField()
    seats_booked = serializers.IntegerField(min_value=1)


class CreateRideRequestSerializer(serializers.Serializer):
    """
    Validates a ride request posted by a passenger.

    Expected body:
    {
        "origin": "Pune",
        "destination": "Mumbai",
        "earliest_date": "2026-01-15",
        "earliest_time": "08:00",
        "latest_time": "11:30",
        "seats_needed": 2,
        "offer_per_seat": 350     // optional
    }

    Window ordering and past-time checks are left to the broker.
    """
    origin = serializers.CharField(min_length=1, max_length=100)
    destination = serializers.CharField(min_length=1, max_length=100)
    earliest_date = serializers.DateField()
    earliest_time = serializers.TimeField(input_formats=HHMM_FORMATS)
    latest_time = serializers.TimeField(input_formats=HHMM_FORMATS)
    seats_needed = serializers.IntegerField(min_value=1, max_value=settings.RIDE_REQUEST_MAX_SEATS)
    offer_per_seat = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )


class CreateReviewSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()
    rating = serializers.IntegerField(min_value=1, max_value=5)
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50), required=False, default=list
    )
    comment = serializers.CharField(max_length=250, required=False, allow_blank=True, default="")
