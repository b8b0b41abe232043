from rest_framework import serializers

from accounts.serializers import UserBasicSerializer
from drivers.serializers import DriverBasicSerializer
from .models import Booking, Review, Ride, RideRequest


class RideSerializer(serializers.ModelSerializer):
    """Serializer for posted rides"""
    driver = DriverBasicSerializer(read_only=True)
    departure_time = serializers.TimeField(format='%H:%M', read_only=True)

    class Meta:
        model = Ride
        fields = ['id', 'driver', 'origin', 'destination', 'departure_date', 'departure_time',
                  'departure_at', 'available_seats', 'total_seats', 'fare', 'status',
                  'created_at', 'updated_at']
        read_only_fields = fields


class RideBasicSerializer(serializers.ModelSerializer):
    """Ride summary embedded in booking payloads"""
    departure_time = serializers.TimeField(format='%H:%M', read_only=True)
    driver = DriverBasicSerializer(read_only=True)

    class Meta:
        model = Ride
        fields = ['id', 'origin', 'destination', 'departure_date', 'departure_time', 'status', 'driver']
        read_only_fields = fields


class BookingSerializer(serializers.ModelSerializer):
    """Serializer for bookings"""
    ride = RideBasicSerializer(read_only=True)
    passenger = UserBasicSerializer(read_only=True)

    class Meta:
        model = Booking
        fields = ['id', 'ride', 'passenger', 'seats_booked', 'fare', 'status',
                  'rejection_reason', 'created_at', 'updated_at']
        read_only_fields = fields


class RideRequestSerializer(serializers.ModelSerializer):
    """Serializer for ride requests"""
    passenger = UserBasicSerializer(read_only=True)
    earliest_time = serializers.TimeField(format='%H:%M', read_only=True)
    latest_time = serializers.TimeField(format='%H:%M', read_only=True)

    class Meta:
        model = RideRequest
        fields = ['id', 'passenger', 'origin', 'destination', 'earliest_date', 'earliest_time',
                  'latest_time', 'seats_needed', 'offer_per_seat', 'status', 'expires_at',
                  'created_at']
        read_only_fields = fields


class ReviewSerializer(serializers.ModelSerializer):
    reviewer = UserBasicSerializer(read_only=True)

    class Meta:
        model = Review
        fields = ['id', 'booking', 'reviewer', 'reviewee', 'rating', 'tags', 'comment', 'created_at']
        read_only_fields = fields


class GivenReviewSerializer(serializers.ModelSerializer):
    """A review as its author sees it: who it was for and on which trip"""
    reviewee = UserBasicSerializer(read_only=True)
    origin = serializers.CharField(source='booking.ride.origin', read_only=True)
    destination = serializers.CharField(source='booking.ride.destination', read_only=True)
    departure_date = serializers.DateField(source='booking.ride.departure_date', read_only=True)

    class Meta:
        model = Review
        fields = ['id', 'booking', 'reviewee', 'origin', 'destination', 'departure_date',
                  'rating', 'tags', 'comment', 'created_at']
        read_only_fields = fields


class SearchRidesSerializer(serializers.Serializer):
    """Query parameters for ride search"""
    origin = serializers.CharField(max_length=100)
    destination = serializers.CharField(max_length=100)
    departure_date = serializers.DateField()
    seats = serializers.IntegerField(min_value=1, default=1)
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, required=False)


class BrowseSerializer(serializers.Serializer):
    origin = serializers.CharField(max_length=100, required=False)
    destination = serializers.CharField(max_length=100, required=False)
    date = serializers.DateField(required=False)
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, required=False)
