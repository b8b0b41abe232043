from rest_framework import serializers
from drivers.models import DriverProfile
from accounts.serializers import UserSerializer

HHMM_FORMATS = ['%H:%M', '%H:%M:%S']


class DriverProfileSerializer(serializers.ModelSerializer):
    """
    Full driver profile serializer
    """
    user = UserSerializer(read_only=True)

    class Meta:
        model = DriverProfile
        fields = [
            "id",
            "user",
            "vehicle_number",
            "vehicle_model",
            "number_of_seats",
            "verification_status",
            "rejection_reason",
        ]
        read_only_fields = ["id", "verification_status", "rejection_reason"]
        extra_kwargs = {
            "number_of_seats": {"min_value": 1, "max_value": 8},
        }


class DriverBasicSerializer(serializers.ModelSerializer):
    """
    Lite version of driver info for ride details (sent to passengers).
    """
    username = serializers.CharField(source="user.username", read_only=True)
    phone_number = serializers.CharField(source="user.phone_number", read_only=True)
    rating = serializers.DecimalField(source="user.rating", max_digits=2, decimal_places=1, read_only=True)

    class Meta:
        model = DriverProfile
        fields = [
            "id",
            "username",
            "phone_number",
            "rating",
            "vehicle_number",
            "vehicle_model",
        ]


class CreateRideSerializer(serializers.Serializer):
    origin = serializers.CharField(max_length=100)
    destination = serializers.CharField(max_length=100)
    departure_date = serializers.DateField()
    departure_time = serializers.TimeField(input_formats=HHMM_FORMATS)
    available_seats = serializers.IntegerField(min_value=1)
    fare = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)


class UpdateRideSerializer(serializers.Serializer):
    """Partial edit of a scheduled ride; every field optional."""
    departure_date = serializers.DateField(required=False)
    departure_time = serializers.TimeField(input_formats=HHMM_FORMATS, required=False)
    available_seats = serializers.IntegerField(min_value=0, required=False)
    fare = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)


class RideStatusSerializer(serializers.Serializer):
    status = serializers.CharField()

    def validate_status(self, value):
        # Case-insensitive; the transition table decides legality
        return value.upper()


class RejectBookingSerializer(serializers.Serializer):
    rejection_reason = serializers.CharField(max_length=500, required=False, allow_blank=True)
