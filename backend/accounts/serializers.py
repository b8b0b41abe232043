from rest_framework import serializers
from django.contrib.auth import authenticate
from .models import User
from drivers.models import DriverProfile


class UserSerializer(serializers.ModelSerializer):

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "role",
            "phone_number",
            "completed_rides",
            "rating",
        ]
        read_only_fields = ["id", "role", "completed_rides", "rating"]


class UserBasicSerializer(serializers.ModelSerializer):
    """
    Lite version of user info embedded in ride, booking and review payloads.
    """
    class Meta:
        model = User
        fields = ["id", "username", "phone_number", "rating"]


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        user = authenticate(username=data["username"], password=data["password"])
        if not user:
            raise serializers.ValidationError("Invalid username or password")
        return user


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=6)
    vehicle_number = serializers.CharField(required=False, max_length=20)
    vehicle_model = serializers.CharField(required=False, allow_blank=True, max_length=100)
    number_of_seats = serializers.IntegerField(required=False, min_value=1, max_value=8)

    class Meta:
        model = User
        fields = [
            'username', 'password', 'email', 'role', 'phone_number',
            'vehicle_number', 'vehicle_model', 'number_of_seats',
        ]

    def validate_email(self, value):
        if value and User.objects.filter(email=value).exists():
            raise serializers.ValidationError("Email already exists")
        return value

    def validate_vehicle_number(self, value):
        if DriverProfile.objects.filter(vehicle_number=value).exists():
            raise serializers.ValidationError("Vehicle number already registered")
        return value

    def validate(self, data):
        # If registering as driver, vehicle_number is required
        if data.get('role') == 'driver' and not data.get('vehicle_number'):
            raise serializers.ValidationError({
                'vehicle_number': 'Vehicle number is required for drivers'
            })
        return data

    def create(self, validated_data):
        vehicle = {
            key: validated_data.pop(key)
            for key in ('vehicle_number', 'vehicle_model', 'number_of_seats')
            if key in validated_data
        }

        user = User.objects.create_user(
            username=validated_data['username'],
            email=validated_data.get('email', ''),
            password=validated_data['password'],
            role=validated_data.get('role', 'passenger'),
            phone_number=validated_data.get('phone_number', ''),
        )

        # Driver profiles start PENDING until a moderator verifies them
        if user.role == 'driver':
            DriverProfile.objects.create(user=user, **vehicle)

        return user
