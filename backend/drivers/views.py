from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from drivers.permissions import IsDriver
from drivers.serializers import (
    CreateRideSerializer,
    DriverProfileSerializer,
    RejectBookingSerializer,
    RideStatusSerializer,
    UpdateRideSerializer,
)
from rides.serializers import BookingSerializer, RideSerializer
from services import booking, ride_management


class DriverProfileView(APIView):
    """
    GET   -> the driver's profile and verification status
    PATCH -> edit vehicle details (verification stays with moderators)
    """
    permission_classes = [IsAuthenticated, IsDriver]

    def get(self, request):
        profile = ride_management.get_driver_profile(request.user.id)
        serializer = DriverProfileSerializer(profile, context={"request": request})
        return Response(serializer.data)

    def patch(self, request):
        profile = ride_management.get_driver_profile(request.user.id)
        serializer = DriverProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class DriverRidesView(APIView):
    """
    GET  -> rides posted by the driver (?status=SCHEDULED|STARTED|...)
    POST -> publish a new ride (verified drivers only)
    """
    permission_classes = [IsAuthenticated, IsDriver]

    def get(self, request):
        ride_status = request.query_params.get("status")
        rides = ride_management.get_my_rides(request.user.id, ride_status.upper() if ride_status else None)
        return Response({
            "count": len(rides),
            "rides": RideSerializer(rides, many=True).data,
        })

    def post(self, request):
        serializer = CreateRideSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ride_management.create_ride(request.user.id, **serializer.validated_data)

        return Response({
            "message": result.message,
            "ride": RideSerializer(result.ride).data,
        }, status=status.HTTP_201_CREATED)


class DriverRideDetailView(APIView):
    """
    GET   -> one of the driver's rides
    PATCH -> edit departure, seats or fare while the ride is scheduled
    """
    permission_classes = [IsAuthenticated, IsDriver]

    def get(self, request, ride_id: int):
        ride = ride_management.get_ride(ride_id)
        ride_management.ensure_owner(ride, request.user.id, "view")
        return Response(RideSerializer(ride).data)

    def patch(self, request, ride_id: int):
        serializer = UpdateRideSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = ride_management.update_ride_details(ride_id, request.user.id, serializer.validated_data)

        return Response({
            "message": result.message,
            "ride": RideSerializer(result.ride).data,
        })


class DriverRideStatusView(APIView):
    """
    PATCH: move the ride forward.

    Body: {"status": "STARTED" | "COMPLETED" | "CANCELLED"}
    """
    permission_classes = [IsAuthenticated, IsDriver]

    def patch(self, request, ride_id: int):
        serializer = RideStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ride_management.transition_ride_status(
            ride_id, request.user.id, serializer.validated_data["status"]
        )

        return Response({
            "message": result.message,
            "ride": RideSerializer(result.ride).data,
            **result.extra,
        })


class DriverCancelRideView(APIView):
    permission_classes = [IsAuthenticated, IsDriver]

    def post(self, request, ride_id: int):
        result = ride_management.cancel_ride(ride_id, request.user.id)
        return Response({
            "message": "Ride cancelled successfully",
            "ride": RideSerializer(result.ride).data,
            **result.extra,
        })


class DriverRideBookingsView(APIView):
    """GET: every booking on one of the driver's rides."""
    permission_classes = [IsAuthenticated, IsDriver]

    def get(self, request, ride_id: int):
        bookings = booking.get_ride_bookings(ride_id, request.user.id)
        return Response({
            "count": len(bookings),
            "bookings": BookingSerializer(bookings, many=True).data,
        })


class DriverPendingBookingsView(APIView):
    """GET: booking requests awaiting the driver's decision."""
    permission_classes = [IsAuthenticated, IsDriver]

    def get(self, request):
        pending = booking.get_pending_requests(request.user.id)
        return Response({
            "count": len(pending),
            "bookings": BookingSerializer(pending, many=True).data,
        })


class DriverAcceptBookingView(APIView):
    permission_classes = [IsAuthenticated, IsDriver]

    def post(self, request, booking_id: int):
        result = booking.accept_booking(booking_id, request.user.id)
        return Response({
            "message": result.message,
            "booking": BookingSerializer(result.booking).data,
        })


class DriverRejectBookingView(APIView):
    """
    POST: reject a pending booking and hand its seats back.

    Body (optional): {"rejection_reason": "<= 500 chars"}
    """
    permission_classes = [IsAuthenticated, IsDriver]

    def post(self, request, booking_id: int):
        serializer = RejectBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = booking.reject_booking(
            booking_id, request.user.id, serializer.validated_data.get("rejection_reason")
        )
        return Response({
            "message": result.message,
            "booking": BookingSerializer(result.booking).data,
        })


class DriverStatsView(APIView):
    permission_classes = [IsAuthenticated, IsDriver]

    def get(self, request):
        return Response({
            "bookings": booking.get_driver_booking_stats(request.user.id),
            "completed_rides": request.user.completed_rides,
            "rating": request.user.rating,
        })
