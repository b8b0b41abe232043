# passengers/views/bookings.py

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from rides.serializers import BookingSerializer
from services import booking
from ..serializers import CheckEligibilitySerializer, CreateBookingSerializer


class BookingEligibilityView(APIView):
    """
    POST: preview whether a booking would go through.

    Advisory only; the booking call re-checks everything.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CheckEligibilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        verdict = booking.check_eligibility(
            request.user.id,
            serializer.validated_data["ride_id"],
            serializer.validated_data["seats_needed"],
        )

        if not verdict.eligible:
            return Response({"eligible": False, "reason": verdict.reason})
        return Response({"eligible": True, "ride": verdict.ride})


class BookingListCreateView(APIView):
    """
    GET  -> the passenger's bookings (?status=PENDING|CONFIRMED|...)
    POST -> book seats on a ride
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        booking_status = request.query_params.get("status")
        bookings = booking.get_my_bookings(
            request.user.id, booking_status.upper() if booking_status else None
        )
        return Response({
            "count": len(bookings),
            "bookings": BookingSerializer(bookings, many=True).data,
        })

    def post(self, request):
        serializer = CreateBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = booking.create_booking(
            request.user.id,
            serializer.validated_data["ride_id"],
            serializer.validated_data["seats_booked"],
        )

        return Response({
            "message": result.message,
            "booking": BookingSerializer(result.booking).data,
        }, status=status.HTTP_201_CREATED)


class BookingDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, booking_id: int):
        found = booking.get_booking(booking_id, request.user.id)
        return Response(BookingSerializer(found).data)


class BookingCancelView(APIView):
    """
    POST: Passenger cancels a booking.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, booking_id: int):
        result = booking.cancel_booking(booking_id, request.user.id)
        return Response({
            "message": result.message,
            "booking": BookingSerializer(result.booking).data,
        })


class BookingStatsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(booking.get_passenger_booking_stats(request.user.id))
