# passengers/views/ride_requests.py

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from rides.serializers import RideRequestSerializer, RideSerializer
from services import matching
from ..serializers import CreateRideRequestSerializer


class RideRequestListCreateView(APIView):
    """
    GET  -> the passenger's ride requests (?status=ACTIVE|EXPIRED|...)
    POST -> post a ride request for a day and departure window
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        request_status = request.query_params.get("status")
        ride_requests = matching.get_my_ride_requests(
            request.user.id, request_status.upper() if request_status else None
        )
        return Response({
            "count": len(ride_requests),
            "ride_requests": RideRequestSerializer(ride_requests, many=True).data,
        })

    def post(self, request):
        serializer = CreateRideRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = matching.create_ride_request(request.user.id, **serializer.validated_data)

        return Response({
            "message": result.message,
            "ride_request": RideRequestSerializer(result.ride_request).data,
        }, status=status.HTTP_201_CREATED)


class RideRequestCancelView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, request_id: int):
        result = matching.cancel_ride_request(request_id, request.user.id)
        return Response({
            "message": result.message,
            "ride_request": RideRequestSerializer(result.ride_request).data,
        })


class RideRequestFulfillView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, request_id: int):
        result = matching.fulfill_ride_request(request_id, request.user.id)
        return Response({
            "message": result.message,
            "ride_request": RideRequestSerializer(result.ride_request).data,
        })


class RideRequestMatchesView(APIView):
    """
    GET: scheduled rides fitting one of the passenger's requests,
    earliest departure first.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, request_id: int):
        result = matching.find_matches(request_id, request.user.id)
        return Response({
            "ride_request": RideRequestSerializer(result.ride_request).data,
            "total_matches": result.total_matches,
            "rides": RideSerializer(result.rides, many=True).data,
        })
