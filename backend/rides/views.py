from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated

from drivers.permissions import IsDriver
from services import matching, ride_management
from .serializers import (
    BrowseSerializer,
    RideRequestSerializer,
    RideSerializer,
    SearchRidesSerializer,
)


def _page_response(page):
    return {
        'rides': RideSerializer(page.rides, many=True).data,
        'total': page.total,
        'page': page.page,
        'total_pages': page.total_pages,
        'has_more': page.has_more,
    }


# ==================== Public Ride APIs ====================

@api_view(['GET'])
@permission_classes([AllowAny])
def upcoming_rides(request):
    """
    Browse scheduled rides that have not departed yet.

    Query: ?origin=&destination=&page=&limit=
    """
    serializer = BrowseSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    params = serializer.validated_data

    page = ride_management.get_upcoming_rides(
        origin=params.get('origin'),
        destination=params.get('destination'),
        page=params['page'],
        limit=params.get('limit'),
    )
    return Response(_page_response(page))


@api_view(['GET'])
@permission_classes([AllowAny])
def search_rides(request):
    """
    Search rides on a day with at least `seats` open.

    Query: ?origin=&destination=&departure_date=YYYY-MM-DD&seats=&page=&limit=
    """
    serializer = SearchRidesSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    page = ride_management.search_rides(**serializer.validated_data)
    return Response(_page_response(page))


@api_view(['GET'])
@permission_classes([AllowAny])
def ride_detail(request, ride_id):
    ride = ride_management.get_ride(ride_id)
    return Response(RideSerializer(ride).data)


# ==================== Driver Browse APIs ====================

@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDriver])
def active_ride_requests(request):
    """
    Passenger ride requests still looking for a ride.

    Query: ?origin=&destination=&date=YYYY-MM-DD
    """
    serializer = BrowseSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    params = serializer.validated_data

    ride_requests = matching.get_active_ride_requests(
        origin=params.get('origin'),
        destination=params.get('destination'),
        on_date=params.get('date'),
    )
    return Response({
        'count': len(ride_requests),
        'ride_requests': RideRequestSerializer(ride_requests, many=True).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ride_request_detail(request, request_id):
    ride_request = matching.get_ride_request(request_id)
    return Response(RideRequestSerializer(ride_request).data)
