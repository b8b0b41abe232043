# passengers/views/reviews.py

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from rides.serializers import GivenReviewSerializer, ReviewSerializer
from services import reviews
from ..serializers import CreateReviewSerializer


class ReviewCreateView(APIView):
    """
    POST: review the driver of a completed booking (once per booking).
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CreateReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        review = reviews.create_review(
            request.user.id,
            data["booking_id"],
            data["rating"],
            tags=data.get("tags"),
            comment=data.get("comment", ""),
        )
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


class CanReviewView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, booking_id: int):
        return Response(reviews.check_can_review(request.user.id, booking_id))


class UserReviewStatsView(APIView):
    """GET: review totals and distribution for any user."""
    permission_classes = [IsAuthenticated]

    def get(self, request, user_id: int):
        return Response(reviews.get_user_review_stats(user_id))


class MyGivenReviewsView(APIView):
    """GET: reviews written by the current user."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        given = reviews.get_my_given_reviews(request.user.id)
        return Response({
            "count": len(given),
            "reviews": GivenReviewSerializer(given, many=True).data,
        })


class UserReviewsView(APIView):
    """GET: reviews received by any user."""
    permission_classes = [IsAuthenticated]

    def get(self, request, user_id: int):
        received = reviews.get_user_reviews(user_id)
        return Response({
            "count": len(received),
            "reviews": ReviewSerializer(received, many=True).data,
        })


class BookingReviewView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, booking_id: int):
        review = reviews.get_booking_review(booking_id, request.user.id)
        return Response(ReviewSerializer(review).data)
