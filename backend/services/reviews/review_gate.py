"""
Review gate: one review per completed booking.

Only the passenger of a COMPLETED booking may review it, exactly once.
The reviewee is the ride's driver, whose stored average rating is refreshed
after every new review.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count

from accounts.models import User
from rides.models import Booking, BookingStatus, Review
from services.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    NotOwnerError,
)

logger = logging.getLogger(__name__)


def check_can_review(user_id: int, booking_id: int) -> Dict[str, Any]:
    booking = Booking.objects.filter(pk=booking_id).first()
    if booking is None:
        raise NotFoundError("Booking not found")

    if booking.passenger_id != user_id:
        return {'can_review': False, 'reason': 'Not the passenger'}
    if booking.status != BookingStatus.COMPLETED:
        return {'can_review': False, 'reason': 'Ride not completed'}
    if Review.objects.filter(booking=booking).exists():
        return {'can_review': False, 'reason': 'Already reviewed'}
    return {'can_review': True}


@transaction.atomic
def create_review(
    reviewer_id: int,
    booking_id: int,
    rating: int,
    tags: Optional[List[str]] = None,
    comment: str = "",
) -> Review:
    booking = (
        Booking.objects.select_for_update(of=("self",))
        .select_related('ride__driver')
        .filter(pk=booking_id)
        .first()
    )
    if booking is None:
        raise NotFoundError("Booking not found")
    if booking.passenger_id != reviewer_id:
        raise NotOwnerError("Only the passenger can review this ride")
    if booking.status != BookingStatus.COMPLETED:
        raise InvalidStateError("Ride must be completed before reviewing", status=booking.status)
    if Review.objects.filter(booking=booking).exists():
        raise ConflictError("You have already reviewed this booking")

    reviewee_id = booking.ride.driver.user_id
    try:
        with transaction.atomic():
            review = Review.objects.create(
                booking=booking,
                reviewer_id=reviewer_id,
                reviewee_id=reviewee_id,
                rating=rating,
                tags=tags or [],
                comment=comment or "",
            )
    except IntegrityError:
        raise ConflictError("You have already reviewed this booking")

    stats = get_user_review_stats(reviewee_id)
    User.objects.filter(pk=reviewee_id).update(rating=stats['average_rating'])

    logger.info("Review %s for booking %s (%s/5) by user %s", review.id, booking_id, rating, reviewer_id)
    return review


def get_user_review_stats(user_id: int) -> Dict[str, Any]:
    """Totals, one-decimal average and 1..5 distribution of reviews received."""
    received = Review.objects.filter(reviewee_id=user_id)
    summary = received.aggregate(total=Count('id'), average=Avg('rating'))

    distribution = {score: 0 for score in range(1, 6)}
    for row in received.order_by().values('rating').annotate(n=Count('id')):
        distribution[row['rating']] = row['n']

    average = Decimal(str(summary['average'] or 0)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)
    return {
        'total_reviews': summary['total'],
        'average_rating': average,
        'rating_distribution': distribution,
    }


# ===================== Queries =====================

def get_my_given_reviews(user_id: int) -> List[Review]:
    """Reviews the user has written, newest first."""
    return list(
        Review.objects.filter(reviewer_id=user_id)
        .select_related('reviewee', 'booking__ride')
        .order_by('-created_at')
    )


def get_user_reviews(user_id: int) -> List[Review]:
    """Reviews the user has received, newest first."""
    return list(
        Review.objects.filter(reviewee_id=user_id)
        .select_related('reviewer')
        .order_by('-created_at')
    )


def get_booking_review(booking_id: int, user_id: int) -> Review:
    """
    The review left on a booking.

    Visible to the booking's passenger and the ride's driver only.

    Raises:
        NotFoundError: booking does not exist, or it has no review yet
        ForbiddenError: caller is neither the passenger nor the driver
    """
    booking = Booking.objects.select_related('ride__driver').filter(pk=booking_id).first()
    if booking is None:
        raise NotFoundError("Booking not found")
    if user_id not in (booking.passenger_id, booking.ride.driver.user_id):
        raise ForbiddenError("Access denied")

    review = Review.objects.select_related('reviewer').filter(booking=booking).first()
    if review is None:
        raise NotFoundError("Review not found for this booking")
    return review
