"""Review gate - one review per completed booking."""

from .review_gate import (
    check_can_review,
    create_review,
    get_booking_review,
    get_my_given_reviews,
    get_user_review_stats,
    get_user_reviews,
)

__all__ = [
    "check_can_review",
    "create_review",
    "get_booking_review",
    "get_my_given_reviews",
    "get_user_review_stats",
    "get_user_reviews",
]
