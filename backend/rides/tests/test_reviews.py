from decimal import Decimal

from django.test import TestCase

from accounts.models import User
from rides.models import BookingStatus, Review
from services import reviews
from services.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    NotOwnerError,
)

from .helpers import make_booking, make_driver, make_passenger, make_ride


class ReviewGateTests(TestCase):
    def setUp(self):
        self.driver, self.profile = make_driver('driver_one')
        self.alice = make_passenger('alice')
        self.bob = make_passenger('bob')
        ride = make_ride(self.profile)
        self.completed = make_booking(ride, self.alice, status=BookingStatus.COMPLETED)
        self.completed_bob = make_booking(ride, self.bob, status=BookingStatus.COMPLETED)
        self.pending = make_booking(make_ride(self.profile), self.alice)

    def test_can_review_verdicts(self):
        self.assertEqual(reviews.check_can_review(self.alice.id, self.completed.id), {'can_review': True})
        self.assertFalse(reviews.check_can_review(self.bob.id, self.completed.id)['can_review'])
        self.assertEqual(
            reviews.check_can_review(self.alice.id, self.pending.id)['reason'], 'Ride not completed'
        )
        with self.assertRaises(NotFoundError):
            reviews.check_can_review(self.alice.id, 99999)

    def test_review_once_and_refresh_driver_rating(self):
        review = reviews.create_review(self.alice.id, self.completed.id, 5, tags=['punctual'], comment='Smooth')
        self.assertEqual(review.reviewee_id, self.driver.id)
        self.assertEqual(review.tags, ['punctual'])

        with self.assertRaises(ConflictError):
            reviews.create_review(self.alice.id, self.completed.id, 4)

        reviews.create_review(self.bob.id, self.completed_bob.id, 4)
        self.assertEqual(User.objects.get(pk=self.driver.pk).rating, Decimal('4.5'))

        stats = reviews.get_user_review_stats(self.driver.id)
        self.assertEqual(stats['total_reviews'], 2)
        self.assertEqual(stats['rating_distribution'][5], 1)
        self.assertEqual(stats['rating_distribution'][1], 0)

    def test_only_passenger_of_completed_booking(self):
        with self.assertRaises(NotOwnerError):
            reviews.create_review(self.bob.id, self.completed.id, 3)
        with self.assertRaises(InvalidStateError):
            reviews.create_review(self.alice.id, self.pending.id, 3)
        self.assertFalse(Review.objects.exists())

    def test_stats_for_user_without_reviews(self):
        stats = reviews.get_user_review_stats(self.alice.id)
        self.assertEqual(stats['total_reviews'], 0)
        self.assertEqual(stats['average_rating'], Decimal('0.0'))


class ReviewQueryTests(TestCase):
    def setUp(self):
        self.driver, self.profile = make_driver('driver_one')
        self.alice = make_passenger('alice')
        self.bob = make_passenger('bob')
        ride = make_ride(self.profile)
        self.booking = make_booking(ride, self.alice, status=BookingStatus.COMPLETED)
        self.unreviewed = make_booking(ride, self.bob, status=BookingStatus.COMPLETED)
        self.review = reviews.create_review(self.alice.id, self.booking.id, 4, tags=['quiet'])

    def test_given_and_received(self):
        given = reviews.get_my_given_reviews(self.alice.id)
        self.assertEqual([r.id for r in given], [self.review.id])
        self.assertEqual(given[0].booking.ride.origin, 'Pune Station')
        self.assertEqual(reviews.get_my_given_reviews(self.bob.id), [])

        received = reviews.get_user_reviews(self.driver.id)
        self.assertEqual([r.id for r in received], [self.review.id])
        self.assertEqual(received[0].tags, ['quiet'])
        self.assertEqual(reviews.get_user_reviews(self.alice.id), [])

    def test_booking_review_visible_to_passenger_and_driver(self):
        self.assertEqual(reviews.get_booking_review(self.booking.id, self.alice.id).id, self.review.id)
        self.assertEqual(reviews.get_booking_review(self.booking.id, self.driver.id).id, self.review.id)

    def test_booking_review_hidden_from_others(self):
        with self.assertRaises(ForbiddenError):
            reviews.get_booking_review(self.booking.id, self.bob.id)

    def test_booking_review_missing(self):
        with self.assertRaises(NotFoundError):
            reviews.get_booking_review(self.unreviewed.id, self.bob.id)
        with self.assertRaises(NotFoundError):
            reviews.get_booking_review(99999, self.alice.id)
