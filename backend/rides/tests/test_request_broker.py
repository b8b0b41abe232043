from datetime import time, timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone

from rides.models import RideRequest, RideRequestStatus, RideStatus
from rides.tasks import expire_ride_requests_task
from services import matching
from services.exceptions import (
    ConflictError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    NotOwnerError,
)

from .helpers import make_driver, make_passenger, make_ride


def expire(ride_request):
    RideRequest.objects.filter(pk=ride_request.pk).update(
        expires_at=timezone.now() - timedelta(minutes=1)
    )


class CreateRideRequestTests(TestCase):
    def setUp(self):
        self.alice = make_passenger('alice')
        self.day = timezone.localdate() + timedelta(days=10)

    def post(self, **overrides):
        kwargs = dict(
            origin='Pune', destination='Mumbai', earliest_date=self.day,
            earliest_time=time(8, 0), latest_time=time(11, 0), seats_needed=2,
        )
        kwargs.update(overrides)
        return matching.create_ride_request(self.alice.id, **kwargs).ride_request

    def test_active_for_a_day(self):
        before = timezone.now()
        ride_request = self.post(offer_per_seat=Decimal('300'))

        self.assertEqual(ride_request.status, RideRequestStatus.ACTIVE)
        self.assertAlmostEqual(
            (ride_request.expires_at - before).total_seconds(), 24 * 3600, delta=60
        )
        self.assertLess(ride_request.window_start, ride_request.window_end)

    @override_settings(RIDE_REQUEST_TTL_HOURS=2)
    def test_ttl_is_configurable(self):
        ride_request = self.post()
        self.assertLess(ride_request.expires_at, timezone.now() + timedelta(hours=3))

    def test_window_must_be_ordered(self):
        with self.assertRaises(InvalidInputError):
            self.post(earliest_time=time(11, 0), latest_time=time(11, 0))
        with self.assertRaises(InvalidInputError):
            self.post(earliest_time=time(12, 0), latest_time=time(9, 0))

    def test_window_in_the_past(self):
        with self.assertRaises(InvalidInputError):
            self.post(earliest_date=timezone.localdate() - timedelta(days=1))

    def test_seat_bounds_and_offer(self):
        with self.assertRaises(InvalidInputError):
            self.post(seats_needed=0)
        with self.assertRaises(InvalidInputError):
            self.post(seats_needed=8)
        with self.assertRaises(InvalidInputError):
            self.post(offer_per_seat=Decimal('-1'))

    def test_duplicate_active_request_is_conflict(self):
        self.post()
        with self.assertRaises(ConflictError):
            self.post(earliest_time=time(9, 0))

        # A different day is a different request
        self.post(earliest_date=self.day + timedelta(days=1))

    def test_expired_request_does_not_block_a_new_one(self):
        expire(self.post())
        fresh = self.post()
        self.assertEqual(fresh.status, RideRequestStatus.ACTIVE)
        self.assertEqual(RideRequest.objects.filter(status=RideRequestStatus.EXPIRED).count(), 1)

    def test_unknown_passenger(self):
        with self.assertRaises(NotFoundError):
            matching.create_ride_request(
                99999, 'Pune', 'Mumbai', self.day, time(8, 0), time(9, 0), 1,
            )


class SweepTests(TestCase):
    def setUp(self):
        self.alice = make_passenger('alice')
        day = timezone.localdate() + timedelta(days=3)
        self.stale = matching.create_ride_request(
            self.alice.id, 'Pune', 'Mumbai', day, time(8, 0), time(10, 0), 1,
        ).ride_request
        self.live = matching.create_ride_request(
            self.alice.id, 'Pune', 'Nashik', day, time(8, 0), time(10, 0), 1,
        ).ride_request
        expire(self.stale)

    def test_sweep_is_idempotent(self):
        self.assertEqual(matching.sweep_expired(), 1)
        first = set(RideRequest.objects.filter(status=RideRequestStatus.EXPIRED).values_list('id', flat=True))

        self.assertEqual(matching.sweep_expired(), 0)
        second = set(RideRequest.objects.filter(status=RideRequestStatus.EXPIRED).values_list('id', flat=True))

        self.assertEqual(first, {self.stale.id})
        self.assertEqual(first, second)

    def test_reads_never_surface_expired_requests(self):
        active = matching.get_active_ride_requests()
        self.assertEqual(active, [self.live])

        mine = matching.get_my_ride_requests(self.alice.id, RideRequestStatus.ACTIVE)
        self.assertEqual(mine, [self.live])
        self.assertEqual(matching.get_ride_request(self.stale.id).status, RideRequestStatus.EXPIRED)

    def test_celery_task_and_command(self):
        self.assertEqual(expire_ride_requests_task.apply().get(), 1)

        out = StringIO()
        call_command('expire_ride_requests', stdout=out)
        self.assertIn('Expired 0 ride request(s).', out.getvalue())


class CloseRideRequestTests(TestCase):
    def setUp(self):
        self.alice = make_passenger('alice')
        self.bob = make_passenger('bob')
        day = timezone.localdate() + timedelta(days=3)
        self.ride_request = matching.create_ride_request(
            self.alice.id, 'Pune', 'Mumbai', day, time(8, 0), time(10, 0), 1,
        ).ride_request

    def test_cancel_then_cancel_again(self):
        result = matching.cancel_ride_request(self.ride_request.id, self.alice.id)
        self.assertEqual(result.ride_request.status, RideRequestStatus.CANCELLED)

        with self.assertRaises(InvalidStateError):
            matching.cancel_ride_request(self.ride_request.id, self.alice.id)
        with self.assertRaises(InvalidStateError):
            matching.fulfill_ride_request(self.ride_request.id, self.alice.id)

    def test_fulfill(self):
        result = matching.fulfill_ride_request(self.ride_request.id, self.alice.id)
        self.assertEqual(result.ride_request.status, RideRequestStatus.FULFILLED)

    def test_owner_only(self):
        with self.assertRaises(NotOwnerError):
            matching.cancel_ride_request(self.ride_request.id, self.bob.id)
        with self.assertRaises(NotOwnerError):
            matching.fulfill_ride_request(self.ride_request.id, self.bob.id)

    def test_expired_request_cannot_be_closed(self):
        expire(self.ride_request)
        with self.assertRaises(InvalidStateError):
            matching.fulfill_ride_request(self.ride_request.id, self.alice.id)


class FindMatchesTests(TestCase):
    def setUp(self):
        self.alice = make_passenger('alice')
        self.bob = make_passenger('bob')
        _, self.profile = make_driver('driver_one', seats=4)
        self.day = timezone.localdate() + timedelta(days=4)
        self.ride_request = matching.create_ride_request(
            self.alice.id, 'Pune', 'Mumbai', self.day, time(8, 0), time(11, 0), 2,
        ).ride_request

    def ride_at(self, hh, mm=0, **kwargs):
        return make_ride(self.profile, departure_date=self.day, departure_time=time(hh, mm), **kwargs)

    def test_window_status_seats_and_order(self):
        late = self.ride_at(10, 45)
        early = self.ride_at(8, 0)
        edge = self.ride_at(11, 0)
        self.ride_at(7, 59)
        self.ride_at(11, 1)
        self.ride_at(9, 0, seats=1)
        self.ride_at(9, 30, status=RideStatus.CANCELLED)
        self.ride_at(9, 30, destination='Nashik')
        make_ride(self.profile, departure_date=self.day + timedelta(days=1), departure_time=time(9, 0))

        result = matching.find_matches(self.ride_request.id, self.alice.id)

        self.assertEqual(result.rides, [early, late, edge])
        self.assertEqual(result.total_matches, 3)

    def test_route_is_substring_match(self):
        ride = self.ride_at(9, 0, origin='Pune Station', destination='Mumbai Central')
        result = matching.find_matches(self.ride_request.id, self.alice.id)
        self.assertEqual(result.rides, [ride])

    def test_owner_only(self):
        with self.assertRaises(NotOwnerError):
            matching.find_matches(self.ride_request.id, self.bob.id)

    def test_missing_request(self):
        with self.assertRaises(NotFoundError):
            matching.find_matches(99999, self.alice.id)
