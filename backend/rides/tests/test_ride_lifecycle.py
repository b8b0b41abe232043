from datetime import timedelta
from decimal import Decimal

from django.test import TestCase

from accounts.models import User
from rides.models import Booking, BookingStatus, Ride, RideStatus
from services import booking as seat_allocator
from services import ride_management
from services.exceptions import (
    ConflictError,
    InvalidInputError,
    InvalidStateError,
    NotEligibleError,
    NotFoundError,
    NotOwnerError,
)

from .helpers import make_booking, make_driver, make_passenger, make_ride, slot


class CreateRideTests(TestCase):
    def setUp(self):
        self.driver, self.profile = make_driver('driver_one', seats=4)
        self.day, self.time = slot(timedelta(days=1))

    def create(self, user, **overrides):
        kwargs = dict(
            origin='Pune', destination='Mumbai',
            departure_date=self.day, departure_time=self.time,
            available_seats=3, fare=Decimal('250.00'),
        )
        kwargs.update(overrides)
        return ride_management.create_ride(user.id, **kwargs)

    def test_verified_driver_publishes_scheduled_ride(self):
        ride = self.create(self.driver).ride

        self.assertEqual(ride.status, RideStatus.SCHEDULED)
        self.assertEqual(ride.total_seats, 4)
        self.assertEqual(ride.available_seats, 3)
        self.assertEqual(ride.departure_at.date(), self.day)

    def test_unverified_driver_is_not_eligible(self):
        pending_user, _ = make_driver('driver_two', verified=False)
        with self.assertRaises(NotEligibleError):
            self.create(pending_user)

    def test_passenger_is_not_eligible(self):
        with self.assertRaises(NotEligibleError):
            self.create(make_passenger('alice'))

    def test_seats_over_capacity(self):
        with self.assertRaises(InvalidInputError):
            self.create(self.driver, available_seats=5)

    def test_past_departure(self):
        day, time = slot(-timedelta(hours=1))
        with self.assertRaises(InvalidInputError):
            self.create(self.driver, departure_date=day, departure_time=time)

    def test_fare_defaults_to_zero(self):
        ride = self.create(self.driver, fare=None).ride
        self.assertEqual(ride.fare, Decimal('0'))


class UpdateRideTests(TestCase):
    def setUp(self):
        self.driver, self.profile = make_driver('driver_one', seats=4)
        self.other, _ = make_driver('driver_two')
        self.alice = make_passenger('alice')
        self.ride = make_ride(self.profile, seats=4, fare=Decimal('100.00'))

    def test_owner_only(self):
        with self.assertRaises(NotOwnerError):
            ride_management.update_ride_details(self.ride.id, self.other.id, {'fare': Decimal('1')})

    def test_only_while_scheduled(self):
        self.ride.status = RideStatus.STARTED
        self.ride.save(update_fields=['status'])
        with self.assertRaises(InvalidStateError):
            ride_management.update_ride_details(self.ride.id, self.driver.id, {'fare': Decimal('1')})

    def test_seats_cannot_overlap_reservations(self):
        make_booking(self.ride, self.alice, seats=3)
        with self.assertRaises(ConflictError):
            ride_management.update_ride_details(self.ride.id, self.driver.id, {'available_seats': 2})

        result = ride_management.update_ride_details(self.ride.id, self.driver.id, {'available_seats': 1})
        self.assertEqual(result.ride.available_seats, 1)

    def test_fare_edit_leaves_existing_bookings(self):
        booked = make_booking(self.ride, self.alice, seats=2)
        ride_management.update_ride_details(self.ride.id, self.driver.id, {'fare': Decimal('500.00')})

        booked.refresh_from_db()
        self.assertEqual(booked.fare, Decimal('200.00'))

    def test_departure_change_moves_combined_timestamp(self):
        day, time = slot(timedelta(days=5))
        result = ride_management.update_ride_details(
            self.ride.id, self.driver.id, {'departure_date': day, 'departure_time': time}
        )

        stored = Ride.objects.get(pk=self.ride.pk)
        self.assertEqual(stored.departure_at, result.ride.departure_at)
        self.assertEqual(stored.departure_at.date(), day)

    def test_empty_patch_is_a_no_op(self):
        result = ride_management.update_ride_details(self.ride.id, self.driver.id, {'status': 'CANCELLED'})
        self.assertEqual(result.ride.status, RideStatus.SCHEDULED)


class RideStatusTests(TestCase):
    def setUp(self):
        self.driver, self.profile = make_driver('driver_one', seats=4)
        self.other, _ = make_driver('driver_two')
        self.alice = make_passenger('alice')
        self.bob = make_passenger('bob')
        self.ride = make_ride(self.profile, seats=4)

    def move(self, target, user=None):
        return ride_management.transition_ride_status(self.ride.id, (user or self.driver).id, target)

    def test_forward_path(self):
        self.assertEqual(self.move(RideStatus.STARTED).ride.status, RideStatus.STARTED)
        self.assertEqual(self.move(RideStatus.COMPLETED).ride.status, RideStatus.COMPLETED)

    def test_illegal_transitions(self):
        with self.assertRaises(InvalidStateError):
            self.move(RideStatus.COMPLETED)
        self.move(RideStatus.STARTED)
        with self.assertRaises(InvalidStateError):
            self.move(RideStatus.CANCELLED)
        with self.assertRaises(InvalidStateError):
            self.move(RideStatus.SCHEDULED)
        with self.assertRaises(InvalidStateError):
            self.move('FLYING')

    def test_terminal_states_stay_put(self):
        ride_management.cancel_ride(self.ride.id, self.driver.id)
        with self.assertRaises(InvalidStateError):
            self.move(RideStatus.STARTED)

    def test_owner_only(self):
        with self.assertRaises(NotOwnerError):
            self.move(RideStatus.STARTED, user=self.other)

    def test_missing_ride(self):
        with self.assertRaises(NotFoundError):
            ride_management.transition_ride_status(99999, self.driver.id, RideStatus.STARTED)

    def test_cancel_releases_all_held_seats(self):
        pending = make_booking(self.ride, self.alice, seats=1)
        confirmed = make_booking(self.ride, self.bob, seats=2, status=BookingStatus.CONFIRMED)

        result = ride_management.cancel_ride(self.ride.id, self.driver.id)

        self.assertEqual(result.extra['bookings_cancelled'], 2)
        self.assertEqual(result.ride.available_seats, 4)
        for booked in (pending, confirmed):
            booked.refresh_from_db()
            self.assertEqual(booked.status, BookingStatus.CANCELLED)

    def test_complete_settles_bookings_and_counters(self):
        pending = make_booking(self.ride, self.alice, seats=1)
        confirmed = make_booking(self.ride, self.bob, seats=2, status=BookingStatus.CONFIRMED)
        self.move(RideStatus.STARTED)

        result = self.move(RideStatus.COMPLETED)

        self.assertEqual(result.extra, {'bookings_cancelled': 1, 'bookings_completed': 1})
        pending.refresh_from_db()
        confirmed.refresh_from_db()
        self.assertEqual(pending.status, BookingStatus.CANCELLED)
        self.assertEqual(confirmed.status, BookingStatus.COMPLETED)
        self.assertEqual(User.objects.get(pk=self.bob.pk).completed_rides, 1)
        self.assertEqual(User.objects.get(pk=self.alice.pk).completed_rides, 0)
        self.assertEqual(User.objects.get(pk=self.driver.pk).completed_rides, 1)

        self.ride.refresh_from_db()
        self.assertEqual(self.ride.available_seats, 2)

    def test_seat_invariant_over_mixed_sequence(self):
        a = seat_allocator.create_booking(self.alice.id, self.ride.id, 2).booking
        seat_allocator.create_booking(self.bob.id, self.ride.id, 2)
        seat_allocator.reject_booking(a.id, self.driver.id)
        seat_allocator.create_booking(self.alice.id, self.ride.id, 1)

        self.ride.refresh_from_db()
        held = sum(
            b.seats_booked for b in Booking.objects.filter(ride=self.ride, status__in=[
                BookingStatus.PENDING, BookingStatus.CONFIRMED,
            ])
        )
        self.assertEqual(self.ride.available_seats + held, self.ride.total_seats)
        self.assertTrue(0 <= self.ride.available_seats <= self.ride.total_seats)


class BrowseRidesTests(TestCase):
    def setUp(self):
        self.driver, self.profile = make_driver('driver_one', seats=4)
        self.later = make_ride(self.profile, ahead=timedelta(days=3, hours=2), origin='Pune Station')
        self.sooner = make_ride(self.profile, ahead=timedelta(days=3), origin='pune airport')
        make_ride(self.profile, ahead=timedelta(days=3, hours=1), status=RideStatus.CANCELLED)
        make_ride(self.profile, ahead=-timedelta(hours=2))

    def test_upcoming_only_lists_future_scheduled(self):
        page = ride_management.get_upcoming_rides()
        self.assertEqual(page.rides, [self.sooner, self.later])
        self.assertEqual(page.total, 2)
        self.assertFalse(page.has_more)

    def test_upcoming_filters_case_insensitively(self):
        page = ride_management.get_upcoming_rides(origin='AIRPORT')
        self.assertEqual(page.rides, [self.sooner])

    def test_pagination(self):
        page = ride_management.get_upcoming_rides(page=1, limit=1)
        self.assertEqual(page.rides, [self.sooner])
        self.assertEqual(page.total_pages, 2)
        self.assertTrue(page.has_more)

    def test_search_by_day_and_seats(self):
        day = self.sooner.departure_date
        page = ride_management.search_rides('pune', 'mumbai', day, seats=4)
        self.assertIn(self.sooner, page.rides)

        page = ride_management.search_rides('pune', 'mumbai', day, seats=5)
        self.assertEqual(page.rides, [])

    def test_my_rides_requires_driver_profile(self):
        self.assertEqual(len(ride_management.get_my_rides(self.driver.id)), 4)
        self.assertEqual(len(ride_management.get_my_rides(self.driver.id, RideStatus.CANCELLED)), 1)
        with self.assertRaises(NotEligibleError):
            ride_management.get_my_rides(make_passenger('alice').id)
