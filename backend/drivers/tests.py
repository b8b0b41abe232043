from datetime import timedelta

from django.test import TestCase
from rest_framework.test import APIClient

from rides.models import Booking, BookingStatus, Ride, RideStatus
from rides.tests.helpers import make_booking, make_driver, make_passenger, make_ride, slot


class DriverRideViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.driver, self.profile = make_driver('driver_one', seats=4)
        self.client.force_authenticate(user=self.driver)

    def test_passengers_are_turned_away(self):
        self.client.force_authenticate(user=make_passenger('alice'))
        self.assertEqual(self.client.get('/api/driver/rides/').status_code, 403)

    def test_publish_ride(self):
        day, time = slot(timedelta(days=1))
        response = self.client.post('/api/driver/rides/', {
            'origin': 'Pune',
            'destination': 'Mumbai',
            'departure_date': day.isoformat(),
            'departure_time': time.strftime('%H:%M'),
            'available_seats': 3,
            'fare': '250.00',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['ride']['total_seats'], 4)
        self.assertEqual(response.data['ride']['status'], RideStatus.SCHEDULED)

    def test_unverified_driver_gets_403(self):
        pending_user, _ = make_driver('driver_two', verified=False)
        self.client.force_authenticate(user=pending_user)
        day, time = slot(timedelta(days=1))

        response = self.client.post('/api/driver/rides/', {
            'origin': 'Pune', 'destination': 'Mumbai',
            'departure_date': day.isoformat(), 'departure_time': time.strftime('%H:%M'),
            'available_seats': 1,
        }, format='json')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['error'], 'not_eligible')

    def test_bad_payload(self):
        response = self.client.post('/api/driver/rides/', {'origin': 'Pune', 'available_seats': 0}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_status_transitions(self):
        ride = make_ride(self.profile)
        url = f'/api/driver/rides/{ride.id}/status/'

        self.assertEqual(self.client.patch(url, {'status': 'started'}, format='json').status_code, 200)

        response = self.client.patch(url, {'status': 'CANCELLED'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'invalid_state')

    def test_cancel_ride_reports_released_bookings(self):
        ride = make_ride(self.profile)
        make_booking(ride, make_passenger('alice'), seats=2)

        response = self.client.post(f'/api/driver/rides/{ride.id}/cancel/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['bookings_cancelled'], 1)
        self.assertEqual(Ride.objects.get(pk=ride.pk).available_seats, 4)

    def test_update_conflict(self):
        ride = make_ride(self.profile)
        make_booking(ride, make_passenger('alice'), seats=3)

        response = self.client.patch(f'/api/driver/rides/{ride.id}/', {'available_seats': 2}, format='json')
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['error'], 'conflict')

    def test_other_drivers_ride(self):
        other_user, other_profile = make_driver('driver_two')
        ride = make_ride(other_profile)

        response = self.client.get(f'/api/driver/rides/{ride.id}/')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['error'], 'not_owner')


class DriverBookingViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.driver, self.profile = make_driver('driver_one', seats=4)
        self.client.force_authenticate(user=self.driver)
        self.ride = make_ride(self.profile)
        self.booking = make_booking(self.ride, make_passenger('alice'), seats=2)

    def test_pending_list_and_accept(self):
        response = self.client.get('/api/driver/bookings/pending/')
        self.assertEqual(response.data['count'], 1)

        response = self.client.post(f'/api/driver/bookings/{self.booking.id}/accept/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['booking']['status'], BookingStatus.CONFIRMED)

    def test_reject_restores_seats(self):
        response = self.client.post(
            f'/api/driver/bookings/{self.booking.id}/reject/',
            {'rejection_reason': 'Luggage space is full'},
            format='json',
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Ride.objects.get(pk=self.ride.pk).available_seats, 4)
        self.assertEqual(Booking.objects.get(pk=self.booking.pk).rejection_reason, 'Luggage space is full')

    def test_reject_reason_length(self):
        response = self.client.post(
            f'/api/driver/bookings/{self.booking.id}/reject/',
            {'rejection_reason': 'x' * 501},
            format='json',
        )
        self.assertEqual(response.status_code, 400)

    def test_stats_and_ride_bookings(self):
        response = self.client.get('/api/driver/stats/')
        self.assertEqual(response.data['bookings']['pending'], 1)

        response = self.client.get(f'/api/driver/rides/{self.ride.id}/bookings/')
        self.assertEqual(response.data['count'], 1)

    def test_profile(self):
        response = self.client.patch('/api/driver/profile/', {'vehicle_model': 'Swift Dzire'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['vehicle_model'], 'Swift Dzire')
        self.assertEqual(response.data['verification_status'], 'VERIFIED')
