from datetime import time, timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from rides.models import BookingStatus, Ride, RideRequestStatus
from rides.tests.helpers import make_booking, make_driver, make_passenger, make_ride


class PassengerBookingViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.alice = make_passenger('alice')
        self.driver, self.profile = make_driver('driver_one', seats=4)
        self.ride = make_ride(self.profile)
        self.client.force_authenticate(user=self.alice)

    def test_eligibility_preview(self):
        response = self.client.post(
            '/api/passenger/bookings/eligibility/', {'ride_id': self.ride.id, 'seats_needed': 2}, format='json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['eligible'])

        response = self.client.post(
            '/api/passenger/bookings/eligibility/', {'ride_id': self.ride.id, 'seats_needed': 5}, format='json'
        )
        self.assertFalse(response.data['eligible'])

    def test_book_then_overbook(self):
        response = self.client.post(
            '/api/passenger/bookings/', {'ride_id': self.ride.id, 'seats_booked': 3}, format='json'
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['booking']['status'], BookingStatus.PENDING)

        self.client.force_authenticate(user=make_passenger('bob'))
        response = self.client.post(
            '/api/passenger/bookings/', {'ride_id': self.ride.id, 'seats_booked': 3}, format='json'
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['error'], 'conflict')
        self.assertEqual(response.data['available_seats'], 1)

    def test_zero_seats_rejected_by_payload_validation(self):
        response = self.client.post(
            '/api/passenger/bookings/', {'ride_id': self.ride.id, 'seats_booked': 0}, format='json'
        )
        self.assertEqual(response.status_code, 400)

    def test_booking_own_ride_is_forbidden(self):
        self.client.force_authenticate(user=self.driver)
        response = self.client.post(
            '/api/passenger/bookings/', {'ride_id': self.ride.id, 'seats_booked': 1}, format='json'
        )
        self.assertEqual(response.status_code, 403)

    def test_list_detail_cancel_and_stats(self):
        booking = make_booking(self.ride, self.alice, seats=2)

        response = self.client.get('/api/passenger/bookings/', {'status': 'pending'})
        self.assertEqual(response.data['count'], 1)

        response = self.client.get(f'/api/passenger/bookings/{booking.id}/')
        self.assertEqual(response.data['ride']['id'], self.ride.id)

        response = self.client.post(f'/api/passenger/bookings/{booking.id}/cancel/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Ride.objects.get(pk=self.ride.pk).available_seats, 4)

        response = self.client.get('/api/passenger/bookings/stats/')
        self.assertEqual(response.data['cancelled'], 1)

    def test_someone_elses_booking(self):
        booking = make_booking(self.ride, make_passenger('bob'))
        response = self.client.get(f'/api/passenger/bookings/{booking.id}/')
        self.assertEqual(response.status_code, 403)


class PassengerRideRequestViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.alice = make_passenger('alice')
        self.client.force_authenticate(user=self.alice)
        self.day = timezone.localdate() + timedelta(days=6)

    def post_request(self, **overrides):
        payload = {
            'origin': 'Pune',
            'destination': 'Mumbai',
            'earliest_date': self.day.isoformat(),
            'earliest_time': '08:00',
            'latest_time': '10:30',
            'seats_needed': 2,
        }
        payload.update(overrides)
        return self.client.post('/api/passenger/ride-requests/', payload, format='json')

    def test_create_list_and_match(self):
        response = self.post_request(offer_per_seat='300')
        self.assertEqual(response.status_code, 201)
        request_id = response.data['ride_request']['id']
        self.assertEqual(response.data['ride_request']['earliest_time'], '08:00')

        _, profile = make_driver('driver_one')
        ride = make_ride(profile, departure_date=self.day, departure_time=time(9, 15))

        response = self.client.get(f'/api/passenger/ride-requests/{request_id}/matches/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual([r['id'] for r in response.data['rides']], [ride.id])

        response = self.client.get('/api/passenger/ride-requests/', {'status': 'active'})
        self.assertEqual(response.data['count'], 1)

    def test_payload_constraints(self):
        self.assertEqual(self.post_request(seats_needed=8).status_code, 400)
        self.assertEqual(self.post_request(origin='').status_code, 400)
        self.assertEqual(self.post_request(origin='x' * 101).status_code, 400)
        self.assertEqual(self.post_request(earliest_time='8 am').status_code, 400)
        self.assertEqual(self.post_request(offer_per_seat='-5').status_code, 400)

    def test_inverted_window(self):
        response = self.post_request(earliest_time='10:00', latest_time='09:00')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'invalid_input')

    def test_duplicate_is_conflict(self):
        self.post_request()
        self.assertEqual(self.post_request().status_code, 409)

    def test_cancel_and_fulfill(self):
        request_id = self.post_request().data['ride_request']['id']

        response = self.client.post(f'/api/passenger/ride-requests/{request_id}/cancel/')
        self.assertEqual(response.data['ride_request']['status'], RideRequestStatus.CANCELLED)

        response = self.client.post(f'/api/passenger/ride-requests/{request_id}/fulfill/')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'invalid_state')


class PassengerReviewViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.alice = make_passenger('alice')
        self.client.force_authenticate(user=self.alice)
        self.driver, profile = make_driver('driver_one')
        self.booking = make_booking(make_ride(profile), self.alice, status=BookingStatus.COMPLETED)

    def test_review_flow(self):
        response = self.client.get(f'/api/passenger/reviews/can-review/{self.booking.id}/')
        self.assertTrue(response.data['can_review'])

        response = self.client.post('/api/passenger/reviews/', {
            'booking_id': self.booking.id, 'rating': 4, 'tags': ['clean car'], 'comment': 'Nice',
        }, format='json')
        self.assertEqual(response.status_code, 201)

        response = self.client.post('/api/passenger/reviews/', {
            'booking_id': self.booking.id, 'rating': 5,
        }, format='json')
        self.assertEqual(response.status_code, 409)

        response = self.client.get(f'/api/passenger/reviews/users/{self.driver.id}/stats/')
        self.assertEqual(response.data['total_reviews'], 1)

    def test_review_reads(self):
        self.client.post('/api/passenger/reviews/', {
            'booking_id': self.booking.id, 'rating': 5, 'tags': ['on time'],
        }, format='json')

        response = self.client.get('/api/passenger/reviews/mine/')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['reviews'][0]['reviewee']['id'], self.driver.id)

        response = self.client.get(f'/api/passenger/reviews/users/{self.driver.id}/')
        self.assertEqual(response.data['reviews'][0]['tags'], ['on time'])

        response = self.client.get(f'/api/passenger/reviews/bookings/{self.booking.id}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['rating'], 5)

        self.client.force_authenticate(user=make_passenger('mallory'))
        response = self.client.get(f'/api/passenger/reviews/bookings/{self.booking.id}/')
        self.assertEqual(response.status_code, 403)

    def test_rating_bounds(self):
        response = self.client.post('/api/passenger/reviews/', {
            'booking_id': self.booking.id, 'rating': 6,
        }, format='json')
        self.assertEqual(response.status_code, 400)
